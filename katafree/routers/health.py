from fastapi import APIRouter, Request

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health(request: Request):
    return {"ok": True, "env": request.app.state.settings.app_env}
