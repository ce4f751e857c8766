"""
FastAPI routers grouped by domain (auth, tasks, webhooks, health).

Each module exposes an APIRouter that is included by app.create_app(). Routers
translate HTTP into service calls; services raise AppError subclasses which
the application's exception handlers turn into JSON error responses.
"""
