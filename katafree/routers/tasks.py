from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from katafree.routers.deps import current_identity, get_task_service
from katafree.schemas import TaskCreateRequest, TaskPatchRequest
from katafree.services.session_service import Identity
from katafree.services.task_service import TaskService

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("")
def list_tasks(identity: Identity = Depends(current_identity), service: TaskService = Depends(get_task_service)):
    return service.list_tasks(identity)


@router.post("")
def create_task(
    payload: Optional[TaskCreateRequest] = None,
    identity: Identity = Depends(current_identity),
    service: TaskService = Depends(get_task_service),
):
    body = payload or TaskCreateRequest()
    return service.create(identity, title=body.title, schedule=body.schedule, enabled=body.enabled)


@router.patch("/{task_id}")
def patch_task(
    task_id: str,
    payload: Optional[TaskPatchRequest] = None,
    identity: Identity = Depends(current_identity),
    service: TaskService = Depends(get_task_service),
):
    fields = payload.model_dump(exclude_unset=True) if payload else {}
    return service.patch(identity, task_id, fields)


@router.delete("/{task_id}")
def delete_task(task_id: str, identity: Identity = Depends(current_identity), service: TaskService = Depends(get_task_service)):
    return service.delete(identity, task_id)
