"""Task API router.

Thin boundary over TaskService:
- Caller identity via the X-User-ID middleware
- Payload validation via Pydantic schemas
- Service injection via FastAPI Depends
- Domain errors rendered by the app-level TaskTrackerError handler
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from api.middleware import require_caller
from verticals.tasks.models.schemas import (
    ApiResponse,
    ChecklistToggle,
    StatusChange,
    TaskCreate,
    TaskUpdate,
    Window,
)
from verticals.tasks.service import TaskService, get_task_service

router = APIRouter()


# ============================================================================
# Queries
# ============================================================================

@router.get("", response_model=ApiResponse)
async def filter_tasks(
    filter: Window = Query(Window.THIS_WEEK),
    caller_id: UUID = Depends(require_caller),
    service: TaskService = Depends(get_task_service),
):
    """Tasks the caller owns or is assigned to, created in the window."""
    tasks = await service.filter_by_window(caller_id, filter)
    if not tasks:
        return ApiResponse(data=[], message="No tasks found for the selected period")
    return ApiResponse(data=tasks, message="Tasks fetched successfully")


@router.get("/shared/{task_id}", response_model=ApiResponse)
async def get_shared_task(
    task_id: UUID,
    service: TaskService = Depends(get_task_service),
):
    """Read-only view for share links. No caller required."""
    task = await service.get_shared(task_id)
    return ApiResponse(data=task, message="Task fetched successfully")


@router.get("/analytics", response_model=ApiResponse)
async def get_analytics(
    caller_id: UUID = Depends(require_caller),
    service: TaskService = Depends(get_task_service),
):
    """The caller's workload counters."""
    analytics = await service.get_analytics(caller_id)
    return ApiResponse(data=analytics, message="Analytics fetched successfully")


@router.post("/analytics/reconcile", response_model=ApiResponse)
async def reconcile_analytics(
    caller_id: UUID = Depends(require_caller),
    service: TaskService = Depends(get_task_service),
):
    """Recompute the caller's counters from their live task set."""
    result = await service.reconcile_analytics(caller_id)
    return ApiResponse(data=result, message="Analytics reconciled")


# ============================================================================
# Mutations
# ============================================================================

@router.post("", status_code=201, response_model=ApiResponse)
async def create_task(
    request: TaskCreate,
    caller_id: UUID = Depends(require_caller),
    service: TaskService = Depends(get_task_service),
):
    task = await service.create(caller_id, request)
    return ApiResponse(data=task, message="Task created successfully")


@router.patch("/status", response_model=ApiResponse)
async def change_task_status(
    request: StatusChange,
    caller_id: UUID = Depends(require_caller),
    service: TaskService = Depends(get_task_service),
):
    task = await service.change_status(caller_id, request.task_id, request.status)
    return ApiResponse(data=task, message="Task status updated successfully")


@router.patch("/checklist", response_model=ApiResponse)
async def toggle_checklist_item(
    request: ChecklistToggle,
    caller_id: UUID = Depends(require_caller),
    service: TaskService = Depends(get_task_service),
):
    task = await service.toggle_checklist_item(caller_id, request.task_id, request.index)
    return ApiResponse(data=task, message="Task checklist updated successfully")


@router.patch("/{task_id}", response_model=ApiResponse)
async def edit_task(
    task_id: UUID,
    request: TaskUpdate,
    caller_id: UUID = Depends(require_caller),
    service: TaskService = Depends(get_task_service),
):
    """Partial update; omitted fields stay unchanged."""
    task = await service.edit(caller_id, task_id, request)
    return ApiResponse(data=task, message="Task updated successfully")


@router.delete("/{task_id}", response_model=ApiResponse)
async def delete_task(
    task_id: UUID,
    caller_id: UUID = Depends(require_caller),
    service: TaskService = Depends(get_task_service),
):
    await service.delete(caller_id, task_id)
    return ApiResponse(data=None, message="Task deleted successfully")
