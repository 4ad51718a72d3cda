"""CRM routes: clients, meetings, tasks and reports.

Meetings and tasks reference a client by id only. Deleting a client leaves
them in place.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from src.api.deps import get_storage
from src.auth.security import ensure_owner, require_user
from src.db.models import User
from src.schemas.schemas import (
    ClientCreate,
    ClientResponse,
    ClientUpdate,
    MeetingCreate,
    MeetingResponse,
    MeetingUpdate,
    ReportSummary,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from src.services.reports import build_summary
from src.services.storage import StorageService

router = APIRouter(prefix="/api", tags=["CRM"])


def _changes(payload) -> dict:
    """Fields present in a PATCH body. Explicit nulls only clear nullable columns."""
    nullable = {"location", "details", "reminder_time", "phone", "notes", "due_date", "client_id"}
    return {
        k: v
        for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in nullable
    }


async def _check_client(storage: StorageService, user: User, client_id: Optional[int]) -> None:
    if client_id is None:
        return
    client = await storage.get_client(client_id)
    if client is None or client.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Client {client_id} does not exist",
        )


# ============== Clients ==============


@router.get("/clients", response_model=list[ClientResponse], summary="List clients")
async def list_clients(
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await storage.list_clients(user.id)


@router.post(
    "/clients",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a client",
)
async def create_client(
    payload: ClientCreate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await storage.create_client({"user_id": user.id, **payload.model_dump()})


@router.get("/clients/{client_id}", response_model=ClientResponse, summary="Get a client")
async def get_client(
    client_id: int,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return ensure_owner(await storage.get_client(client_id), user, "Client", client_id)


@router.patch("/clients/{client_id}", response_model=ClientResponse, summary="Update a client")
async def update_client(
    client_id: int,
    payload: ClientUpdate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    ensure_owner(await storage.get_client(client_id), user, "Client", client_id)
    return await storage.update_client(client_id, _changes(payload))


@router.delete(
    "/clients/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a client",
    description="The client's meetings and tasks are not deleted.",
)
async def delete_client(
    client_id: int,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    ensure_owner(await storage.get_client(client_id), user, "Client", client_id)
    await storage.delete_client(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/clients/{client_id}/meetings",
    response_model=list[MeetingResponse],
    summary="List a client's meetings",
)
async def list_client_meetings(
    client_id: int,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    ensure_owner(await storage.get_client(client_id), user, "Client", client_id)
    return await storage.list_meetings_by_client(client_id)


@router.get(
    "/clients/{client_id}/tasks",
    response_model=list[TaskResponse],
    summary="List a client's tasks",
)
async def list_client_tasks(
    client_id: int,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    ensure_owner(await storage.get_client(client_id), user, "Client", client_id)
    return await storage.list_tasks_by_client(client_id)


# ============== Meetings ==============


@router.get("/meetings", response_model=list[MeetingResponse], summary="List meetings")
async def list_meetings(
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await storage.list_meetings(user.id)


@router.post(
    "/meetings",
    response_model=MeetingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule a meeting",
)
async def create_meeting(
    payload: MeetingCreate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    await _check_client(storage, user, payload.client_id)
    return await storage.create_meeting({"user_id": user.id, **payload.model_dump()})


@router.get("/meetings/{meeting_id}", response_model=MeetingResponse, summary="Get a meeting")
async def get_meeting(
    meeting_id: int,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return ensure_owner(await storage.get_meeting(meeting_id), user, "Meeting", meeting_id)


@router.patch("/meetings/{meeting_id}", response_model=MeetingResponse, summary="Update a meeting")
async def update_meeting(
    meeting_id: int,
    payload: MeetingUpdate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    ensure_owner(await storage.get_meeting(meeting_id), user, "Meeting", meeting_id)
    values = _changes(payload)
    if "client_id" in values:
        if values["client_id"] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A meeting must belong to a client",
            )
        await _check_client(storage, user, values["client_id"])
    return await storage.update_meeting(meeting_id, values)


@router.delete(
    "/meetings/{meeting_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a meeting",
)
async def delete_meeting(
    meeting_id: int,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    ensure_owner(await storage.get_meeting(meeting_id), user, "Meeting", meeting_id)
    await storage.delete_meeting(meeting_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============== Tasks ==============


@router.get("/tasks", response_model=list[TaskResponse], summary="List tasks")
async def list_tasks(
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return await storage.list_tasks(user.id)


@router.post(
    "/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
async def create_task(
    payload: TaskCreate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    await _check_client(storage, user, payload.client_id)
    return await storage.create_task({"user_id": user.id, **payload.model_dump()})


@router.get("/tasks/{task_id}", response_model=TaskResponse, summary="Get a task")
async def get_task(
    task_id: int,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    return ensure_owner(await storage.get_task(task_id), user, "Task", task_id)


@router.patch("/tasks/{task_id}", response_model=TaskResponse, summary="Update a task")
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    ensure_owner(await storage.get_task(task_id), user, "Task", task_id)
    values = _changes(payload)
    await _check_client(storage, user, values.get("client_id"))
    return await storage.update_task(task_id, values)


@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a task",
)
async def delete_task(
    task_id: int,
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    ensure_owner(await storage.get_task(task_id), user, "Task", task_id)
    await storage.delete_task(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============== Reports ==============


@router.get(
    "/reports/summary",
    response_model=ReportSummary,
    summary="CRM summary report",
    description="Meetings by status and weekday, tasks by priority and completion, clients by status.",
)
async def report_summary(
    from_date: Optional[date] = Query(None, alias="from"),
    to_date: Optional[date] = Query(None, alias="to"),
    user: User = Depends(require_user),
    storage: StorageService = Depends(get_storage),
):
    if from_date and to_date and from_date > to_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="'from' must not be after 'to'",
        )
    return build_summary(
        await storage.list_clients(user.id),
        await storage.list_meetings(user.id),
        await storage.list_tasks(user.id),
        from_date,
        to_date,
    )
