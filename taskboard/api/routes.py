"""HTTP endpoints for auth status, calendar events/sync and the task board."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from taskboard.core.board import QUADRANT_TITLES, BoardService
from taskboard.core.session import SessionManager, project_session
from taskboard.core.sync_service import CalendarSyncService, SyncStatus
from taskboard.data.models import Grant
from taskboard.ports.calendar_port import CalendarAuthError, CalendarError, CalendarPort

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ---------------------------------------------------------------------------
# Dependencies — wired in create_app(), overridable in tests
# ---------------------------------------------------------------------------


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_calendar(request: Request) -> CalendarPort:
    return request.app.state.calendar


def get_sync_service(request: Request) -> CalendarSyncService:
    return request.app.state.sync_service


def get_board_service(request: Request) -> BoardService:
    return request.app.state.board_service


def get_default_days(request: Request) -> int:
    return request.app.state.default_days


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class GrantRequest(BaseModel):
    access_token: str = Field(min_length=1)
    refresh_token: str | None = None
    expires_at: int | None = None


class MoveRequest(BaseModel):
    status: str
    index: int | None = Field(default=None, ge=0)


class NewTaskRequest(BaseModel):
    text: str = Field(min_length=1)


class UpdateTaskRequest(BaseModel):
    status: str | None = None
    index: int | None = Field(default=None, ge=0)
    quadrant: int | None = None


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/auth/google")
async def auth_status(manager: SessionManager = Depends(get_session_manager)):
    try:
        session = await manager.session()
    except Exception as exc:
        logger.error("Auth check error: %s", exc)
        return JSONResponse(
            status_code=500,
            content={
                "isAuthenticated": False,
                "error": "Failed to check authentication status",
            },
        )
    body: dict[str, Any] = {"isAuthenticated": session is not None}
    if session is not None:
        body["session"] = session
    return body


@router.post("/auth/google/grant")
async def sign_in(
    grant: GrantRequest, manager: SessionManager = Depends(get_session_manager)
) -> dict[str, Any]:
    token = manager.sign_in(
        Grant(
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expires_at=grant.expires_at,
        )
    )
    return {"isAuthenticated": True, "session": project_session(token)}


@router.post("/auth/google/signout")
async def sign_out(manager: SessionManager = Depends(get_session_manager)) -> dict[str, bool]:
    manager.sign_out()
    return {"isAuthenticated": False}


async def _usable_access_token(manager: SessionManager) -> str | None:
    token = await manager.current_token()
    if token is None or not token.is_usable:
        return None
    return token.access_token


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------


@router.get("/calendar/events")
async def calendar_events(
    days: int | None = Query(default=None, ge=1),
    manager: SessionManager = Depends(get_session_manager),
    calendar: CalendarPort = Depends(get_calendar),
    default_days: int = Depends(get_default_days),
) -> dict[str, Any]:
    access_token = await _usable_access_token(manager)
    if access_token is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        listing = await calendar.list_events(access_token, days or default_days)
    except CalendarAuthError as exc:
        raise HTTPException(status_code=401, detail="Unauthorized") from exc
    except CalendarError as exc:
        logger.error("Calendar API Error: %s", exc)
        raise HTTPException(status_code=500, detail="Internal Server Error") from exc

    return {
        "events": [event.to_dict() for event in listing.events],
        "colors": listing.colors,
    }


_SYNC_HTTP_STATUS = {
    SyncStatus.SUCCESS: 200,
    SyncStatus.SKIPPED: 200,
    SyncStatus.AUTH_REQUIRED: 401,
    SyncStatus.FETCH_FAILED: 502,
}


@router.post("/calendar/sync")
async def calendar_sync(
    days: int | None = Query(default=None, ge=1),
    manager: SessionManager = Depends(get_session_manager),
    sync_service: CalendarSyncService = Depends(get_sync_service),
) -> JSONResponse:
    access_token = await _usable_access_token(manager)
    result = await sync_service.sync(access_token, days)

    body: dict[str, Any] = {
        "status": result.status.value,
        "stored": result.stored,
        "tasks": [task.to_dict() for task in result.tasks],
    }
    if result.error_message:
        body["error"] = result.error_message
    return JSONResponse(status_code=_SYNC_HTTP_STATUS[result.status], content=body)


@router.get("/calendar/tasks")
async def calendar_tasks(
    sync_service: CalendarSyncService = Depends(get_sync_service),
) -> dict[str, Any]:
    return {
        "tasks": [task.to_dict() for task in sync_service.list_tasks()],
        "syncInProgress": sync_service.sync_in_progress,
    }


@router.patch("/calendar/tasks/{task_id}")
async def move_calendar_task(
    task_id: str,
    move: MoveRequest,
    sync_service: CalendarSyncService = Depends(get_sync_service),
) -> dict[str, Any]:
    try:
        task = sync_service.move_task(task_id, move.status, move.index)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if task is None:
        raise HTTPException(status_code=404, detail=f"No calendar task {task_id!r}")
    return task.to_dict()


# ---------------------------------------------------------------------------
# Manual board
# ---------------------------------------------------------------------------


@router.get("/tasks")
async def list_board_tasks(
    board: BoardService = Depends(get_board_service),
) -> dict[str, Any]:
    return {"tasks": [task.to_dict() for task in board.list_tasks()]}


@router.get("/tasks/matrix")
async def board_matrix(
    board: BoardService = Depends(get_board_service),
) -> dict[str, Any]:
    quadrants = []
    for number, tasks in board.tasks_by_quadrant().items():
        title, subtitle = QUADRANT_TITLES[number]
        quadrants.append(
            {
                "quadrant": number,
                "title": title,
                "subtitle": subtitle,
                "tasks": [task.to_dict() for task in tasks],
            }
        )
    return {"quadrants": quadrants}


@router.post("/tasks", status_code=201)
async def add_board_task(
    new_task: NewTaskRequest,
    board: BoardService = Depends(get_board_service),
) -> dict[str, Any]:
    try:
        task = board.add_task(new_task.text)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return task.to_dict()


@router.patch("/tasks/{task_id}")
async def update_board_task(
    task_id: str,
    update: UpdateTaskRequest,
    board: BoardService = Depends(get_board_service),
) -> dict[str, Any]:
    if update.status is None and update.quadrant is None:
        raise HTTPException(status_code=422, detail="Nothing to update")
    if update.quadrant is not None and update.quadrant not in QUADRANT_TITLES:
        raise HTTPException(
            status_code=422, detail=f"Quadrant must be 1-4, got {update.quadrant}"
        )

    try:
        task = None
        if update.status is not None:
            task = board.move_task(task_id, update.status, update.index)
            if task is None:
                raise HTTPException(status_code=404, detail=f"No task {task_id!r}")
        if update.quadrant is not None:
            task = board.set_quadrant(task_id, update.quadrant)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    if task is None:
        raise HTTPException(status_code=404, detail=f"No task {task_id!r}")
    return task.to_dict()


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_board_task(
    task_id: str,
    board: BoardService = Depends(get_board_service),
) -> Response:
    if not board.delete_task(task_id):
        raise HTTPException(status_code=404, detail=f"No task {task_id!r}")
    return Response(status_code=204)


@router.delete("/tasks")
async def clear_board(board: BoardService = Depends(get_board_service)) -> dict[str, bool]:
    return {"cleared": board.clear()}
