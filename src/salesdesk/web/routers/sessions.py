from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from salesdesk.core.modules.session.models import SessionView
from salesdesk.web.deps import AppDep, AuthTokenDep
from salesdesk.web.openapi import ErrorResponse, MessageResponse, RevokeAllResponse

router = APIRouter(tags=["sessions"])


class ExtendSessionRequest(BaseModel):
    """Request to extend the current session."""

    hours: int | None = Field(None, ge=1, description="New lifetime from now, defaults to the session TTL")


@router.get(
    "/sessions",
    summary="List own sessions",
    description="Get the live sessions of the current user, most recently used first.",
    operation_id="listSessions",
    responses={
        200: {"description": "Active sessions"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_sessions(app: AppDep, auth_token: AuthTokenDep) -> list[SessionView]:
    return await app.get_sessions(auth_token)


@router.post(
    "/sessions",
    summary="Extend session",
    description="Push the expiry of the current session out. The token does not change.",
    operation_id="extendSession",
    responses={
        200: {"description": "Session extended"},
        400: {"model": ErrorResponse, "description": "Invalid hours or session could not be extended"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def extend_session(
    app: AppDep, auth_token: AuthTokenDep, extend_data: ExtendSessionRequest | None = None
) -> MessageResponse:
    await app.extend_session(auth_token, extend_data.hours if extend_data else None)
    return MessageResponse(message="Session extended successfully")


@router.delete(
    "/sessions",
    summary="Revoke session",
    description="Revoke the current session, or every session of the current user with all=true.",
    operation_id="revokeSessions",
    responses={
        200: {"description": "Session(s) revoked"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def revoke_sessions(
    app: AppDep,
    auth_token: AuthTokenDep,
    all_sessions: Annotated[bool, Query(alias="all", description="Revoke every session of the user")] = False,
) -> RevokeAllResponse | MessageResponse:
    if all_sessions:
        count = await app.logout_all(auth_token)
        return RevokeAllResponse(message=f"Logged out from {count} devices successfully", count=count)
    await app.logout(auth_token)
    return MessageResponse(message="Session revoked successfully")


@router.delete(
    "/sessions/{session_id}",
    summary="Revoke session by id",
    description="Revoke another session of the current user, e.g. on a lost device.",
    operation_id="revokeSession",
    status_code=204,
    responses={
        204: {"description": "Session revoked"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def revoke_session(session_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.revoke_session(auth_token, session_id)
