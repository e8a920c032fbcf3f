from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel, Field

from salesdesk.core.modules.user.models import Role, UserView
from salesdesk.web.deps import AppDep, AuthTokenDep
from salesdesk.web.openapi import ErrorResponse

router = APIRouter(tags=["users"])


class CreateUserRequest(BaseModel):
    """Request to create a new user."""

    name: str = Field(..., min_length=1, description="Display name")
    email: str = Field(..., min_length=1, description="Email address")
    password: str = Field(..., min_length=1, description="Initial password")
    role: Role = Field(Role.SALES, description="Role of the new user")
    code: str | None = Field(None, description="User code, assigned from the role sequence when omitted")


@router.get(
    "/users",
    summary="List all users",
    description="Get all users in the system, newest first.",
    operation_id="listUsers",
    responses={
        200: {"description": "List of all users"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def list_users(app: AppDep, auth_token: AuthTokenDep) -> list[UserView]:
    return await app.get_all_users(auth_token)


@router.post(
    "/users",
    summary="Create new user",
    description="Create a user account with any role. Only accessible by admin users.",
    operation_id="createUser",
    status_code=201,
    responses={
        201: {"description": "User created successfully"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
        409: {"model": ErrorResponse, "description": "Email or code already taken"},
    },
)
async def create_user(create_data: CreateUserRequest, app: AppDep, auth_token: AuthTokenDep) -> UserView:
    return await app.create_user(
        auth_token, create_data.name, create_data.email, create_data.password, create_data.role, create_data.code
    )


@router.delete(
    "/users/{user_id}",
    summary="Delete user",
    description="Delete a user account and revoke all of its sessions. Admins and managers only.",
    operation_id="deleteUser",
    status_code=204,
    responses={
        204: {"description": "User deleted successfully"},
        400: {"model": ErrorResponse, "description": "Cannot delete yourself"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Insufficient permissions"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def delete_user(user_id: UUID, app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.delete_user(auth_token, user_id)
