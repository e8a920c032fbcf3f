from fastapi import APIRouter
from pydantic import BaseModel, Field

from salesdesk.core.modules.user.models import UserView
from salesdesk.web.deps import AppDep, AuthTokenDep
from salesdesk.web.openapi import ErrorResponse

router = APIRouter(tags=["profile"])


class ChangePasswordRequest(BaseModel):
    """Current password for re-verification plus its replacement."""

    old_password: str = Field(..., min_length=1, description="Password the caller signed in with")
    new_password: str = Field(..., min_length=1, description="Replacement, at least 6 characters without spaces")


@router.get(
    "/profile",
    summary="Signed-in user",
    description="Name, email, role and user code of the account that owns the bearer token.",
    operation_id="getProfile",
    responses={
        200: {"description": "Account behind the token"},
        401: {"model": ErrorResponse, "description": "Missing, unknown or expired token"},
    },
)
async def get_profile(app: AppDep, auth_token: AuthTokenDep) -> UserView:
    return await app.get_current_user(auth_token)


@router.post(
    "/profile/change-password",
    summary="Change password and sign out other devices",
    description=(
        "Replace the caller's password. The session that made the request stays valid; "
        "all other sessions of the account are revoked."
    ),
    operation_id="changePassword",
    status_code=204,
    responses={
        204: {"description": "Password replaced, other sessions revoked"},
        400: {"model": ErrorResponse, "description": "Current password wrong or new password rejected"},
        401: {"model": ErrorResponse, "description": "Missing, unknown or expired token"},
    },
)
async def change_password(request: ChangePasswordRequest, app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.change_password(auth_token, request.old_password, request.new_password)
