from typing import Literal

from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from salesdesk.app import AuthResult
from salesdesk.core.modules.user.models import Role
from salesdesk.web.deps import AppDep, AuthTokenDep, ClientInfoDep
from salesdesk.web.openapi import ErrorResponse, RevokeAllResponse

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    """Authentication request."""

    email: str = Field(..., description="Email address, matched case-insensitively")
    password: str = Field(..., description="Password for authentication")


class SignupRequest(BaseModel):
    """Registration request."""

    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address, must not be registered yet")
    password: str = Field(..., description="Password for the new account")
    role: Role | None = Field(None, description="Requested role, defaults to sales")
    code: str | None = Field(None, description="User code, assigned from the role sequence when omitted")


class AuthRequest(BaseModel):
    """Combined login/signup request, selected by type."""

    type: Literal["login", "signup"] = Field(..., description="Which flow to run")
    name: str = Field("", description="Display name (signup only)")
    email: str = Field("", description="Email address")
    password: str = Field("", description="Password")
    role: Role | None = Field(None, description="Requested role (signup only)")
    code: str | None = Field(None, description="User code (signup only)")


@router.post(
    "/login",
    summary="Authenticate user",
    description="Authenticate with email and password to receive a bearer token.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        400: {"model": ErrorResponse, "description": "Email or password missing"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(login_data: LoginRequest, app: AppDep, client: ClientInfoDep) -> AuthResult:
    return await app.login(login_data.email, login_data.password, client)


@router.post(
    "/signup",
    summary="Register user",
    description="Create an account and receive a bearer token for it.",
    operation_id="signup",
    status_code=201,
    responses={
        201: {"description": "User created and logged in"},
        400: {"model": ErrorResponse, "description": "Missing or invalid fields"},
        403: {"model": ErrorResponse, "description": "Requested role not open for signup"},
        409: {"model": ErrorResponse, "description": "Email or code already taken"},
    },
)
async def signup(signup_data: SignupRequest, app: AppDep, client: ClientInfoDep) -> AuthResult:
    return await app.signup(
        signup_data.name, signup_data.email, signup_data.password, client, signup_data.role, signup_data.code
    )


@router.post(
    "/auth",
    summary="Login or signup",
    description="Run the login or the signup flow depending on the type field.",
    operation_id="auth",
    responses={
        200: {"description": "Successfully authenticated"},
        201: {"description": "User created and logged in"},
        400: {"model": ErrorResponse, "description": "Unsupported type or missing fields"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        409: {"model": ErrorResponse, "description": "Email or code already taken"},
    },
)
async def auth(auth_data: AuthRequest, app: AppDep, client: ClientInfoDep, response: Response) -> AuthResult:
    if auth_data.type == "login":
        return await app.login(auth_data.email, auth_data.password, client)

    result = await app.signup(auth_data.name, auth_data.email, auth_data.password, client, auth_data.role, auth_data.code)
    response.status_code = 201
    return result


@router.post(
    "/logout",
    summary="End session",
    description="Invalidate the current authentication session.",
    operation_id="logout",
    status_code=204,
    responses={
        204: {"description": "Successfully logged out"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def logout(app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.logout(auth_token)


@router.post(
    "/logout-all",
    summary="Log out from all devices",
    description="Invalidate every session of the current user, including this one.",
    operation_id="logoutAll",
    responses={
        200: {"description": "All sessions revoked"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def logout_all(app: AppDep, auth_token: AuthTokenDep) -> RevokeAllResponse:
    count = await app.logout_all(auth_token)
    return RevokeAllResponse(message=f"Logged out from {count} devices successfully", count=count)
