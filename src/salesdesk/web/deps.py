from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from salesdesk.app import App
from salesdesk.core.modules.session.models import AuthToken
from salesdesk.errors import AuthenticationError
from salesdesk.utils import ClientInfo

bearer_scheme = HTTPBearer(auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_auth_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> AuthToken:
    """Extract the token from the Authorization Bearer header.

    Only presence is checked here; every App operation verifies the session itself.
    """
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthenticationError("Invalid or expired session")
    return AuthToken(credentials.credentials)


async def get_client_info(request: Request) -> ClientInfo:
    """Request metadata stored with a new session, for display only."""
    return ClientInfo(
        user_agent=request.headers.get("user-agent") or "Unknown",
        ip_address=request.client.host if request.client else None,
    )


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
AuthTokenDep = Annotated[AuthToken, Depends(get_auth_token)]
ClientInfoDep = Annotated[ClientInfo, Depends(get_client_info)]
