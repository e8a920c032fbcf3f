from salesdesk.web.routers.auth import router as auth_router
from salesdesk.web.routers.health import router as health_router
from salesdesk.web.routers.profile import router as profile_router
from salesdesk.web.routers.sessions import router as sessions_router
from salesdesk.web.routers.users import router as users_router

__all__ = [
    "auth_router",
    "health_router",
    "profile_router",
    "sessions_router",
    "users_router",
]
