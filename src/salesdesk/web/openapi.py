from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

# Endpoints reachable without a bearer token
PUBLIC_ENDPOINTS = {
    ("POST", "/api/login"),
    ("POST", "/api/signup"),
    ("POST", "/api/auth"),
    ("GET", "/api/health"),
    ("GET", "/api/ping"),
}


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="SalesDesk API",
            version="0.1.0",
            summary="Authentication and session management for the SalesDesk field sales application",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "description": "Opaque session token returned by login or signup",
            },
        }

        # Apply security globally, public endpoints opt out below
        openapi_schema["security"] = [{"BearerAuth": []}]

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in PUBLIC_ENDPOINTS:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Invalid credentials", "type": "authentication_error"},
                {"message": "Insufficient permissions", "type": "access_denied"},
                {"message": "User with email 'alice@example.com' already exists", "type": "conflict"},
            ]
        }
    }


class MessageResponse(BaseModel):
    message: str = Field(..., description="Human-readable result")


class RevokeAllResponse(BaseModel):
    message: str = Field(..., description="Human-readable result")
    count: int = Field(..., description="Number of sessions revoked", ge=0)
