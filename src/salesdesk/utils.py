from datetime import UTC, datetime

from pydantic import BaseModel


def now() -> datetime:
    return datetime.now(UTC)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def mask_token(token: str) -> str:
    """Show only the first 8 characters of a bearer token."""
    return token[:8] + "..."


class ClientInfo(BaseModel):
    """Request metadata captured at session issuance, for display only."""

    user_agent: str = "Unknown"
    ip_address: str | None = None
