from pydantic_settings import BaseSettings

from salesdesk.core.modules.user.models import Role


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # mongodb://host:port/dbname, the path selects the database
    host: str
    port: int
    debug: bool
    cors_origins: list[str] = []
    database_timeout_ms: int = 5000  # Driver-level bound for every store operation
    session_ttl_hours: int = 24
    session_token_bytes: int = 32  # 32 bytes = 256 bits of entropy
    max_session_extension_hours: int = 720
    bcrypt_rounds: int = 12
    signup_allowed_roles: list[Role] = [Role.SALES]  # Roles a visitor may pick on self-service signup
    # Bootstrap admin, created on startup when both are set and no admin exists
    admin_email: str | None = None
    admin_password: str | None = None
    admin_name: str = "Admin User"

    model_config = {
        "env_file": [".env"],
        "env_prefix": "SALESDESK_",
        "extra": "ignore",
    }
