"""Client configuration schema using Pydantic."""

from pydantic import BaseModel, Field


class AuthConfig(BaseModel):
    """Credentials sent as basic auth with every request when both are set."""
    username: str = ""
    password: str = Field(default="", repr=False)


class NotificationsConfig(BaseModel):
    """Push notification dispatch."""
    isolate_handler_errors: bool = False  # Log a failing handler and keep dispatching


class LoggingConfig(BaseModel):
    """Library logging (loguru). Disabled unless enabled here or by configure_logging()."""
    enabled: bool = False
    level: str = "INFO"


class ClientConfig(BaseModel):
    """Root configuration for a shellyrpc client.

    Built by the caller; the library reads no environment variables or files.
    """
    timeout: float | None = 10.0  # Seconds, handed to the transport; None waits forever
    auth: AuthConfig = Field(default_factory=AuthConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
