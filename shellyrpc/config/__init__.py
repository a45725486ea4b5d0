"""Configuration module for shellyrpc."""

from shellyrpc.config.schema import AuthConfig, ClientConfig, LoggingConfig, NotificationsConfig

__all__ = ["AuthConfig", "ClientConfig", "LoggingConfig", "NotificationsConfig"]
