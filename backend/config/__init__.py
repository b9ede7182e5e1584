"""Backend configuration module"""

from .app_config import (
    DEFAULT_DATABASE_URL,
    PROJECT_ROOT,
    AppConfig,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "DEFAULT_DATABASE_URL",
    "PROJECT_ROOT",
    "load_app_config",
]
