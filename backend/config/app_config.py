"""
Application Configuration Management
Handles environment variables, defaults and validation for the API server
"""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Repository root (parent of backend/)
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

load_dotenv(PROJECT_ROOT / ".env", override=False)

DEFAULT_DATABASE_URL = f"sqlite:///{PROJECT_ROOT / 'data' / 'receipts.db'}"
DEFAULT_TEST_DATABASE_URL = (
    f"sqlite:///{Path(tempfile.gettempdir()) / 'receipt_ledger_test.db'}"
)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("true", "1", "yes")


@dataclass
class AppConfig:
    """Application configuration object"""

    database_url: str = DEFAULT_DATABASE_URL
    email_host: str = "imap.gmail.com"
    email_port: int = 993
    email_mailbox: str = "INBOX"
    ingestion_workers: int = 4
    max_upload_mb: int = 10
    cors_origins: list[str] = field(
        default_factory=lambda: ["http://localhost:3000"]
    )
    rate_limit_enabled: bool = True
    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: int = 900
    redis_url: str = "redis://localhost:6379/0"
    trusted_proxies: int = 0
    log_dir: str = str(PROJECT_ROOT / "logs")
    testing: bool = False

    def __post_init__(self):
        """Validate configuration after initialization"""
        self.validate()

    def validate(self):
        """Validate application configuration"""
        if not self.database_url:
            raise ValueError("DATABASE_URL is required")

        if self.email_port <= 0:
            raise ValueError("EMAIL_PORT must be greater than 0")

        if self.ingestion_workers <= 0:
            raise ValueError("INGESTION_WORKERS must be greater than 0")

        if self.max_upload_mb <= 0:
            raise ValueError("MAX_UPLOAD_MB must be greater than 0")

        if self.rate_limit_max_requests <= 0:
            raise ValueError("RATE_LIMIT_MAX_REQUESTS must be greater than 0")

        if self.rate_limit_window_seconds <= 0:
            raise ValueError("RATE_LIMIT_WINDOW_SECONDS must be greater than 0")

        if self.trusted_proxies < 0:
            raise ValueError("TRUSTED_PROXIES cannot be negative")

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


def load_app_config() -> AppConfig:
    """
    Load application configuration from environment variables.

    Environment Variables:
    - TESTING: Test mode; forces TEST_DATABASE_URL (default: false)
    - DATABASE_URL: SQLAlchemy URL (default: SQLite file under data/)
    - TEST_DATABASE_URL: SQLAlchemy URL used when TESTING=true
    - EMAIL_HOST / EMAIL_PORT / EMAIL_MAILBOX: IMAP defaults
    - INGESTION_WORKERS: Thread pool size for message parsing (default: 4)
    - MAX_UPLOAD_MB: Maximum request body size (default: 10)
    - CORS_ORIGINS: Comma-separated list of allowed origins
    - RATE_LIMIT_ENABLED: Enable Redis rate limiting (default: true)
    - RATE_LIMIT_MAX_REQUESTS: Requests per window per IP (default: 100)
    - RATE_LIMIT_WINDOW_SECONDS: Window length (default: 900)
    - REDIS_URL: Redis connection URL for the rate limiter
    - TRUSTED_PROXIES: Reverse proxies in front of the app whose
      X-Forwarded-* headers are trusted (default: 0, headers ignored)
    - LOG_DIR: Directory for rotating log files

    Returns:
        AppConfig object
    """
    testing = _env_bool("TESTING", "false")

    database_url = os.getenv("DATABASE_URL", "").strip() or DEFAULT_DATABASE_URL
    if testing:
        database_url = (
            os.getenv("TEST_DATABASE_URL", "").strip() or DEFAULT_TEST_DATABASE_URL
        )

    cors_env = os.getenv("CORS_ORIGINS", "").strip()
    cors_origins = (
        [origin.strip() for origin in cors_env.split(",") if origin.strip()]
        if cors_env
        else ["http://localhost:3000"]
    )

    return AppConfig(
        database_url=database_url,
        email_host=os.getenv("EMAIL_HOST", "imap.gmail.com"),
        email_port=int(os.getenv("EMAIL_PORT", "993")),
        email_mailbox=os.getenv("EMAIL_MAILBOX", "INBOX"),
        ingestion_workers=int(os.getenv("INGESTION_WORKERS", "4")),
        max_upload_mb=int(os.getenv("MAX_UPLOAD_MB", "10")),
        cors_origins=cors_origins,
        rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", "true"),
        rate_limit_max_requests=int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100")),
        rate_limit_window_seconds=int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900")),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        trusted_proxies=int(os.getenv("TRUSTED_PROXIES", "0")),
        log_dir=os.getenv("LOG_DIR", str(PROJECT_ROOT / "logs")),
        testing=testing,
    )
