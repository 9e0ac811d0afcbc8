"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API can start without any configuration; override them via the
environment in a production deployment.
"""

import os
from dataclasses import dataclass
from typing import List


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Lofi API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))

    # Path to the SQLite database file, or ``:memory:``.  Relative paths
    # are resolved against the project root by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "lofi.db")

    # Comma‑separated e‑mail addresses that are registered with the
    # admin role.  Everybody else signs up as a regular user.
    admin_emails: str = os.getenv("ADMIN_EMAILS", "")

    # Comma‑separated list of allowed CORS origins.
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    search_limit: int = int(os.getenv("SEARCH_LIMIT", "10"))
    random_playlist_size: int = int(os.getenv("RANDOM_PLAYLIST_SIZE", "10"))

    @property
    def admin_email_list(self) -> List[str]:
        return [email.lower() for email in _split_csv(self.admin_emails)]

    @property
    def cors_origin_list(self) -> List[str]:
        return _split_csv(self.cors_origins) or ["*"]


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before this module is imported.
settings = Settings()
