"""
Configuration for the Clinic Directory API.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for every field so the
service starts with no configuration at all in development.  Tests
construct their own ``Settings`` instance and hand it to
``create_app`` instead of mutating the module‑level one.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Clinic Directory API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Optional path of a log file.  When empty, logs go to the console only.
    log_file: str = os.getenv("LOG_FILE", "")

    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Path of the SQLite database holding clinics, doctors and health
    # services.  Relative paths are resolved against the project root by
    # the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "clinic_directory.db")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before this module is imported.
settings = Settings()
