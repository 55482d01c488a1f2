"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service runs out of the box against a local SQLite file.  Override
them via environment variables in a deployment.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Student Registry API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    # Optional path of a log file written in addition to the console.
    log_file: str = os.getenv("LOG_FILE", "")

    # Which record store backs the registry: ``sqlite`` (durable) or
    # ``memory`` (lost on restart, useful for demos and tests).
    store_backend: str = os.getenv("STORE_BACKEND", "sqlite").lower()

    # Path to the SQLite database file.  A relative path is resolved
    # against the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "student_registry.db")

    # Seconds a connection waits on a locked database before failing.
    db_timeout: float = float(os.getenv("DB_TIMEOUT", "5.0"))

    # Regular expression a student id must fully match.
    student_id_pattern: str = os.getenv("STUDENT_ID_PATTERN", r"^[A-Za-z0-9_-]{1,64}$")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# must be set before importing this module.
settings = Settings()
