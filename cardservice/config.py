"""
Card Service — Application Configuration
==========================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
       Fails fast if a value is out of range, before any connection is opened.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and returns a Settings object.
Who:   Built once by the entry point and handed to the store adapter, the
       application factory and the server lifecycle.
When:  Constructed once at process start; never mutated afterwards.

Design Decision:
    There is no module-level `settings` singleton. The entry point builds one
    Settings instance and passes it explicitly to every component that needs
    it, so tests can run several differently-configured apps side by side.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Bundled HTML templates ship inside the package
DEFAULT_TEMPLATE_DIR = str(Path(__file__).resolve().parent / "templates")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for a local MongoDB on the
    standard port. Attributes are grouped by concern for readability.
    """

    # ── Document Store ────────────────────────────────────────────────────
    # What: MongoDB connection string
    # Format: mongodb://[user:password@]host[:port]/
    mongo_uri: str = Field(
        default="mongodb://localhost:27017/",
        description="MongoDB connection URI",
    )
    database_name: str = Field(default="devDb", min_length=1)
    collection_name: str = Field(default="cards", min_length=1)

    # What: Upper bound on the startup connection probe (seconds)
    # Failure within this window is fatal; the process exits.
    connect_timeout: float = Field(default=10.0, gt=0, le=120)

    # What: Budget for a single store call made while serving a request
    request_timeout: float = Field(default=5.0, gt=0, le=120)

    # ── HTTP Listener ─────────────────────────────────────────────────────
    listen_host: str = Field(default="localhost")
    listen_port: int = Field(default=8080, ge=1, le=65535)

    # What: Idle keep-alive window for client connections (seconds)
    read_timeout: float = Field(default=5.0, gt=0, le=300)

    # What: Drain deadline on shutdown; in-flight requests still running
    # after this many seconds are cut off
    write_timeout: float = Field(default=5.0, gt=0, le=300)

    # ── Rendering ─────────────────────────────────────────────────────────
    template_dir: str = Field(default=DEFAULT_TEMPLATE_DIR)

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @property
    def listen_address(self) -> str:
        """host:port pair, as shown in startup logs."""
        return f"{self.listen_host}:{self.listen_port}"

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # MONGO_URI and mongo_uri both work
    }
