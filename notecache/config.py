"""
NoteCache - Application Configuration
=======================================

What:  Typed settings for the note server, loaded with Pydantic Settings.
How:   Values come from constructor keywords (the CLI passes its flags this
       way), then NOTECACHE_* environment variables, then a local .env file.
Who:   Built once by the CLI and handed to create_app(); tests build their
       own instance pointing at a temporary directory.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Shipped alongside the package so the form is available after install
DEFAULT_UPLOAD_FORM = Path(__file__).resolve().parent / "static" / "UploadForm.html"


class Settings(BaseSettings):
    """
    Runtime settings for one server process.

    Attributes are grouped by concern:
        Server:  host, port
        Storage: cache_dir, note_suffix
        Static:  upload_form_path
        Logging: log_level
    """

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port")

    # ── Storage ───────────────────────────────────────────────────────────
    # One <name><note_suffix> file per note lives directly under this path
    cache_dir: Path = Field(default=Path("./cache"), description="Note storage directory")
    note_suffix: str = Field(default=".txt")

    # ── Static ────────────────────────────────────────────────────────────
    upload_form_path: Path = Field(default=DEFAULT_UPLOAD_FORM)

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="NOTECACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("note_suffix")
    @classmethod
    def validate_note_suffix(cls, v: str) -> str:
        if not v.startswith(".") or "/" in v or "\\" in v:
            raise ValueError(f"Invalid note_suffix '{v}'. Must look like '.txt'")
        return v

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


def load_settings(
    host: Optional[str] = None,
    port: Optional[int] = None,
    cache_dir: Optional[str] = None,
    log_level: Optional[str] = None,
) -> Settings:
    """
    Build Settings, letting explicitly supplied values win over the environment.

    None means "not given" so the environment/.env (or the field default)
    still applies for that field.
    """
    overrides = {
        "host": host,
        "port": port,
        "cache_dir": cache_dir,
        "log_level": log_level,
    }
    return Settings(**{k: v for k, v in overrides.items() if v is not None})
