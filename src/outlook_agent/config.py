"""Application configuration management."""

import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from outlook_agent.applescript.runner import (
    DEFAULT_APP_NAME,
    DEFAULT_APP_PATH,
    DEFAULT_LAUNCH_SETTLE_SECONDS,
    AutomationRunner,
)
from outlook_agent.attachments import DEFAULT_MAX_ATTACHMENT_BYTES, PathGuard


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="OUTLOOK_AGENT_",
        env_file=[
            ".env",  # Project-level defaults (lower priority)
            Path.home() / ".config" / "outlook-agent" / ".env",  # User config (higher priority)
        ],
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Attachment security
    allowed_attachment_roots: str = Field(
        default="",
        validation_alias=AliasChoices(
            "OUTLOOK_AGENT_ALLOWED_ATTACHMENT_ROOTS", "ALLOWED_ATTACHMENT_ROOTS"
        ),
        description="Directories attachments must live under, separated by os.pathsep "
        "(empty: current working directory)",
    )
    max_attachment_bytes: int = Field(
        default=DEFAULT_MAX_ATTACHMENT_BYTES,
        ge=0,
        validation_alias=AliasChoices(
            "OUTLOOK_AGENT_MAX_ATTACHMENT_BYTES", "MAX_ATTACHMENT_BYTES"
        ),
        description="Largest attachment accepted, in bytes",
    )

    # Outlook
    app_name: str = Field(default=DEFAULT_APP_NAME, description="Target application name")
    app_path: Path | None = Field(
        default=DEFAULT_APP_PATH, description="Application bundle used for the install check"
    )
    launch_settle_seconds: float = Field(
        default=DEFAULT_LAUNCH_SETTLE_SECONDS,
        ge=0.0,
        description="Seconds to wait after launching Outlook",
    )
    script_timeout_seconds: float | None = Field(
        default=None,
        gt=0.0,
        description="Timeout per AppleScript call (unset: wait indefinitely)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Path = Field(
        default=Path.home() / "Library" / "Logs",
        description="Directory for log files",
    )
    log_rotation_size_mb: int = Field(
        default=5, ge=1, description="Max size per log file in MB before rotation"
    )
    log_backup_count: int = Field(
        default=3, ge=0, description="Number of rotated log files to keep"
    )

    @property
    def attachment_roots(self) -> list[Path]:
        """Allowed attachment roots, defaulting to the current working directory."""
        roots = [r.strip() for r in self.allowed_attachment_roots.split(os.pathsep)]
        roots = [r for r in roots if r]
        if not roots:
            return [Path.cwd()]
        return [Path(r).expanduser() for r in roots]

    def path_guard(self) -> PathGuard:
        """Build a PathGuard from the attachment settings."""
        return PathGuard(self.attachment_roots, self.max_attachment_bytes)

    def runner(self) -> AutomationRunner:
        """Build an AutomationRunner from the Outlook settings."""
        return AutomationRunner(
            self.app_name,
            self.app_path,
            launch_settle_seconds=self.launch_settle_seconds,
            timeout=self.script_timeout_seconds,
        )
