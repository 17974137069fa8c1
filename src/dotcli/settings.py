"""Environment-based configuration using pydantic-settings.

``AppSettings`` carries process configuration (logging, settings file
location, help width). ``OutputSignals`` reads the environment signals that
take part in output style selection.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OutputStyle(str, Enum):
    """Renderer styles known to the output orchestrator."""
    RICH = "rich"
    PLAIN = "plain"
    DUMP = "dump"
    JSON = "json"

    @classmethod
    def coerce(cls, value) -> Optional["OutputStyle"]:
        """Return the matching style, or None for unknown/empty values."""
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        text = str(value).strip().lower()
        # "diagnostic" is accepted as a spelling of the dump style
        if text == "diagnostic":
            return cls.DUMP
        try:
            return cls(text)
        except ValueError:
            return None


_FALSE_VALUES = {"", "0", "false", "no", "off"}


def _truthy(value) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in _FALSE_VALUES


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="DOTCLI_", case_sensitive=False, extra="ignore"
    )

    # Logging
    log_level: str = Field(default="WARNING", description="Application log level")
    log_format: str = Field(default="text", description="Log format: json or text")

    # Settings store
    settings_file: Path = Field(
        default_factory=lambda: Path.home() / ".dotcli" / "settings.yaml",
        description="YAML file holding user settings passed to command handlers",
    )

    # Help rendering
    help_width: int = Field(default=80, ge=20, description="Column width for help output")


class OutputSignals(BaseSettings):
    """Environment signals consulted when choosing an output style."""

    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", populate_by_name=True
    )

    no_color: bool = Field(
        default=False,
        validation_alias=AliasChoices("NO_COLOR", "DOTCLI_NO_COLOR"),
        description="Any non-empty value other than 0/false forces plain output",
    )
    style: Optional[OutputStyle] = Field(
        default=None,
        validation_alias="DOTCLI_STYLE",
        description="Explicit style: rich, plain, dump or json",
    )
    test_mode: bool = Field(
        default=False,
        validation_alias="DOTCLI_TEST_MODE",
        description="Forces plain output for reproducible test runs",
    )

    @field_validator("no_color", "test_mode", mode="before")
    @classmethod
    def _parse_flag(cls, v):
        return _truthy(v)

    @field_validator("style", mode="before")
    @classmethod
    def _parse_style(cls, v):
        return OutputStyle.coerce(v)
