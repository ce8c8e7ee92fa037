"""VidEmbed Configuration Settings."""

from __future__ import annotations

import os
from enum import StrEnum
from functools import cached_property, lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from vidembed.utils.logging import _get_logger

__all__ = [
    "DEFAULT_ASPECT_PCT",
    "FailAction",
    "LogLevel",
    "MaxResolution",
    "VidEmbedConfig",
    "get_config",
]

_log = _get_logger(__name__)

DEFAULT_ASPECT_PCT = 56.25  # 16:9

DEFAULT_WRAP_STYLE = (
    "position:relative;margin:1em 0;padding-bottom:{pct}%;height:0;overflow:hidden;"
)
DEFAULT_FRAME_STYLE = (
    "position:absolute;top:0;left:0;width:100%;height:100%;border:none;"
)


def get_data_path() -> Path:
    """Get the data directory from the environment or the default location."""
    return Path(os.getenv("VIDEMBED_DATA_PATH", "./data")).resolve()


def find_yaml_config_file() -> Path:
    """Find the YAML configuration file in the data path.

    Returns:
        Path: The path to an existing YAML configuration file or the default location.
    """
    data_path = get_data_path()

    for ext in ("yaml", "yml"):
        yaml_file = data_path / f"config.{ext}"
        if yaml_file.exists():
            _log.debug(f"Using YAML config file: {yaml_file.resolve()}")
            return yaml_file.resolve()
    return data_path / "config.yaml"


class BaseStrEnum(StrEnum):
    """String enumeration with case-insensitive lookup."""

    @classmethod
    def _missing_(cls, value: object) -> BaseStrEnum | None:
        """Handle case-insensitive lookup for enum values.

        Args:
            value: The value to look up in the enumeration

        Returns:
            BaseStrEnum | None: The matching enum member if found, None otherwise
        """
        value = value.lower() if isinstance(value, str) else value
        for member in cls:
            if member.lower() == value:
                return member
        return None

    def __repr__(self) -> str:
        """Return the string value of the enum member."""
        return self.value

    def __str__(self) -> str:
        """Return the string representation of the enum member."""
        return repr(self)


class LogLevel(BaseStrEnum):
    """Enumeration of available logging levels.

    Note: SUCCESS is a custom level used by this application.
    """

    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MaxResolution(BaseStrEnum):
    """Named size presets bounding the dimensions requested from providers."""

    NONE = "none"
    P240 = "240p"
    P360 = "360p"
    P480 = "480p"
    P720 = "720p"
    P1080 = "1080p"
    P1440 = "1440p"
    P2160 = "2160p"

    @property
    def dimensions(self) -> tuple[int, int] | None:
        """Return the (width, height) of the preset, None when unbounded."""
        return _RESOLUTIONS.get(self)


_RESOLUTIONS: dict[MaxResolution, tuple[int, int]] = {
    MaxResolution.P240: (426, 240),
    MaxResolution.P360: (640, 360),
    MaxResolution.P480: (854, 480),
    MaxResolution.P720: (1280, 720),
    MaxResolution.P1080: (1920, 1080),
    MaxResolution.P1440: (2560, 1440),
    MaxResolution.P2160: (3840, 2160),
}


class FailAction(BaseStrEnum):
    """What to render in place of a video whose embed could not be retrieved.

    inline-error: keep the block tag and show the URL with the HTTP status
    html-comment: replace the whole block with an HTML comment
    """

    INLINE_ERROR = "inline-error"
    HTML_COMMENT = "html-comment"


class VidEmbedConfig(BaseSettings):
    """Configuration for the video embed formatter.

    Values are sourced from init arguments, ``VIDEMBED_*`` environment
    variables and the YAML file in the data path, in that order of priority.
    Inconsistent values fall back to their defaults with a warning instead of
    failing validation.
    """

    max_resolution: MaxResolution = Field(
        default=MaxResolution.NONE,
        description="Largest embed size requested from the provider",
    )
    aspect_ratio: str = Field(
        default="auto",
        description=(
            "'auto' to derive the ratio from the embed dimensions, or a fixed "
            "ratio such as '16:9', '4:3' or a height percentage like '75'"
        ),
    )
    wrap_style: str = Field(
        default=DEFAULT_WRAP_STYLE,
        description="Style of the wrapping <div>, {pct} is the aspect percentage",
    )
    frame_style: str = Field(
        default=DEFAULT_FRAME_STYLE,
        description="Style injected into the embedded <iframe>",
    )
    refresh_days: int = Field(
        default=0, description="Days before cached embeds expire (0 never expires)"
    )
    fail_action: FailAction = Field(
        default=FailAction.INLINE_ERROR,
        description="How failed embeds are rendered",
    )
    privacy_enhanced: bool = Field(
        default=False,
        description="Use youtube-nocookie.com and Vimeo's do-not-track flag",
    )
    http_timeout: float = Field(
        default=5.0, gt=0, description="Timeout in seconds for oembed requests"
    )
    css_class: str = Field(
        default="VideoEmbed", description="Class of the wrapper and error markup"
    )
    log_level: LogLevel = Field(
        default=LogLevel.INFO, description="Logging level for the application"
    )

    @cached_property
    def data_path(self) -> Path:
        """Directory holding the cache database, the YAML config and the logs."""
        return get_data_path()

    @property
    def fixed_aspect_pct(self) -> float | None:
        """Return the configured fixed aspect percentage, None when automatic."""
        return _parse_aspect_ratio(self.aspect_ratio)

    @field_validator("max_resolution", mode="before")
    @classmethod
    def _default_unknown_resolution(cls, value: Any) -> Any:
        if value is None or value == "":
            return MaxResolution.NONE
        value = str(value).strip()
        if value.isdigit():
            value = f"{value}p"
        try:
            return MaxResolution(value)
        except ValueError:
            _log.warning(
                f"Unknown max_resolution $$'{value}'$$, falling back to "
                f"$$'{MaxResolution.NONE}'$$"
            )
            return MaxResolution.NONE

    @field_validator("fail_action", mode="before")
    @classmethod
    def _default_unknown_fail_action(cls, value: Any) -> Any:
        value = str(value or "").strip().replace("_", "-")
        try:
            return FailAction(value)
        except ValueError:
            _log.warning(
                f"Unknown fail_action $$'{value}'$$, falling back to "
                f"$$'{FailAction.INLINE_ERROR}'$$"
            )
            return FailAction.INLINE_ERROR

    @field_validator("aspect_ratio", mode="before")
    @classmethod
    def _default_unknown_aspect_ratio(cls, value: Any) -> Any:
        value = str(value or "auto").strip().lower()
        if value != "auto" and _parse_aspect_ratio(value) is None:
            _log.warning(f"Invalid aspect_ratio $$'{value}'$$, falling back to 'auto'")
            return "auto"
        return value

    @field_validator("refresh_days", mode="before")
    @classmethod
    def _clamp_refresh_days(cls, value: Any) -> Any:
        try:
            days = int(value or 0)
        except (TypeError, ValueError):
            _log.warning(f"Invalid refresh_days $$'{value}'$$, caching forever")
            return 0
        if days < 0:
            _log.warning(f"Negative refresh_days $${{{days}}}$$, caching forever")
            return 0
        return days

    def __str__(self) -> str:
        """Creates a human-readable representation of the configuration."""
        return (
            f"VidEmbed Config: max_resolution={self.max_resolution}, "
            f"aspect_ratio={self.aspect_ratio}, refresh_days={self.refresh_days}, "
            f"fail_action={self.fail_action}, privacy={self.privacy_enhanced}, "
            f"DATA_PATH: {self.data_path}, LOG_LEVEL: {self.log_level}"
        )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the order of configuration sources."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=find_yaml_config_file()),
        )

    model_config = SettingsConfigDict(env_prefix="VIDEMBED_", extra="ignore")


def _parse_aspect_ratio(value: str) -> float | None:
    """Convert 'W:H' or a bare percentage into a height percentage."""
    value = value.strip().lower()
    if value in ("", "auto"):
        return None
    try:
        if ":" in value:
            width, height = (float(part) for part in value.split(":", 1))
            pct = 100 * height / width
        else:
            pct = float(value.rstrip("%"))
    except (ValueError, ZeroDivisionError):
        return None
    return round(pct, 2) if pct > 0 else None


@lru_cache(maxsize=1)
def get_config() -> VidEmbedConfig:
    """Get the singleton instance of VidEmbedConfig.

    Returns:
        VidEmbedConfig: The singleton configuration instance.
    """
    return VidEmbedConfig()
