"""Tests for settings configuration utilities."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from vidembed.config.settings import (
    DEFAULT_WRAP_STYLE,
    FailAction,
    LogLevel,
    MaxResolution,
    VidEmbedConfig,
    find_yaml_config_file,
)


@pytest.fixture
def isolated_data_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the data path at an empty directory without a YAML file."""
    monkeypatch.setenv("VIDEMBED_DATA_PATH", str(tmp_path))
    return tmp_path


def test_find_yaml_config_file_prefers_data_path(isolated_data_path: Path) -> None:
    """Test that find_yaml_config_file looks inside VIDEMBED_DATA_PATH."""
    config_file = isolated_data_path / "config.yaml"
    config_file.write_text("refresh_days: 3", encoding="utf-8")

    assert find_yaml_config_file() == config_file.resolve()


def test_find_yaml_config_file_accepts_yml_extension(
    isolated_data_path: Path,
) -> None:
    """A config.yml file is picked up when no config.yaml exists."""
    config_file = isolated_data_path / "config.yml"
    config_file.write_text("refresh_days: 3", encoding="utf-8")

    assert find_yaml_config_file() == config_file.resolve()


def test_defaults(isolated_data_path: Path) -> None:
    """Without any source every setting has its documented default."""
    config = VidEmbedConfig()

    assert config.max_resolution == MaxResolution.NONE
    assert config.aspect_ratio == "auto"
    assert config.fixed_aspect_pct is None
    assert config.wrap_style == DEFAULT_WRAP_STYLE
    assert config.refresh_days == 0
    assert config.fail_action == FailAction.INLINE_ERROR
    assert config.privacy_enhanced is False
    assert config.http_timeout == 5.0
    assert config.css_class == "VideoEmbed"
    assert config.log_level == LogLevel.INFO
    assert config.data_path == isolated_data_path.resolve()


def test_yaml_file_is_loaded(isolated_data_path: Path) -> None:
    """Values from the YAML file in the data path are applied."""
    (isolated_data_path / "config.yaml").write_text(
        "max_resolution: 720p\nrefresh_days: 7\nfail_action: html-comment\n",
        encoding="utf-8",
    )

    config = VidEmbedConfig()

    assert config.max_resolution == MaxResolution.P720
    assert config.refresh_days == 7
    assert config.fail_action == FailAction.HTML_COMMENT


def test_environment_overrides_yaml(
    isolated_data_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """VIDEMBED_* environment variables take priority over the YAML file."""
    (isolated_data_path / "config.yaml").write_text(
        "refresh_days: 7\n", encoding="utf-8"
    )
    monkeypatch.setenv("VIDEMBED_REFRESH_DAYS", "30")

    assert VidEmbedConfig().refresh_days == 30


def test_init_arguments_override_environment(
    isolated_data_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Explicit arguments win over every other source."""
    monkeypatch.setenv("VIDEMBED_CSS_CLASS", "FromEnv")

    assert VidEmbedConfig(css_class="Explicit").css_class == "Explicit"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("720p", MaxResolution.P720),
        ("1080P", MaxResolution.P1080),
        ("480", MaxResolution.P480),
        (2160, MaxResolution.P2160),
        ("", MaxResolution.NONE),
        ("huge", MaxResolution.NONE),
        ("999p", MaxResolution.NONE),
    ],
)
def test_max_resolution_parsing(
    isolated_data_path: Path, value, expected: MaxResolution
) -> None:
    """Known presets are accepted loosely, anything else disables the bound."""
    assert VidEmbedConfig(max_resolution=value).max_resolution == expected


def test_max_resolution_dimensions() -> None:
    """Presets map to 16:9 width and height pairs."""
    assert MaxResolution.NONE.dimensions is None
    assert MaxResolution.P720.dimensions == (1280, 720)
    assert MaxResolution.P240.dimensions == (426, 240)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("16:9", 56.25),
        ("4:3", 75.0),
        ("21:9", 42.86),
        ("75", 75.0),
        ("62.5%", 62.5),
        ("auto", None),
    ],
)
def test_aspect_ratio_parsing(
    isolated_data_path: Path, value: str, expected: float | None
) -> None:
    """Fixed ratios are converted to a height percentage."""
    assert VidEmbedConfig(aspect_ratio=value).fixed_aspect_pct == expected


@pytest.mark.parametrize("value", ["wide", "16:0", "0", "-4:3"])
def test_invalid_aspect_ratio_falls_back_to_auto(
    isolated_data_path: Path, value: str
) -> None:
    """Ratios that can't be turned into a positive percentage become 'auto'."""
    config = VidEmbedConfig(aspect_ratio=value)

    assert config.aspect_ratio == "auto"
    assert config.fixed_aspect_pct is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [(-5, 0), ("abc", 0), (None, 0), ("14", 14)],
)
def test_refresh_days_is_clamped(
    isolated_data_path: Path, value, expected: int
) -> None:
    """Negative or unparsable refresh periods mean cached forever."""
    assert VidEmbedConfig(refresh_days=value).refresh_days == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("html-comment", FailAction.HTML_COMMENT),
        ("HTML_COMMENT", FailAction.HTML_COMMENT),
        ("inline-error", FailAction.INLINE_ERROR),
        ("explode", FailAction.INLINE_ERROR),
    ],
)
def test_fail_action_parsing(
    isolated_data_path: Path, value: str, expected: FailAction
) -> None:
    """Fail actions are matched loosely, unknown ones render inline errors."""
    assert VidEmbedConfig(fail_action=value).fail_action == expected


def test_http_timeout_must_be_positive(isolated_data_path: Path) -> None:
    """A zero timeout is a configuration error."""
    with pytest.raises(ValidationError):
        VidEmbedConfig(http_timeout=0)


def test_log_level_is_case_insensitive(isolated_data_path: Path) -> None:
    """Log levels accept any casing."""
    assert VidEmbedConfig(log_level="debug").log_level == LogLevel.DEBUG


def test_str_includes_main_settings(isolated_data_path: Path) -> None:
    """The string form summarizes the settings used in startup logs."""
    text = str(VidEmbedConfig(refresh_days=3))

    assert "refresh_days=3" in text
    assert "fail_action=inline-error" in text
    assert str(isolated_data_path.resolve()) in text
