"""Markup for resolved embeds: responsive wrappers and error placeholders."""

import html
import re

from vidembed.config.settings import DEFAULT_ASPECT_PCT, FailAction, VidEmbedConfig
from vidembed.core.providers import Candidate
from vidembed.models.schemas.embed import EmbedRecord

__all__ = ["aspect_percent", "render_error", "render_success"]

_IFRAME_PATTERN = re.compile(r"<iframe\b", re.IGNORECASE)
_SRC_PATTERN = re.compile(r"(\bsrc=)([\"'])(.*?)\2", re.IGNORECASE | re.DOTALL)
_STYLE_TOKENS = ("{pct}", "{percent}")


def aspect_percent(record: EmbedRecord, config: VidEmbedConfig) -> float:
    """Height of the embed as a percentage of its width.

    A fixed ratio from the configuration wins, then the record's own
    dimensions, then 16:9.
    """
    fixed = config.fixed_aspect_pct
    if fixed is not None:
        return fixed
    if record.width > 0 and record.height > 0:
        return round(100 * record.height / record.width, 2)
    return DEFAULT_ASPECT_PCT


def _apply_style_tokens(template: str, pct: float) -> str:
    value = f"{pct:g}"
    for token in _STYLE_TOKENS:
        template = template.replace(f"{token}%", f"{value}%").replace(token, value)
    return template


def _merge_query(embed_code: str, extra_query: str) -> str:
    """Append ``extra_query`` to the query of the first ``src`` URL."""

    def _replace(match: re.Match[str]) -> str:
        attr, quote, src = match.groups()
        if src.endswith(("?", "&")):
            separator = ""
        else:
            separator = "&" if "?" in src else "?"
        return f"{attr}{quote}{src}{separator}{extra_query}{quote}"

    return _SRC_PATTERN.sub(_replace, embed_code, count=1)


def render_success(
    record: EmbedRecord, extra_query: str | None, config: VidEmbedConfig
) -> str:
    """Wrap a valid embed in a responsive container.

    Args:
        record (EmbedRecord): Valid embed record
        extra_query (str | None): Query string from the original URL
        config (VidEmbedConfig): Style templates and aspect ratio settings

    Returns:
        str: The embed markup
    """
    embed_code = str(record.embed_code)
    pct = aspect_percent(record, config)

    if extra_query:
        embed_code = _merge_query(embed_code, extra_query.lstrip("?&"))

    frame_style = _apply_style_tokens(config.frame_style, pct)
    if frame_style:
        embed_code = _IFRAME_PATTERN.sub(
            lambda m: f"{m.group(0)} style='{frame_style}'", embed_code, count=1
        )

    attrs = ""
    if config.css_class:
        attrs += f" class='{config.css_class}'"
    wrap_style = _apply_style_tokens(config.wrap_style, pct)
    if wrap_style:
        attrs += f" style='{wrap_style}'"

    return f"<div{attrs}>{embed_code}</div>"


def render_error(
    candidate: Candidate, record: EmbedRecord, config: VidEmbedConfig
) -> str:
    """Render the placeholder for a video whose embed couldn't be retrieved.

    Args:
        candidate (Candidate): Matched block holding the video URL and the
            block's own open and close tags
        record (EmbedRecord): Invalid embed record holding the HTTP status
        config (VidEmbedConfig): Fail action and CSS class settings

    Returns:
        str: Either an HTML comment or the block with an inline error
    """
    label = f"{html.escape(candidate.url, quote=False)} ({record.status_code})"

    if config.fail_action == FailAction.HTML_COMMENT:
        return f"<!--{label}-->"

    return (
        f'{candidate.open_tag}<span class="{config.css_class}Error">{label}</span>'
        f"{candidate.close_tag}"
    )
