"""Video provider descriptors and block-anchored URL matching."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

__all__ = [
    "PROVIDERS",
    "VIMEO",
    "YOUTUBE",
    "Candidate",
    "Provider",
    "find_candidates",
    "get_provider",
]

# A URL only qualifies when it is the sole content of a paragraph or heading
_BLOCK_OPEN = r"(?P<open_tag><(?P<tag>p|h[1-6])(?:\s[^>]*)?>)\s*"
_BLOCK_CLOSE = r"\s*(?P<close_tag></(?P=tag)>)"


@dataclass(frozen=True, slots=True)
class Candidate:
    """A block-level element holding nothing but an embeddable video URL."""

    provider: Provider
    line: str
    open_tag: str
    close_tag: str
    url: str
    video_id: str
    extra_query: str | None = None


@dataclass(frozen=True, slots=True)
class Provider:
    """Everything needed to detect and resolve the videos of one provider.

    Attributes:
        name: Short provider name used in logs
        tell_tale: Substring that must be present before the pattern is tried
        pattern: Block-anchored pattern with ``url`` and ``video_id`` groups
            and an optional ``query`` group
        oembed_template: Endpoint template with ``{url}`` and ``{id}`` tokens
        canonical_template: Canonical video URL with an ``{id}`` token, used to
            retry failed lookups of alternative URL shapes
        canonical_marker: Substring identifying a URL already in canonical form
    """

    name: str
    tell_tale: str
    pattern: re.Pattern[str]
    oembed_template: str
    canonical_template: str | None = None
    canonical_marker: str | None = None

    def find(self, text: str) -> list[Candidate]:
        """Find the candidate lines of this provider in ``text``.

        Each distinct matched line is returned once, in order of appearance.
        """
        if not text or self.tell_tale not in text:
            return []

        seen: set[str] = set()
        candidates: list[Candidate] = []
        for match in self.pattern.finditer(text):
            line = match.group(0)
            if line in seen:
                continue
            seen.add(line)

            groups = match.groupdict()
            candidates.append(
                Candidate(
                    provider=self,
                    line=line,
                    open_tag=groups["open_tag"],
                    close_tag=groups["close_tag"],
                    url=groups["url"],
                    video_id=groups["video_id"],
                    extra_query=_normalize_query(groups.get("query")),
                )
            )
        return candidates

    def canonical_url(self, video_id: str) -> str | None:
        """Return the canonical URL of a video, None if the provider has none."""
        if self.canonical_template is None:
            return None
        return self.canonical_template.format(id=video_id)

    def is_canonical(self, video_url: str) -> bool:
        """Check whether a URL is already in the provider's canonical form."""
        return self.canonical_marker is None or self.canonical_marker in video_url

    def __str__(self) -> str:
        """Provider name."""
        return self.name


def _normalize_query(query: str | None) -> str | None:
    """Decode HTML-escaped separators and drop the leading ``?``/``&``."""
    if not query:
        return None
    query = query.replace("&amp;", "&").lstrip("?&")
    return query or None


YOUTUBE = Provider(
    name="youtube",
    tell_tale="youtu",
    pattern=re.compile(
        _BLOCK_OPEN
        + r"(?P<url>https?://(?:www\.)?"
        r"(?:youtu\.be/|youtube\.com/watch/?\?v=|youtube\.com/v/)"
        r"(?P<video_id>[^\s&?<'\"]+))"
        r"(?P<query>[?&][^\s<'\"]*)?"
        + _BLOCK_CLOSE,
        re.IGNORECASE,
    ),
    oembed_template="https://www.youtube.com/oembed?url={url}&format=json",
    canonical_template="https://www.youtube.com/watch?v={id}",
    canonical_marker="watch?v=",
)

VIMEO = Provider(
    name="vimeo",
    tell_tale="vimeo.com",
    pattern=re.compile(
        _BLOCK_OPEN
        + r"(?P<url>https?://(?:www\.)?vimeo\.com/"
        r"(?:[^/\s<'\"]+/)*(?P<video_id>[0-9a-f]+))"
        + _BLOCK_CLOSE,
        re.IGNORECASE,
    ),
    oembed_template="https://vimeo.com/api/oembed.json?url={url}",
)

PROVIDERS: tuple[Provider, ...] = (YOUTUBE, VIMEO)


def get_provider(name: str) -> Provider:
    """Look up a provider by name.

    Raises:
        KeyError: If no provider has that name
    """
    for provider in PROVIDERS:
        if provider.name == name.lower():
            return provider
    raise KeyError(f"Unknown video provider '{name}'")


def find_candidates(
    text: str, providers: Iterable[Provider] = PROVIDERS
) -> list[Candidate]:
    """Find every embeddable video line in ``text``.

    Providers whose tell-tale substring is absent are skipped without running
    their pattern.

    Args:
        text (str): HTML content to scan
        providers (Iterable[Provider]): Providers to look for

    Returns:
        list[Candidate]: Candidates grouped by provider, in order of appearance
    """
    candidates: list[Candidate] = []
    for provider in providers:
        candidates.extend(provider.find(text))
    return candidates
