"""Text formatter replacing bare video links with embedded players."""

from __future__ import annotations

from vidembed.config.settings import VidEmbedConfig, get_config
from vidembed.core.cache import EmbedCache
from vidembed.core.oembed import OembedClient
from vidembed.core.presenter import render_error, render_success
from vidembed.core.providers import PROVIDERS, Provider
from vidembed.core.resolver import EmbedResolver, ResolveContext

__all__ = ["VideoEmbedFormatter"]


class VideoEmbedFormatter:
    """Entry point used by the content pipeline.

    Finds paragraphs and headings that contain nothing but a YouTube or Vimeo
    URL and replaces them with the provider's embed markup. Formatting its own
    output again leaves it unchanged, since embedded players and error
    placeholders no longer hold a bare URL.
    """

    def __init__(
        self,
        config: VidEmbedConfig | None = None,
        cache: EmbedCache | None = None,
        client: OembedClient | None = None,
        providers: tuple[Provider, ...] = PROVIDERS,
    ) -> None:
        """Initialize the formatter, creating any collaborator not given.

        Args:
            config (VidEmbedConfig | None): Configuration, the global one if None
            cache (EmbedCache | None): Embed cache, on the configured database
                if None
            client (OembedClient | None): Oembed client
            providers (tuple[Provider, ...]): Providers to embed
        """
        self.config = config or get_config()
        self._cache = cache
        self._client = client
        self._resolver: EmbedResolver | None = None
        self.providers = providers

    @property
    def resolver(self) -> EmbedResolver:
        """Resolver built lazily so provider-free content never opens the cache."""
        if self._resolver is None:
            cache = self._cache or EmbedCache()
            client = self._client or OembedClient(
                timeout=self.config.http_timeout,
                privacy_enhanced=self.config.privacy_enhanced,
            )
            self._resolver = EmbedResolver(self.config, cache, client)
        return self._resolver

    def format_value(
        self, owner_id: int | None, field_name: str | None, text: str
    ) -> str:
        """Format a field value of a content owner.

        Args:
            owner_id (int | None): Id of the page (or other owner) being rendered
            field_name (str | None): Name of the field being rendered
            text (str): Field value

        Returns:
            str: The value with video links embedded
        """
        return self.format(
            text, ResolveContext(owner_id=owner_id, field_name=field_name)
        )

    def format(self, text: str, context: ResolveContext | None = None) -> str:
        """Embed every bare video link in ``text``.

        Raises:
            EmbedCacheWriteError: If a fetched embed could not be cached
        """
        if not text:
            return text

        present = [p for p in self.providers if p.tell_tale in text]
        if not present:
            return text

        value = text
        stripped = text.strip()
        if _is_bare_url(stripped):
            value = f"<p>{stripped}</p>"

        formatted = value
        for provider in present:
            for candidate in provider.find(value):
                resolved = self.resolver.resolve(
                    provider,
                    candidate.url,
                    candidate.video_id,
                    candidate.extra_query,
                    context,
                )
                if resolved.valid:
                    markup = render_success(
                        resolved.record, resolved.extra_query, self.config
                    )
                else:
                    markup = render_error(candidate, resolved.record, self.config)
                formatted = formatted.replace(candidate.line, markup)

        if formatted == value:
            return text
        return formatted


def _is_bare_url(value: str) -> bool:
    """A lone URL with no markup around it and no whitespace inside."""
    return (
        value.lower().startswith(("http://", "https://"))
        and "<" not in value
        and not any(ch.isspace() for ch in value)
    )
