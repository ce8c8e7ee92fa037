"""Embed resolution: cache lookup, oembed fetch and canonical URL fallback."""

from __future__ import annotations

from dataclasses import dataclass

from vidembed import log
from vidembed.config.settings import VidEmbedConfig
from vidembed.core.cache import EmbedCache
from vidembed.core.oembed import OembedClient
from vidembed.core.providers import Provider
from vidembed.models.schemas.embed import EmbedRecord, OwnerRef

__all__ = ["EmbedResolver", "ResolveContext", "ResolvedEmbed"]


@dataclass(frozen=True, slots=True)
class ResolveContext:
    """Per-call attribution for the content being formatted."""

    owner_id: int | None = None
    field_name: str | None = None

    @property
    def owner(self) -> OwnerRef | None:
        """Owner reference stored with fresh records, None if unknown."""
        if self.owner_id is None:
            return None
        return OwnerRef(owner_id=self.owner_id, field_name=self.field_name or "")

    def log_suffix(self) -> str:
        """Attribution appended to log lines, empty if unknown."""
        owner = self.owner
        return f" {owner}" if owner else ""


@dataclass(frozen=True, slots=True)
class ResolvedEmbed:
    """Outcome of resolving one video."""

    record: EmbedRecord
    extra_query: str | None = None
    cached: bool = False
    fallback_used: bool = False

    @property
    def valid(self) -> bool:
        """Whether the record holds usable embed markup."""
        return self.record.valid


class EmbedResolver:
    """Resolve videos to embed records, fetching each video id at most once.

    Cached records are served as they are, including failed ones, until the
    cache entry expires or is invalidated.
    """

    def __init__(
        self,
        config: VidEmbedConfig,
        cache: EmbedCache,
        client: OembedClient,
    ) -> None:
        """Initialize the resolver.

        Args:
            config (VidEmbedConfig): Formatter configuration
            cache (EmbedCache): Embed cache to read from and write to
            client (OembedClient): Client used on cache misses
        """
        self.config = config
        self.cache = cache
        self.client = client

    def resolve(
        self,
        provider: Provider,
        video_url: str,
        video_id: str,
        extra_query: str | None = None,
        context: ResolveContext | None = None,
    ) -> ResolvedEmbed:
        """Resolve a video to its embed record.

        Args:
            provider (Provider): Provider the video belongs to
            video_url (str): Video URL as found in the content
            video_id (str): Provider-scoped video id
            extra_query (str | None): Query string to re-apply to the embed URL
            context (ResolveContext | None): Owner attribution for logging

        Returns:
            ResolvedEmbed: The record and how it was obtained

        Raises:
            EmbedCacheWriteError: If the fetched record could not be cached
        """
        context = context or ResolveContext()

        self.cache.maybe_sweep(self.config.refresh_days)

        cached = self.cache.get(video_id)
        if cached is not None:
            return ResolvedEmbed(record=cached, extra_query=extra_query, cached=True)

        record = self._fetch(provider, video_url, video_id, context)

        fallback_used = False
        canonical_url = provider.canonical_url(video_id)
        if (
            not record.valid
            and canonical_url is not None
            and not provider.is_canonical(video_url)
        ):
            # Some short link and /v/ shapes are rejected by the oembed
            # endpoint while the watch URL of the same video is accepted
            log.debug(
                f"Retrying $$'{video_id}'$$ with canonical URL $$'{canonical_url}'$$"
            )
            self.cache.delete_one(video_id)
            record = self._fetch(provider, canonical_url, video_id, context)
            fallback_used = True

        return ResolvedEmbed(
            record=record,
            extra_query=extra_query,
            cached=False,
            fallback_used=fallback_used,
        )

    def _fetch(
        self,
        provider: Provider,
        video_url: str,
        video_id: str,
        context: ResolveContext,
    ) -> EmbedRecord:
        record, status = self.client.fetch(
            provider.oembed_template,
            video_url,
            video_id,
            self.config.max_resolution,
        )
        record = record.model_copy(update={"owner": context.owner})
        record = self.cache.put(video_id, record)

        if record.valid:
            log.success(f"Retrieved embed for: {video_url}{context.log_suffix()}")
        else:
            log.warning(f"HTTP {status} fail for: {video_url}{context.log_suffix()}")
        return record
