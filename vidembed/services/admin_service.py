"""Service for administering the embed cache from external tooling."""

from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache

from pydantic import BaseModel

from vidembed import log
from vidembed.config.settings import VidEmbedConfig, get_config
from vidembed.core.cache import EmbedCache, ListSort
from vidembed.models.schemas.embed import EmbedRecord

__all__ = ["AdminService", "CachedEmbedEntry", "get_admin_service"]


class CachedEmbedEntry(BaseModel):
    """Serialized summary of a cache row, as shown in listings."""

    video_id: str
    video_url: str
    valid: bool
    status_code: int
    title: str
    provider_name: str
    created_at: datetime | None
    owner_id: int | None = None
    field_name: str | None = None

    @classmethod
    def from_record(cls, record: EmbedRecord) -> "CachedEmbedEntry":
        """Summarize an embed record."""
        return cls(
            video_id=record.video_id,
            video_url=record.video_url,
            valid=record.valid,
            status_code=record.status_code,
            title=record.title,
            provider_name=record.provider_name,
            created_at=record.created_at,
            owner_id=record.owner.owner_id if record.owner else None,
            field_name=record.owner.field_name if record.owner else None,
        )


@dataclass
class AdminService:
    """Service encapsulating the administrative cache operations."""

    cache: EmbedCache = field(default_factory=EmbedCache)
    config: VidEmbedConfig = field(default_factory=get_config)

    def invalidate(self, video_id: str) -> int:
        """Drop the cached embed of one video so it is fetched again."""
        removed = self.cache.delete_one(video_id)
        if removed:
            log.info(f"Invalidated cached embed $$'{video_id}'$$")
        return removed

    def invalidate_all(self) -> None:
        """Drop every cached embed."""
        self.cache.delete_all()
        log.info("Invalidated all cached embeds")

    def list_cached(
        self,
        start: int = 0,
        limit: int = 0,
        sort: ListSort | str = ListSort.CREATED_DESC,
    ) -> list[CachedEmbedEntry]:
        """Return a page of cached embeds."""
        return [
            CachedEmbedEntry.from_record(record)
            for record in self.cache.list(start=start, limit=limit, sort=sort)
        ]

    def count_cached(self) -> int:
        """Return the number of cached embeds."""
        return self.cache.count()

    def sweep(self) -> int:
        """Remove expired embeds now, regardless of when the last sweep ran."""
        return self.cache.sweep_expired(self.config.refresh_days)


@lru_cache(maxsize=1)
def get_admin_service() -> AdminService:
    """Return cached admin service instance."""
    return AdminService()
