"""Embed record schemas shared by the oembed client, the cache and the presenter."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

__all__ = ["EmbedRecord", "OwnerRef"]


class OwnerRef(BaseModel):
    """Content owner (page id and field name) a video was first seen in."""

    owner_id: int
    field_name: str = ""

    def __str__(self) -> str:
        """Log attribution suffix for the owner."""
        return f"[owner:{self.owner_id}, field:{self.field_name}]"


class EmbedRecord(BaseModel):
    """Fetched or cached oembed result for one video.

    A valid record carries the embed HTML in ``embed_code``; an invalid one
    carries the HTTP status code of the failed request instead (0 when no
    response was received at all).
    """

    model_config = ConfigDict(extra="ignore")

    video_id: str
    video_url: str = ""
    valid: bool = False
    embed_code: str | int = 0

    title: str = ""
    author_name: str = ""
    author_url: str = ""
    provider_name: str = ""
    provider_url: str = ""
    type: str = ""
    version: str = ""

    width: int = 0
    height: int = 0
    thumbnail_url: str = ""
    thumbnail_width: int = 0
    thumbnail_height: int = 0

    created_at: datetime | None = None
    owner: OwnerRef | None = None

    @field_validator(
        "title",
        "author_name",
        "author_url",
        "provider_name",
        "provider_url",
        "type",
        "version",
        "thumbnail_url",
        mode="before",
    )
    @classmethod
    def _none_as_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator(
        "width", "height", "thumbnail_width", "thumbnail_height", mode="before"
    )
    @classmethod
    def _coerce_dimension(cls, value: Any) -> int:
        # Providers send numbers, numeric strings, "100%" or null
        try:
            return max(int(float(str(value).rstrip("%px"))), 0)
        except (TypeError, ValueError):
            return 0

    @model_validator(mode="after")
    def _check_embed_code(self) -> EmbedRecord:
        if self.valid:
            if not isinstance(self.embed_code, str) or not self.embed_code:
                raise ValueError("A valid embed record requires embed HTML")
        elif not isinstance(self.embed_code, int):
            raise ValueError("An invalid embed record requires an HTTP status code")
        return self

    @classmethod
    def from_oembed(
        cls, video_id: str, video_url: str, payload: dict[str, Any], embed_code: str
    ) -> EmbedRecord:
        """Build a valid record from an oembed JSON payload.

        Args:
            video_id (str): Provider-scoped video id
            video_url (str): URL the embed was requested for
            payload (dict[str, Any]): Decoded oembed response
            embed_code (str): Embed HTML, possibly rewritten from payload["html"]

        Returns:
            EmbedRecord: The valid record
        """
        fields = {k: v for k, v in payload.items() if k in cls.model_fields}
        fields.update(
            video_id=video_id,
            video_url=video_url,
            valid=True,
            embed_code=embed_code,
            created_at=None,
            owner=None,
        )
        return cls.model_validate(fields)

    @classmethod
    def failed(cls, video_id: str, video_url: str, status: int) -> EmbedRecord:
        """Build an invalid record for a failed request."""
        return cls(
            video_id=video_id, video_url=video_url, valid=False, embed_code=status
        )

    @property
    def status_code(self) -> int:
        """HTTP status of the failed request, 0 for valid records."""
        return self.embed_code if isinstance(self.embed_code, int) else 0
