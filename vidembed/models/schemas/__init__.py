"""Pydantic schemas."""

from vidembed.models.schemas.embed import EmbedRecord, OwnerRef

__all__ = ["EmbedRecord", "OwnerRef"]
