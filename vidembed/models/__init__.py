"""Models Initialization Module."""

from vidembed.models.db import Base, Housekeeping, VideoEmbed
from vidembed.models.schemas.embed import EmbedRecord, OwnerRef

__all__ = ["Base", "EmbedRecord", "Housekeeping", "OwnerRef", "VideoEmbed"]
