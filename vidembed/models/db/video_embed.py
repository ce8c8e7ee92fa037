"""Video embed cache model."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vidembed.models.db.base import Base

__all__ = ["VideoEmbed"]


class VideoEmbed(Base):
    """Model representing the cached oembed result for one video id.

    ``embed_code`` holds the embed HTML for valid entries and the HTTP status
    code for failed ones. ``data`` is the full serialized ``EmbedRecord``.
    """

    __tablename__ = "video_embed"

    video_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    embed_code: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        default=lambda: datetime.now(UTC),
    )
    data: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
