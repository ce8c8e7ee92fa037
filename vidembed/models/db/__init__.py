"""Models for VidEmbed database tables."""

from vidembed.models.db.base import Base
from vidembed.models.db.housekeeping import Housekeeping
from vidembed.models.db.video_embed import VideoEmbed

__all__ = ["Base", "Housekeeping", "VideoEmbed"]
