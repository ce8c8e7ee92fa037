"""Housekeeping Model Module."""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql.sqltypes import String

from vidembed.models.db.base import Base

__all__ = ["Housekeeping"]


class Housekeeping(Base):
    """Model for the Housekeeping table.

    Stores small pieces of persisted state, such as when the embed cache was
    last swept for expired entries.
    """

    __tablename__ = "house_keeping"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str | None] = mapped_column(String, nullable=True)
