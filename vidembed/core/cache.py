"""Persistent embed cache backed by the ``video_embed`` table."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from pydantic import ValidationError
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import delete, func, select

from vidembed import log
from vidembed.config.database import VidEmbedDB, get_db
from vidembed.config.settings import BaseStrEnum
from vidembed.exceptions import EmbedCacheWriteError
from vidembed.models.db.housekeeping import Housekeeping
from vidembed.models.db.video_embed import VideoEmbed
from vidembed.models.schemas.embed import EmbedRecord

__all__ = ["EmbedCache", "ListSort"]

LAST_SWEPT_KEY = "last_swept_at"


class ListSort(BaseStrEnum):
    """Orderings available when listing cached embeds."""

    CREATED_ASC = "created_asc"
    CREATED_DESC = "created_desc"


class EmbedCache:
    """Embed records keyed by video id, with age-based expiry.

    Entries are written once per video id and only replaced after an
    explicit invalidation; both successful and failed lookups are cached.
    """

    MAX_WRITE_ATTEMPTS = 3
    SWEEP_INTERVAL = timedelta(days=1)

    def __init__(
        self,
        db: VidEmbedDB | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Create a cache on top of a database manager.

        Args:
            db (VidEmbedDB | None): Database manager, the configured one if None
            clock (Callable[[], datetime] | None): Source of the current UTC time
        """
        self.db = db or get_db()
        self._clock = clock or (lambda: datetime.now(UTC))

    def now(self) -> datetime:
        """Return the current time as an aware UTC datetime."""
        return _as_utc(self._clock())

    def get(self, video_id: str) -> EmbedRecord | None:
        """Return the cached record of a video, None if it isn't cached."""
        with self.db() as ctx:
            row = ctx.session.get(VideoEmbed, video_id)
            if row is None:
                return None
            return self._to_record(row)

    def put(self, video_id: str, record: EmbedRecord) -> EmbedRecord:
        """Store the record of a video.

        A row that already exists for the id is overwritten. Storage errors,
        including primary key conflicts between concurrent writers, are
        retried up to ``MAX_WRITE_ATTEMPTS`` times.

        Args:
            video_id (str): Video id used as the key
            record (EmbedRecord): Record to store

        Returns:
            EmbedRecord: The stored record with its creation time set

        Raises:
            EmbedCacheWriteError: If every attempt failed
        """
        created = self.now()
        stored = record.model_copy(update={"video_id": video_id, "created_at": created})
        embed_code = str(stored.embed_code)
        data = stored.model_dump_json()

        for attempt in range(1, self.MAX_WRITE_ATTEMPTS + 1):
            with self.db() as ctx:
                try:
                    ctx.session.merge(
                        VideoEmbed(
                            video_id=video_id,
                            embed_code=embed_code,
                            created=created,
                            data=data,
                        )
                    )
                    ctx.session.commit()
                    return stored
                except SQLAlchemyError as e:
                    ctx.session.rollback()
                    log.warning(
                        f"Write attempt {attempt}/{self.MAX_WRITE_ATTEMPTS} failed "
                        f"for $$'{video_id}'$$: {e}"
                    )

        raise EmbedCacheWriteError(video_id, self.MAX_WRITE_ATTEMPTS)

    def delete_one(self, video_id: str) -> int:
        """Remove the cached record of a video.

        Returns:
            int: Number of rows removed (0 or 1)
        """
        with self.db() as ctx:
            result = ctx.session.execute(
                delete(VideoEmbed).where(VideoEmbed.video_id == video_id)
            )
            ctx.session.commit()
            return result.rowcount or 0

    def delete_all(self) -> None:
        """Remove every cached record and forget when the cache was last swept."""
        with self.db() as ctx:
            ctx.session.execute(delete(VideoEmbed))
            ctx.session.execute(
                delete(Housekeeping).where(Housekeeping.key == LAST_SWEPT_KEY)
            )
            ctx.session.commit()

    def count(self) -> int:
        """Return the number of cached records."""
        with self.db() as ctx:
            return ctx.session.scalar(select(func.count()).select_from(VideoEmbed)) or 0

    def list(
        self,
        start: int = 0,
        limit: int = 0,
        sort: ListSort | str = ListSort.CREATED_DESC,
    ) -> list[EmbedRecord]:
        """List cached records.

        Args:
            start (int): Number of records to skip
            limit (int): Maximum number of records, 0 for no limit
            sort (ListSort | str): Ordering; unknown values sort newest first

        Returns:
            list[EmbedRecord]: The requested page of records
        """
        try:
            sort = ListSort(sort)
        except ValueError:
            log.warning(
                f"Unknown sort $$'{sort}'$$, using $$'{ListSort.CREATED_DESC}'$$"
            )
            sort = ListSort.CREATED_DESC

        order = (
            VideoEmbed.created.asc()
            if sort == ListSort.CREATED_ASC
            else VideoEmbed.created.desc()
        )
        query = select(VideoEmbed).order_by(order, VideoEmbed.video_id)
        if start > 0:
            query = query.offset(start)
        if limit > 0:
            query = query.limit(limit)

        with self.db() as ctx:
            rows = ctx.session.scalars(query).all()
            return [self._to_record(row) for row in rows]

    def sweep_expired(self, max_age_days: int) -> int:
        """Remove records created more than ``max_age_days`` days ago.

        Returns:
            int: Number of rows removed, 0 when ``max_age_days`` is not positive
        """
        if max_age_days <= 0:
            return 0

        cutoff = self.now() - timedelta(days=max_age_days)
        with self.db() as ctx:
            result = ctx.session.execute(
                delete(VideoEmbed).where(VideoEmbed.created < cutoff)
            )
            ctx.session.commit()
            removed = result.rowcount or 0

        if removed:
            log.info(f"Removed {removed} cached embeds older than {max_age_days} days")
        return removed

    def maybe_sweep(self, max_age_days: int) -> int:
        """Run ``sweep_expired`` unless a sweep already ran within the last day.

        The sweep time is recorded after every attempt, whether or not any
        rows were removed. Concurrent sweeps upsert the same housekeeping row;
        a failure to record the time is logged and otherwise ignored, since
        the sweep itself already ran.

        Returns:
            int: Number of rows removed
        """
        if max_age_days <= 0:
            return 0

        now = self.now()
        last_swept = self.last_swept_at()
        if last_swept is not None and now - last_swept < self.SWEEP_INTERVAL:
            return 0

        removed = self.sweep_expired(max_age_days)

        stmt = sqlite_insert(Housekeeping).values(
            key=LAST_SWEPT_KEY, value=now.isoformat()
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Housekeeping.key], set_={"value": stmt.excluded.value}
        )
        with self.db() as ctx:
            try:
                ctx.session.execute(stmt)
                ctx.session.commit()
            except SQLAlchemyError as e:
                ctx.session.rollback()
                log.warning(f"Failed to record the sweep time: {e}")
        return removed

    def last_swept_at(self) -> datetime | None:
        """Return when the cache was last swept, None if it never was."""
        with self.db() as ctx:
            row = ctx.session.get(Housekeeping, LAST_SWEPT_KEY)
            value = row.value if row else None

        if not value:
            return None
        try:
            return _as_utc(datetime.fromisoformat(value))
        except ValueError:
            return None

    def _to_record(self, row: VideoEmbed) -> EmbedRecord:
        try:
            record = EmbedRecord.model_validate_json(row.data)
        except ValidationError:
            # Rows without usable data still carry the embed code
            code = row.embed_code or "0"
            record = (
                EmbedRecord.failed(row.video_id, "", int(code))
                if code.isdigit()
                else EmbedRecord(video_id=row.video_id, valid=True, embed_code=code)
            )
        return record.model_copy(
            update={"video_id": row.video_id, "created_at": _as_utc(row.created)}
        )


def _as_utc(value: datetime) -> datetime:
    """SQLite drops timezone info, stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
