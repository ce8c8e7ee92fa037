"""Database Configuration for VidEmbed."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from types import TracebackType

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from vidembed.exceptions import DataPathError

__all__ = ["DBContext", "VidEmbedDB", "get_db"]

ALEMBIC_PATH = Path(__file__).resolve().parents[2] / "alembic"


class DBContext:
    """Context manager owning a single SQLAlchemy session.

    Every ``with db() as ctx`` block gets its own session, so concurrent
    formatting calls never share one.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        """Store the factory used to open the session on enter."""
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self) -> DBContext:
        """Open the session for this context."""
        self._session = self._session_factory()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Close the session opened for this context, if any."""
        if self._session is not None:
            self._session.close()
            self._session = None

    @property
    def session(self) -> Session:
        """Return the session of this context, opening it if needed."""
        if self._session is None:
            self._session = self._session_factory()
        return self._session


class VidEmbedDB:
    """Database manager for the embed cache.

    Creates the SQLite database inside the data directory and runs the Alembic
    migrations so the ``video_embed`` and ``house_keeping`` tables exist.
    Calling the instance returns a ``DBContext`` holding a fresh session.
    """

    def __init__(self, data_path: Path) -> None:
        """Initializes the database manager.

        Args:
            data_path (Path): Directory where the database should be stored

        Raises:
            DataPathError: If data_path exists but is a file instead of a directory
        """
        self.data_path = data_path
        self.db_path = data_path / "vidembed.db"

        self.engine = self._setup_db()
        self._SessionLocal = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
            future=True,
        )
        self._do_migrations()

    @property
    def url(self) -> str:
        """SQLAlchemy URL of the database file."""
        return f"sqlite:///{self.db_path}"

    def _setup_db(self) -> Engine:
        """Creates the data directory and the SQLite engine.

        Returns:
            Engine: Configured SQLAlchemy engine instance

        Raises:
            DataPathError: If data_path exists but is a file instead of a directory
        """
        import vidembed.models  # noqa: F401

        if self.data_path.is_file():
            raise DataPathError(
                f"{self.__class__.__name__}: The path '{self.data_path}' is a file, "
                "please delete it first or choose a different data folder path",
            )
        self.data_path.mkdir(parents=True, exist_ok=True)

        engine = create_engine(
            self.url,
            connect_args={"check_same_thread": False, "timeout": 15},
            pool_pre_ping=True,
            future=True,
        )

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, _connection_record):
            cur = dbapi_connection.cursor()
            try:
                cur.execute("PRAGMA journal_mode=WAL;")
                cur.execute("PRAGMA synchronous=NORMAL;")
                cur.execute("PRAGMA temp_store=MEMORY;")
            finally:
                cur.close()

        return engine

    def _do_migrations(self) -> None:
        """Upgrades the database schema to the latest Alembic revision."""
        from alembic import command
        from alembic.config import Config

        cfg = Config()
        cfg.set_main_option("script_location", str(ALEMBIC_PATH))
        cfg.set_main_option("sqlalchemy.url", self.url)

        command.upgrade(cfg, "head")

    def __call__(self) -> DBContext:
        """Return a context manager holding a new session."""
        return DBContext(self._SessionLocal)

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()


@lru_cache(maxsize=1)
def get_db() -> VidEmbedDB:
    """Get the database manager for the configured data path.

    Returns:
        VidEmbedDB: The singleton database manager.
    """
    from vidembed.config.settings import get_config

    return VidEmbedDB(get_config().data_path)
