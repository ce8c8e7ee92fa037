"""Shared pytest configuration and fixtures for the test suite."""

import atexit
import os
import shutil
import tempfile
from datetime import UTC, datetime
from pathlib import Path

import pytest
import yaml

_TEST_DATA_DIR = Path(tempfile.mkdtemp(prefix="vidembed-tests-"))
os.environ["VIDEMBED_DATA_PATH"] = str(_TEST_DATA_DIR)
_TEST_CONFIG_FILE = _TEST_DATA_DIR / "config.yaml"

_TEST_CONFIG_FILE.write_text(
    yaml.safe_dump({"log_level": "DEBUG", "http_timeout": 2.5}, sort_keys=False),
    encoding="utf-8",
)

from vidembed.config import settings as settings_module  # noqa: E402
from vidembed.config.database import VidEmbedDB, get_db  # noqa: E402
from vidembed.config.settings import VidEmbedConfig  # noqa: E402
from vidembed.core.cache import EmbedCache  # noqa: E402
from vidembed.core.oembed import OembedClient  # noqa: E402
from vidembed.models.db.housekeeping import Housekeeping  # noqa: E402
from vidembed.models.db.video_embed import VideoEmbed  # noqa: E402

from tests.fakes import FakeClock, FakeSession  # noqa: E402

settings_module.get_config.cache_clear()


def _clear_tables(database: VidEmbedDB) -> None:
    with database() as ctx:
        ctx.session.query(VideoEmbed).delete()
        ctx.session.query(Housekeeping).delete()
        ctx.session.commit()


@pytest.fixture
def db():
    """Database manager on the test data directory, emptied around each test."""
    database = get_db()
    _clear_tables(database)
    yield database
    _clear_tables(database)


@pytest.fixture
def clock() -> FakeClock:
    """Fake UTC clock shared by the cache under test."""
    return FakeClock(datetime(2026, 10, 16, 12, 0, tzinfo=UTC))


@pytest.fixture
def cache(db, clock) -> EmbedCache:
    """Embed cache on the emptied test database."""
    return EmbedCache(db=db, clock=clock)


@pytest.fixture
def config() -> VidEmbedConfig:
    """Configuration with defaults (plus the test YAML file)."""
    return VidEmbedConfig()


@pytest.fixture
def session() -> FakeSession:
    """Fake HTTP session, every unrouted request answers 404."""
    return FakeSession()


@pytest.fixture
def client(session) -> OembedClient:
    """Oembed client sending its requests through the fake session."""
    return OembedClient(timeout=2.5, session=session)


@atexit.register
def _cleanup_test_data_dir() -> None:
    """Remove the temporary test data directory after the test session."""
    shutil.rmtree(_TEST_DATA_DIR, ignore_errors=True)
