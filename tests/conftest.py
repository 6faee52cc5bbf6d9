"""Pytest fixtures for all tests."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient, ASGITransport

from config import Config
from identifier.codec import Codec, Identifier
from identifier.layout import V2
from identifier.machine import reset_machine_cache
from ui.app import create_app
from utils.timestamp import EPOCH


@pytest.fixture
def codec():
    """Create a codec on the default layout."""
    return Codec(V2)


@pytest.fixture
def fixed_identifier():
    """Identifier with known field values."""
    return Identifier(
        namespace=b"abc",
        timestamp=EPOCH + timedelta(microseconds=1),
        machine=b"\x01\x02",
        noise=b"\x0a\x0b\x0c\x0d",
    )


@pytest.fixture
def fresh_machine_cache():
    """Clear the host digest cache before and after a test."""
    reset_machine_cache()
    yield
    reset_machine_cache()


@pytest.fixture
def clock_2019(monkeypatch):
    """Freeze the codec clock before the epoch."""
    class FrozenClock(datetime):
        @classmethod
        def now(cls, tz=None):
            return datetime(2019, 6, 1, tzinfo=timezone.utc)

    monkeypatch.setattr("identifier.codec.datetime", FrozenClock)


@pytest.fixture
async def app():
    """Create test FastAPI app."""
    return create_app(Config())


@pytest.fixture
async def client(app):
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
