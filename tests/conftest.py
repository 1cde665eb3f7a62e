from datetime import datetime, timezone

import mongomock
import pytest

from Schemas.seed_schema import SeedUserRecord


@pytest.fixture
def db():
    """Fresh in-memory database for each test."""
    return mongomock.MongoClient()["sentinel_test"]


@pytest.fixture
def seed_user():
    return SeedUserRecord(
        id="dev",
        email="dev@sentinel.org",
        hashedPassword="$argon2id$v=19$m=65536,t=3,p=4$c2FsdA$aGFzaA",
        activeKey="dev",
        verified=True,
        isAdmin=True,
    )


@pytest.fixture
def fixed_clock():
    stamp = datetime(2024, 3, 1, 12, 30, 45, tzinfo=timezone.utc)
    return lambda: stamp
