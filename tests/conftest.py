"""
Shared fixtures for the RuleFlow test suite.
"""

import os

# must be set before api.routes is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RULES_RELOAD_SECONDS", "0")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db.models import Base


class FakeRedis:
    """Dict-backed stand-in for the handful of redis calls the cache uses."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    def delete(self, key):
        self.store.pop(key, None)
        self.ttls.pop(key, None)


@pytest.fixture
def fake_redis(monkeypatch):
    from services import cache

    fake = FakeRedis()
    monkeypatch.setattr(cache, "client", fake)
    return fake


@pytest.fixture
def session_factory():
    """In-memory SQLite shared across sessions."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def loyalty_rules():
    """Gold base discount plus the AND-combined big spender bonus."""
    return [
        {
            "id": "r1",
            "priority": 1,
            "condition": {"field": "tier", "operator": "==", "value": "gold"},
            "action": {"discountPercent": 10, "stackable": True},
        },
        {
            "id": "r2",
            "priority": 2,
            "condition": {
                "operator": "AND",
                "conditions": [
                    {"field": "tier", "operator": "==", "value": "gold"},
                    {"field": "total_spend", "operator": ">", "value": 5000},
                ],
            },
            "action": {"discountPercent": 5, "message": "Big spender bonus", "stackable": True},
        },
    ]
