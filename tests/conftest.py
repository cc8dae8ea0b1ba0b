"""
Pytest configuration and shared fixtures.
"""
import asyncio
import copy
from typing import Any, Dict, Optional

import pytest

from config import Settings
from services.exceptions import StorageUnavailableError
from services.referral_service import ReferralLedgerService


class InMemoryDocumentStore:
    """
    Test double with the MongoDocumentStore interface.

    Every call yields to the event loop first, so concurrent onboardings
    interleave between reads and writes. Each write is applied without
    another await, matching a single-document Mongo update.
    """

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.writes = []
        self.fail = False

    async def _tick(self):
        await asyncio.sleep(0)
        if self.fail:
            raise StorageUnavailableError("store offline")

    def _coll(self, name):
        return self.collections.setdefault(name, {})

    def seed(self, collection: str, key: str, doc: Dict[str, Any]):
        self._coll(collection)[str(key)] = copy.deepcopy(doc)

    def peek(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        return self._coll(collection).get(str(key))

    async def get(self, collection, key):
        await self._tick()
        doc = self._coll(collection).get(str(key))
        return copy.deepcopy(doc) if doc is not None else None

    async def set(self, collection, key, fields, merge=False):
        await self._tick()
        self.writes.append(("set", collection, str(key)))
        coll = self._coll(collection)
        if merge and str(key) in coll:
            coll[str(key)].update(copy.deepcopy(fields))
        else:
            coll[str(key)] = copy.deepcopy(fields)

    async def create_if_absent(self, collection, key, fields):
        await self._tick()
        coll = self._coll(collection)
        if str(key) in coll:
            return False
        self.writes.append(("create", collection, str(key)))
        coll[str(key)] = copy.deepcopy(fields)
        return True

    async def set_if_unset(self, collection, key, field, value):
        await self._tick()
        doc = self._coll(collection).get(str(key))
        if doc is None or doc.get(field) not in (None, ""):
            return False
        self.writes.append(("set_if_unset", collection, str(key)))
        doc[field] = value
        return True

    async def increment_and_append(self, collection, key, increments, array_field, value):
        await self._tick()
        doc = self._coll(collection).get(str(key))
        if doc is None or value in doc.get(array_field, []):
            return False
        self.writes.append(("credit", collection, str(key)))
        for field, delta in increments.items():
            doc[field] = doc.get(field, 0) + delta
        doc.setdefault(array_field, []).append(value)
        return True


@pytest.fixture
def settings():
    return Settings(bot_token="123:test", mongo_uri="mongodb://localhost/test")


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def ledger(store, settings):
    return ReferralLedgerService(store, settings)


@pytest.fixture
def make_user():
    """Build a stored user document with defaults."""
    def _make(user_id, **overrides):
        doc = {
            "user_id": str(user_id),
            "user_name": None,
            "first_name": "Test",
            "avatar": "",
            "balance": 5000,
            "total_coins": 5000,
            "referrals": [],
            "referred_by": None,
            "daily_reward": 1000,
            "streak_claims": 0,
            "streak_reward_amount": 5000,
            "last_claimed": "",
            "friend_count": 10,
            "created_at": "2024-01-15T12:00:00+00:00",
        }
        doc.update(overrides)
        return doc
    return _make
