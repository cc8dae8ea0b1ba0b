# core/database.py
"""
Document store for DripCoin Quest bot (MongoDB via motor).

One document per user in the "Users" collection, `_id` = str(user_id).

Besides plain get/set the store exposes the three conditional writes the
referral ledger relies on. Each is a single `update_one`, so Mongo applies
it atomically on one document:

- create_if_absent      -> $setOnInsert with upsert
- set_if_unset          -> $set filtered on field in (null, "")
- increment_and_append  -> $inc + $push filtered on value not already in array

Usage:
    store = MongoDocumentStore(settings)
    await store.connect()
    doc = await store.get("Users", "12345")
    await store.disconnect()
"""

from typing import Optional, Any, Dict
import asyncio
import logging

from pymongo.errors import PyMongoError

from config import Settings
from services.exceptions import StorageUnavailableError

logger = logging.getLogger("dripcoin_bot.database")

# Retry config (connect only)
_MAX_RETRIES = 5
_RETRY_DELAY = 2.0  # seconds


class MongoDocumentStore:
    def __init__(self, settings: Settings, client: Optional[Any] = None):
        self.settings = settings
        self._client = client
        self._db = None
        if client is not None:
            self._db = self._resolve_db(client)

    # -------------------------
    # CONNECT / DISCONNECT
    # -------------------------
    async def connect(self, max_retries: int = _MAX_RETRIES, retry_delay: float = _RETRY_DELAY) -> None:
        """
        Open the motor client and ensure indexes.
        Idempotent: a second call on a connected store does nothing.
        """
        if self._db is not None:
            logger.debug("Mongo client already connected.")
            return

        from motor.motor_asyncio import AsyncIOMotorClient

        if not self.settings.mongo_uri:
            raise RuntimeError("MONGO_URI not configured")

        attempt = 0
        while attempt < max_retries:
            try:
                logger.info("Connecting to MongoDB (attempt %d)...", attempt + 1)
                client = AsyncIOMotorClient(self.settings.mongo_uri, serverSelectionTimeoutMS=5000)
                # wait for server info to ensure connection
                await client.server_info()
                self._client = client
                self._db = self._resolve_db(client)
                logger.info("Connected to MongoDB database: %s", self._db.name)
                await self.create_indexes()
                return
            except PyMongoError as e:
                attempt += 1
                logger.warning("MongoDB connect failed (attempt %d): %s", attempt, e)
                await asyncio.sleep(retry_delay * attempt)
        raise StorageUnavailableError("Could not connect to MongoDB after retries.")

    async def disconnect(self) -> None:
        """Gracefully close the client."""
        if self._client is None:
            return
        try:
            self._client.close()
            logger.info("MongoDB client closed.")
        finally:
            self._client = None
            self._db = None

    def _resolve_db(self, client):
        name = self.settings.mongo_db_name or client.get_default_database("dripcoin").name
        return client[name]

    def _collection(self, name: str):
        if self._db is None:
            raise StorageUnavailableError("MongoDB not connected. Call connect() first.")
        return self._db[name]

    async def create_indexes(self) -> None:
        """`_id` is already unique; referrals is indexed for referrer lookups."""
        try:
            await self._collection(self.settings.users_collection).create_index("referrals")
            logger.info("MongoDB indexes created/ensured.")
        except PyMongoError:
            logger.exception("Error creating MongoDB indexes.")

    # -------------------------
    # READ / WRITE
    # -------------------------
    async def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        """Return the document without `_id`, or None."""
        coll = self._collection(collection)
        try:
            doc = await coll.find_one({"_id": str(key)})
        except PyMongoError as e:
            raise StorageUnavailableError(f"read {collection}/{key} failed: {e}") from e
        if doc is None:
            return None
        doc.pop("_id", None)
        return doc

    async def set(self, collection: str, key: str, fields: Dict[str, Any], merge: bool = False) -> None:
        """Write fields. merge=True updates only the given fields, otherwise the document is replaced."""
        coll = self._collection(collection)
        try:
            if merge:
                await coll.update_one({"_id": str(key)}, {"$set": fields}, upsert=True)
            else:
                await coll.replace_one({"_id": str(key)}, dict(fields), upsert=True)
        except PyMongoError as e:
            raise StorageUnavailableError(f"write {collection}/{key} failed: {e}") from e

    async def create_if_absent(self, collection: str, key: str, fields: Dict[str, Any]) -> bool:
        """Insert the document only if `key` does not exist. True if this call created it."""
        coll = self._collection(collection)
        try:
            res = await coll.update_one({"_id": str(key)}, {"$setOnInsert": fields}, upsert=True)
        except PyMongoError as e:
            raise StorageUnavailableError(f"create {collection}/{key} failed: {e}") from e
        return res.upserted_id is not None

    async def set_if_unset(self, collection: str, key: str, field: str, value: Any) -> bool:
        """Write-once merge of a single field. False if the field already holds a value."""
        coll = self._collection(collection)
        try:
            res = await coll.update_one(
                {"_id": str(key), field: {"$in": [None, ""]}},
                {"$set": {field: value}},
            )
        except PyMongoError as e:
            raise StorageUnavailableError(f"write-once {collection}/{key}.{field} failed: {e}") from e
        return res.modified_count == 1

    async def increment_and_append(
        self,
        collection: str,
        key: str,
        increments: Dict[str, int],
        array_field: str,
        value: Any,
    ) -> bool:
        """
        Apply `increments` and append `value` to `array_field` in one update,
        only if the document exists and `value` is not in the array yet.
        """
        coll = self._collection(collection)
        try:
            res = await coll.update_one(
                {"_id": str(key), array_field: {"$ne": value}},
                {"$inc": increments, "$push": {array_field: value}},
            )
        except PyMongoError as e:
            raise StorageUnavailableError(f"credit {collection}/{key} failed: {e}") from e
        return res.modified_count == 1


__all__ = ["MongoDocumentStore"]
