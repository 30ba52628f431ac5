"""Idempotent bootstrap of the registry records collection."""

import asyncio
import sys
from dataclasses import dataclass
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING
from pymongo.errors import OperationFailure, PyMongoError

from initdb.config import Settings
from initdb.db import ClientFactory, Sleep, close_db, connect, make_client
from initdb.models import SAMPLE_RECORD, Record

EXIT_OK = 0
EXIT_SEED_FAILED = 1
EXIT_PROBE_FAILED = 2

INDEX_FIELD = "id"


class ProbeError(Exception):
    """The existence check failed or returned something we cannot read."""


@dataclass
class InitResult:
    seeded: bool = False
    error: Optional[str] = None


def _names(value: Any, what: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(n, str) for n in value):
        raise ProbeError(f"Malformed {what} listing: {value!r}")
    return value


async def probe(client: AsyncIOMotorClient, db_name: str, collection_name: str) -> bool:
    """Return True when ``collection_name`` already exists in ``db_name``."""
    try:
        databases = _names(await client.list_database_names(), "database")
        if db_name not in databases:
            return False
        collections = _names(
            await client[db_name].list_collection_names(), "collection"
        )
    except PyMongoError as e:
        raise ProbeError(f"Cannot list databases or collections: {e}") from e
    return collection_name in collections


async def initialize(
    client: AsyncIOMotorClient,
    db_name: str,
    collection_name: str,
    record: Record = SAMPLE_RECORD,
) -> InitResult:
    """Create the collection, index ``id`` and insert one seed record.

    A failed insert is reported and recorded in the result, not raised.
    """
    db = client[db_name]
    await db.create_collection(collection_name)
    print(f"Created collection '{collection_name}' in database '{db_name}'")

    await db[collection_name].create_index([(INDEX_FIELD, ASCENDING)])
    print(f"Created index on '{INDEX_FIELD}'")

    try:
        await db[collection_name].insert_one(record.to_document())
    except OperationFailure as e:
        print(f"Error when writing the data: {e}", file=sys.stderr)
        return InitResult(seeded=False, error=str(e))

    print(f"Inserted seed record '{record.id}'")
    return InitResult(seeded=True)


async def run(
    settings: Settings,
    *,
    record: Record = SAMPLE_RECORD,
    sleep: Sleep = asyncio.sleep,
    client_factory: ClientFactory = make_client,
) -> int:
    """Connect, probe and initialize once. Returns the process exit code."""
    client = await connect(settings, sleep=sleep, client_factory=client_factory)
    try:
        try:
            exists = await probe(client, settings.database, settings.collection)
        except ProbeError as e:
            print(f"Startup failed: {e}", file=sys.stderr)
            return EXIT_PROBE_FAILED

        if exists:
            print(
                f"Collection '{settings.collection}' already exists "
                f"in database '{settings.database}'"
            )
            return EXIT_OK

        result = await initialize(client, settings.database, settings.collection, record)
    finally:
        await close_db()

    if result.error is not None and settings.strict_exit_code:
        return EXIT_SEED_FAILED
    return EXIT_OK
