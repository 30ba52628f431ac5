import asyncio
import sys
from typing import Awaitable, Callable
from urllib.parse import quote_plus

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from initdb.config import Settings
from initdb.retry import RetryPolicy

Sleep = Callable[[float], Awaitable[None]]
ClientFactory = Callable[[Settings], AsyncIOMotorClient]

_client: AsyncIOMotorClient | None = None


def build_uri(settings: Settings) -> str:
    host = f"{settings.host}:{settings.port}"
    if not settings.username:
        return f"mongodb://{host}"
    user = quote_plus(settings.username)
    password = quote_plus(settings.password)
    return f"mongodb://{user}:{password}@{host}"


def make_client(settings: Settings) -> AsyncIOMotorClient:
    return AsyncIOMotorClient(
        build_uri(settings), serverSelectionTimeoutMS=settings.timeout_ms
    )


def get_client() -> AsyncIOMotorClient:
    if _client is None:
        raise RuntimeError("Not connected to MongoDB, call connect() first")
    return _client


async def connect(
    settings: Settings,
    policy: RetryPolicy | None = None,
    *,
    sleep: Sleep = asyncio.sleep,
    client_factory: ClientFactory = make_client,
) -> AsyncIOMotorClient:
    """Open a verified client, retrying until MongoDB answers a ping."""
    global _client
    if policy is None:
        policy = RetryPolicy(delay_seconds=settings.retry_connection_seconds)

    attempt = 0
    while True:
        attempt += 1
        client = None
        try:
            client = client_factory(settings)
            await client.admin.command("ping")
        except PyMongoError as e:
            if client is not None:
                client.close()
            print(f"Cannot connect to MongoDB: {e}", file=sys.stderr)
            if not policy.should_retry(attempt):
                raise
            print(f"Will retry after {policy.delay_seconds} seconds", file=sys.stderr)
            await sleep(policy.delay_seconds)
            continue

        if attempt > 1:
            print(f"Connected to MongoDB after {attempt} attempts")
        _client = client
        return client


async def close_db() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
