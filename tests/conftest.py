"""In-memory stand-ins for the parts of the motor API the initializer touches."""

import pytest
from pymongo.errors import CollectionInvalid, ServerSelectionTimeoutError

import initdb.db
from initdb.config import Settings

ENV_VARS = (
    "PN_REGISTRY_API_MONGODB_HOST",
    "PN_REGISTRY_API_MONGODB_PORT",
    "PN_REGISTRY_API_MONGODB_USERNAME",
    "PN_REGISTRY_API_MONGODB_PASSWORD",
    "PN_REGISTRY_API_MONGODB_DATABASE",
    "PN_REGISTRY_API_MONGODB_COLLECTION",
    "PN_REGISTRY_API_MONGODB_TIMEOUT_MS",
    "RETRY_CONNECTION_SECONDS",
    "INIT_DB_STRICT_EXIT_CODE",
)


class FakeCollection:
    def __init__(self, server: "FakeServer"):
        self._server = server
        self.indexes: list[list[tuple[str, int]]] = []
        self.documents: list[dict] = []

    async def create_index(self, keys):
        self._server.writes += 1
        self.indexes.append(list(keys))
        return "_".join(f"{field}_{direction}" for field, direction in keys)

    async def insert_one(self, document):
        if self._server.insert_error is not None:
            raise self._server.insert_error
        self._server.writes += 1
        self.documents.append(dict(document))


class FakeDatabase:
    def __init__(self, server: "FakeServer", name: str):
        self._server = server
        self.name = name

    async def list_collection_names(self):
        if self._server.collection_listing is not None:
            return self._server.collection_listing
        return list(self._server.databases.get(self.name, {}))

    async def create_collection(self, name):
        collections = self._server.databases.setdefault(self.name, {})
        if name in collections:
            raise CollectionInvalid(f"collection {name} already exists")
        self._server.writes += 1
        collections[name] = FakeCollection(self._server)

    def __getitem__(self, name) -> FakeCollection:
        collections = self._server.databases.setdefault(self.name, {})
        return collections.setdefault(name, FakeCollection(self._server))


class FakeAdmin:
    def __init__(self, server: "FakeServer"):
        self._server = server

    async def command(self, name):
        assert name == "ping"
        if self._server.pings_to_fail > 0:
            self._server.pings_to_fail -= 1
            raise ServerSelectionTimeoutError("localhost:27017: connection refused")
        return {"ok": 1.0}


class FakeClient:
    def __init__(self, server: "FakeServer"):
        self._server = server
        self.admin = FakeAdmin(server)
        self.closed = False

    async def list_database_names(self):
        if self._server.list_error is not None:
            raise self._server.list_error
        if self._server.database_listing is not None:
            return self._server.database_listing
        return [name for name, colls in self._server.databases.items() if colls]

    def __getitem__(self, name) -> FakeDatabase:
        return FakeDatabase(self._server, name)

    def close(self):
        self.closed = True


class FakeServer:
    """Shared state behind every client the factory hands out."""

    def __init__(self):
        self.databases: dict[str, dict[str, FakeCollection]] = {}
        self.pings_to_fail = 0
        self.writes = 0
        self.insert_error: Exception | None = None
        self.list_error: Exception | None = None
        self.database_listing = None
        self.collection_listing = None
        self.clients: list[FakeClient] = []

    def client_factory(self, settings) -> FakeClient:
        client = FakeClient(self)
        self.clients.append(client)
        return client

    def add_collection(self, db_name: str, collection_name: str) -> FakeCollection:
        collection = FakeCollection(self)
        self.databases.setdefault(db_name, {})[collection_name] = collection
        return collection


class RecordingSleep:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    """Keep real environment variables and the module-level client out of tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(initdb.db, "_client", None)


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        host="mongo",
        port=27017,
        username="root",
        password="secret",
        database="pn-registry",
        collection="records",
        retry_connection_seconds=3,
    )
