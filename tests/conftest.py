"""Shared pytest fixtures."""

import asyncio
import copy
from collections.abc import AsyncIterator, Iterator
from types import SimpleNamespace
from typing import Any

import bcrypt
import pytest
from fastapi.testclient import TestClient
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from propnet.app import App
from propnet.config import Config
from propnet.core.core import Core
from propnet.core.modules.profile import service as profile_service
from propnet.web.server import create_fastapi_app

TEST_SECRET_KEY = "test-session-secret-key-with-enough-entropy-0123456789"
ADMIN_PASSWORD = "portal-pass-123"


# === In-memory MongoDB double ===
# Each operation yields to the event loop first, so concurrent callers interleave
# between operations exactly as they would across network round trips.


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    for key, condition in query.items():
        value = doc.get(key)
        if isinstance(condition, dict) and "$in" in condition:
            if value not in condition["$in"]:
                return False
        elif value != condition:
            return False
    return True


def _project(doc: dict[str, Any], projection: dict[str, Any] | None) -> dict[str, Any]:
    if not projection:
        return copy.deepcopy(doc)
    keys = {"_id", *(k for k, v in projection.items() if v)}
    return {k: copy.deepcopy(v) for k, v in doc.items() if k in keys}


class FakeCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._docs.sort(key=lambda d: (d.get(key) is not None, d.get(key)), reverse=direction < 0)
        return self

    def skip(self, count: int) -> "FakeCursor":
        self._docs = self._docs[count:]
        return self

    def limit(self, count: int) -> "FakeCursor":
        self._docs = self._docs[:count]
        return self

    def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[dict[str, Any]]:
        for doc in self._docs:
            yield copy.deepcopy(doc)


class FakeCollection:
    def __init__(self, name: str) -> None:
        self.name = name
        self.docs: list[dict[str, Any]] = []
        self.unique_keys: list[tuple[str, ...]] = [("_id",)]

    async def create_index(self, keys: list[tuple[str, int]], unique: bool = False, **_: Any) -> str:
        if unique:
            self.unique_keys.append(tuple(k for k, _ in keys))
        return "_".join(k for k, _ in keys)

    def _check_unique(self, candidate: dict[str, Any], ignore: dict[str, Any] | None = None) -> None:
        for fields in self.unique_keys:
            for doc in self.docs:
                if doc is ignore:
                    continue
                if all(doc.get(f) == candidate.get(f) for f in fields):
                    raise DuplicateKeyError(f"E11000 duplicate key on {fields}")

    async def insert_one(self, document: dict[str, Any]) -> SimpleNamespace:
        await asyncio.sleep(0)
        self._check_unique(document)
        self.docs.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def find_one(
        self, query: dict[str, Any], projection: dict[str, Any] | None = None, **_: Any
    ) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        for doc in self.docs:
            if _matches(doc, query):
                return _project(doc, projection)
        return None

    def find(self, query: dict[str, Any] | None = None) -> FakeCursor:
        return FakeCursor([doc for doc in self.docs if _matches(doc, query or {})])

    async def count_documents(self, query: dict[str, Any]) -> int:
        await asyncio.sleep(0)
        return sum(1 for doc in self.docs if _matches(doc, query))

    async def find_one_and_update(
        self,
        query: dict[str, Any],
        update: dict[str, Any],
        projection: dict[str, Any] | None = None,
        return_document: bool = ReturnDocument.BEFORE,
        **_: Any,
    ) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        for doc in self.docs:
            if _matches(doc, query):
                before = _project(doc, projection)
                doc.update(copy.deepcopy(update["$set"]))
                return _project(doc, projection) if return_document == ReturnDocument.AFTER else before
        return None

    async def update_one(self, query: dict[str, Any], update: dict[str, Any]) -> SimpleNamespace:
        result = await self.find_one_and_update(query, update)
        return SimpleNamespace(matched_count=int(result is not None))

    async def delete_one(self, query: dict[str, Any]) -> SimpleNamespace:
        await asyncio.sleep(0)
        for doc in self.docs:
            if _matches(doc, query):
                self.docs.remove(doc)
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection(name))


class FakeMongoClient:
    def __init__(self) -> None:
        self.database = FakeDatabase()
        self.closed = False

    def get_database(self, _name: str) -> FakeDatabase:
        return self.database

    async def aclose(self) -> None:
        self.closed = True


# === Fixtures ===


@pytest.fixture
def config() -> Config:
    return Config(
        database_url="mongodb://localhost:27017/propnet_test",
        session_secret_key=TEST_SECRET_KEY,
        admin_username="admin@propnet.test",
        admin_password_hash=bcrypt.hashpw(ADMIN_PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode(),
        twilio_account_sid="AC123",
        twilio_auth_token="twilio-token",
        twilio_verify_service_sid="VA123",
        google_maps_api_key="maps-key",
        _env_file=None,
    )


@pytest.fixture
def mongo_client() -> FakeMongoClient:
    return FakeMongoClient()


@pytest.fixture
async def app(config: Config, mongo_client: FakeMongoClient) -> AsyncIterator[App]:
    """Started application on the in-memory database."""
    instance = App(config, mongo_client)  # type: ignore[arg-type]
    async with instance.lifespan():
        yield instance


@pytest.fixture
def core(app: App) -> Core:
    return app._core


@pytest.fixture
def client(config: Config, mongo_client: FakeMongoClient) -> Iterator[TestClient]:
    """HTTP client; entering the context runs the application lifespan."""
    instance = App(config, mongo_client)  # type: ignore[arg-type]
    fastapi_app = create_fastapi_app(instance, config)
    with TestClient(fastapi_app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def fast_pin_hash(monkeypatch: pytest.MonkeyPatch) -> None:
    """Use cheap bcrypt rounds so PIN tests stay quick."""
    monkeypatch.setattr(
        profile_service,
        "hash_pin",
        lambda pin: bcrypt.hashpw(pin.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8"),
    )


@pytest.fixture
def otp_codes(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Stub the SMS provider; maps phone -> accepted code. Send always succeeds."""
    codes: dict[str, str] = {}
    otp = client.app.state.app._core.services.otp  # type: ignore[attr-defined]

    async def send_code(phone: str) -> str:
        return "pending"

    async def check_code(phone: str, code: str) -> bool:
        return codes.get(phone) == code

    monkeypatch.setattr(otp, "send_code", send_code)
    monkeypatch.setattr(otp, "check_code", check_code)
    return codes


def sign_up(client: TestClient, otp_codes: dict[str, str], phone: str = "9876543210", pin: str = "4321") -> None:
    """Verify the phone and create a PIN; leaves the session cookie on the client."""
    otp_codes["+91" + phone[-10:]] = "123456"
    assert client.post("/api/auth/verify-otp", json={"phone": phone, "code": "123456"}).status_code == 200
    assert client.post("/api/auth/setup-pin", json={"phone": phone, "pin": pin}).status_code == 200


@pytest.fixture
def signed_in(client: TestClient, otp_codes: dict[str, str], fast_pin_hash: None) -> TestClient:
    """Client holding a session for a freshly signed-up broker."""
    sign_up(client, otp_codes)
    return client
