# backend/tests/conftest.py
# Shared fixtures: in-memory stand-in for the pymongo collections we use

import copy
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from main import app
from transit.services import user_service
from transit.utils.db_setup import get_database


def _matches(doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for key, expected in query.items():
        actual = doc.get(key)
        if isinstance(expected, dict) and "$in" in expected:
            if actual not in expected["$in"]:
                return False
        elif isinstance(expected, dict) and "$exists" in expected:
            if (key in doc) != bool(expected["$exists"]):
                return False
        elif actual != expected:
            return False
    return True


class _Cursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> "_Cursor":
        # Missing values order below everything else, as in MongoDB
        self._docs.sort(
            key=lambda d: (d.get(key) is not None, d.get(key) or 0), reverse=direction < 0
        )
        return self

    def __iter__(self):
        return iter(self._docs)


class _InsertResult:
    def __init__(self, inserted_id: int):
        self.inserted_id = inserted_id


class _UpdateResult:
    def __init__(self, matched_count: int):
        self.matched_count = matched_count
        self.modified_count = matched_count


class FakeCollection:
    def __init__(self, name: str):
        self.name = name
        self.docs: List[Dict[str, Any]] = []

    def _strip(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        out = copy.deepcopy(doc)
        out.pop("_id", None)
        return out

    def find(self, query: Optional[Dict[str, Any]] = None, projection=None) -> _Cursor:
        return _Cursor([self._strip(d) for d in self.docs if _matches(d, query or {})])

    def find_one(self, query: Optional[Dict[str, Any]] = None, projection=None):
        for doc in self.docs:
            if _matches(doc, query or {}):
                return self._strip(doc)
        return None

    def insert_one(self, doc: Dict[str, Any]) -> _InsertResult:
        stored = copy.deepcopy(doc)
        stored["_id"] = len(self.docs) + 1
        self.docs.append(stored)
        doc["_id"] = stored["_id"]
        return _InsertResult(stored["_id"])

    def insert_many(self, docs: List[Dict[str, Any]]) -> None:
        for doc in docs:
            self.insert_one(doc)

    def _apply(self, doc: Dict[str, Any], update: Dict[str, Any]) -> None:
        doc.update(copy.deepcopy(update.get("$set", {})))
        for field in update.get("$unset", {}):
            doc.pop(field, None)

    def update_one(self, query: Dict[str, Any], update: Dict[str, Any]) -> _UpdateResult:
        for doc in self.docs:
            if _matches(doc, query):
                self._apply(doc, update)
                return _UpdateResult(1)
        return _UpdateResult(0)

    def find_one_and_update(self, query: Dict[str, Any], update: Dict[str, Any], projection=None):
        for doc in self.docs:
            if _matches(doc, query):
                before = self._strip(doc)
                self._apply(doc, update)
                return before
        return None

    def create_index(self, *args, **kwargs) -> str:
        return kwargs.get("name", "index")


class _FakeClient:
    def server_info(self) -> Dict[str, Any]:
        return {"version": "fake"}


class FakeDatabase:
    def __init__(self):
        self._collections: Dict[str, FakeCollection] = {}
        self.client = _FakeClient()

    def __getitem__(self, name: str) -> FakeCollection:
        return self._collections.setdefault(name, FakeCollection(name))

    def __getattr__(self, name: str) -> FakeCollection:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture OTP emails instead of talking to SMTP."""
    sent = []

    def fake_send_otp_email(to_email, otp, subject, ttl_minutes):
        sent.append({"to": to_email, "otp": otp, "subject": subject, "ttl": ttl_minutes})
        return True

    monkeypatch.setattr(user_service, "send_otp_email", fake_send_otp_email)
    return sent


@pytest.fixture
def client(fake_db, sent_emails):
    app.dependency_overrides[get_database] = lambda: fake_db
    yield TestClient(app)
    app.dependency_overrides.clear()
