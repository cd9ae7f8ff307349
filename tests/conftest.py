import threading
from collections import defaultdict

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from msmongo.config import Settings
from msmongo.errors import DatabaseError
from msmongo.main import create_app
from msmongo.utils import to_jsonable


def _matches(doc, query):
    return all(doc.get(k) == v for k, v in (query or {}).items())


class FakeStore:
    """In-memory stand-in for MongoStore; filters are plain field equality."""

    def __init__(self):
        self._lock = threading.Lock()
        self.collections = defaultdict(list)
        self.calls = []
        self.fail_with = None

    def _record(self, name, db, coll, timeout):
        self.calls.append((name, db, coll, timeout))
        if self.fail_with is not None:
            raise self.fail_with

    def ping(self, timeout=5.0):
        self._record("ping", None, None, timeout)

    def insert_one(self, db, coll, data, timeout):
        self._record("insert_one", db, coll, timeout)
        if not isinstance(data, dict):
            raise DatabaseError("document must be an instance of dict")
        doc = dict(data)
        doc.setdefault("_id", ObjectId())
        with self._lock:
            self.collections[(db, coll)].append(doc)
        return {"InsertedID": to_jsonable(doc["_id"])}

    def find(self, db, coll, query, timeout):
        self._record("find", db, coll, timeout)
        with self._lock:
            return [to_jsonable(d) for d in self.collections[(db, coll)] if _matches(d, query)]

    def update_many(self, db, coll, query, data, timeout):
        self._record("update_many", db, coll, timeout)
        matched = modified = 0
        with self._lock:
            for doc in self.collections[(db, coll)]:
                if not _matches(doc, query):
                    continue
                matched += 1
                before = dict(doc)
                doc.update(data)
                if doc != before:
                    modified += 1
        return {"MatchedCount": matched, "ModifiedCount": modified, "UpsertedCount": 0, "UpsertedID": None}

    def delete_many(self, db, coll, query, timeout):
        self._record("delete_many", db, coll, timeout)
        with self._lock:
            docs = self.collections[(db, coll)]
            keep = [d for d in docs if not _matches(d, query)]
            deleted = len(docs) - len(keep)
            self.collections[(db, coll)] = keep
        return {"DeletedCount": deleted}


@pytest.fixture
def settings():
    return Settings(log_file=None)


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def app(settings, store):
    return create_app(settings, store=store)


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)
