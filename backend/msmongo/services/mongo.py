from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

import pymongo
from bson.errors import BSONError
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from ..errors import DatabaseError
from ..utils import to_jsonable


class MongoStore:
    """
    Executes the four gateway operations against a shared MongoClient.
    MongoClient pools connections and is safe to use from many request threads,
    so no extra locking happens here.
    """

    def __init__(self, client: MongoClient) -> None:
        self._client = client

    @classmethod
    def connect(cls, uri: str, timeout: float = 10.0) -> "MongoStore":
        client = MongoClient(uri, serverSelectionTimeoutMS=int(timeout * 1000))
        store = cls(client)
        try:
            # Trigger server selection to validate connection
            store.ping(timeout)
        except DatabaseError:
            client.close()
            raise
        return store

    @contextmanager
    def _deadline(self, timeout: float) -> Iterator[None]:
        try:
            with pymongo.timeout(timeout):
                yield
        except (PyMongoError, BSONError, TypeError, ValueError, OverflowError) as e:
            # TypeError: payload is not a document (e.g. a bare list or string)
            # OverflowError: an int wider than 8 bytes
            raise DatabaseError(str(e)) from e

    def ping(self, timeout: float = 5.0) -> None:
        with self._deadline(timeout):
            self._client.admin.command("ping")

    def close(self) -> None:
        self._client.close()

    def insert_one(self, db: str, coll: str, data: Any, timeout: float) -> Dict[str, Any]:
        with self._deadline(timeout):
            res = self._client[db][coll].insert_one(data)
        return {"InsertedID": to_jsonable(res.inserted_id)}

    def find(self, db: str, coll: str, query: Any, timeout: float) -> List[Any]:
        with self._deadline(timeout):
            with self._client[db][coll].find(query) as cursor:
                return [to_jsonable(doc) for doc in cursor]

    def update_many(self, db: str, coll: str, query: Any, data: Any, timeout: float) -> Dict[str, Any]:
        with self._deadline(timeout):
            res = self._client[db][coll].update_many(query, {"$set": data})
        return {
            "MatchedCount": res.matched_count,
            "ModifiedCount": res.modified_count,
            "UpsertedCount": 0 if res.upserted_id is None else 1,
            "UpsertedID": to_jsonable(res.upserted_id),
        }

    def delete_many(self, db: str, coll: str, query: Any, timeout: float) -> Dict[str, Any]:
        with self._deadline(timeout):
            res = self._client[db][coll].delete_many(query)
        return {"DeletedCount": res.deleted_count}
