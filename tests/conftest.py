import os
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from pymongo import DESCENDING, MongoClient
from pymongo.errors import PyMongoError

from zmongo_orgs import config
from zmongo_orgs.safe_result import SafeResult
from zmongo_orgs.zmongo import ZMongo

TEST_DB_NAME = "zmongo_orgs_test"


class InMemoryZMongo(ZMongo):
    """
    Dict-backed stand-in for ZMongo, enough for equality queries and $set
    updates. find_documents honours ``sort``. ``calls`` lists every store
    method invoked so tests can assert that validation happened before any
    store access.
    """

    def __init__(self):
        super().__init__(db=MagicMock())
        self.collections: Dict[str, Dict[ObjectId, Dict[str, Any]]] = {}
        self.calls: List[str] = []
        self.indexes: List[Dict[str, Any]] = []
        self.aggregate_rows: List[Dict[str, Any]] = []

    def _coll(self, name: str) -> Dict[ObjectId, Dict[str, Any]]:
        return self.collections.setdefault(name, {})

    def _matches(self, doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
        query = self._normalize_ids_in_query(query or {})
        return all(doc.get(k) == v for k, v in query.items())

    @staticmethod
    def _project(doc: Dict[str, Any], fields) -> Dict[str, Any]:
        if not fields:
            return dict(doc)
        return {k: v for k, v in doc.items() if k == "_id" or k in fields}

    async def ping(self) -> SafeResult:
        self.calls.append("ping")
        return self.ok({"database": "memory"})

    async def insert_document(self, collection, document) -> SafeResult:
        self.calls.append("insert_document")
        doc = {**self._doc_to_dict(document), "_id": ObjectId()}
        self._coll(collection)[doc["_id"]] = doc
        return self.ok(dict(doc))

    async def insert_documents(self, collection, documents) -> SafeResult:
        self.calls.append("insert_documents")
        stored = []
        for document in documents:
            doc = {**self._doc_to_dict(document), "_id": ObjectId()}
            self._coll(collection)[doc["_id"]] = doc
            stored.append(dict(doc))
        return self.ok(stored)

    async def find_document(self, collection, query, *, fields=None) -> SafeResult:
        self.calls.append("find_document")
        for doc in self._coll(collection).values():
            if self._matches(doc, query):
                return self.ok(self._project(doc, fields))
        return self.ok(None)

    async def find_documents(self, collection, query=None, *, fields=None, sort=None, limit=None) -> SafeResult:
        self.calls.append("find_documents")
        docs = [d for d in self._coll(collection).values() if self._matches(d, query)]
        for field, direction in reversed(sort or []):
            docs.sort(key=lambda d: d[field], reverse=direction == DESCENDING)
        docs = [self._project(d, fields) for d in docs]
        return self.ok(docs[:limit] if limit else docs)

    async def update_document(self, collection, query, update_data) -> SafeResult:
        self.calls.append("update_document")
        for doc in self._coll(collection).values():
            if self._matches(doc, query):
                doc.update(update_data["$set"])
                return self.ok(dict(doc))
        return self.ok(None)

    async def delete_document(self, collection, query) -> SafeResult:
        self.calls.append("delete_document")
        for oid, doc in list(self._coll(collection).items()):
            if self._matches(doc, query):
                return self.ok(self._coll(collection).pop(oid))
        return self.ok(None)

    async def delete_documents(self, collection, query=None) -> SafeResult:
        self.calls.append("delete_documents")
        coll = self._coll(collection)
        doomed = [oid for oid, doc in coll.items() if self._matches(doc, query)]
        for oid in doomed:
            del coll[oid]
        return self.ok({"deleted_count": len(doomed), "acknowledged": True})

    async def count_documents(self, collection, query=None) -> SafeResult:
        self.calls.append("count_documents")
        return self.ok({"count": sum(1 for d in self._coll(collection).values() if self._matches(d, query))})

    async def create_index(self, collection, keys, *, unique=False) -> SafeResult:
        self.calls.append("create_index")
        self.indexes.append({"collection": collection, "keys": keys, "unique": unique})
        return self.ok({"index": f"{keys}_1"})

    async def aggregate(self, collection, pipeline, *, limit=None) -> SafeResult:
        self.calls.append("aggregate")
        return self.ok(list(self.aggregate_rows))


@pytest.fixture
def memory_zmongo() -> InMemoryZMongo:
    return InMemoryZMongo()


def _mongo_available(uri: str) -> Optional[str]:
    client = MongoClient(uri, serverSelectionTimeoutMS=500)
    try:
        client.admin.command("ping")
        return None
    except PyMongoError as e:
        return str(e)
    finally:
        client.close()


@pytest_asyncio.fixture(scope="function")
async def live_zmongo():
    """A ZMongo bound to a scratch database on a real server; skipped when none answers."""
    uri = os.getenv("MONGO_URI", config.DEFAULT_MONGO_URI)
    reason = _mongo_available(uri)
    if reason:
        pytest.skip(f"MongoDB not reachable at {uri}: {reason}")

    zmongo = ZMongo(mongo_uri=uri, database_name=TEST_DB_NAME)
    for coll in (config.ORGANIZATIONS, config.USERS, config.PROJECTS):
        await zmongo.db.drop_collection(coll)
    yield zmongo
    for coll in (config.ORGANIZATIONS, config.USERS, config.PROJECTS):
        await zmongo.db.drop_collection(coll)
    zmongo.close()
