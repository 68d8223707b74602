# zmongo_orgs/zmongo.py
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import motor.motor_asyncio
from bson import ObjectId
from bson.errors import BSONError
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import BulkWriteError, DuplicateKeyError, PyMongoError
from pymongo.results import DeleteResult, InsertManyResult, InsertOneResult

from zmongo_orgs import config
from zmongo_orgs.errors import StoreError, ValidationError
from zmongo_orgs.safe_result import SafeResult

logger = logging.getLogger(__name__)

JsonDict = Dict[str, Any]
DocLike = Union[dict, Any]
SortSpec = List[Tuple[str, int]]

DUPLICATE_KEY_CODE = 11000
INSERTION_ORDER: SortSpec = [("_id", ASCENDING)]


class ZMongo:
    """
    Thin async adapter over a motor database.

    Every call returns a SafeResult. Driver faults never escape: a duplicate
    key becomes a ValidationError failure, anything else a StoreError failure.
    """

    def __init__(
        self,
        db: Optional[motor.motor_asyncio.AsyncIOMotorDatabase] = None,
        *,
        mongo_uri: Optional[str] = None,
        database_name: Optional[str] = None,
    ):
        if db is not None:
            self.db = db
        else:
            mongo_uri = mongo_uri or config.get_mongo_uri()
            database_name = database_name or config.get_database_name()
            try:
                client = motor.motor_asyncio.AsyncIOMotorClient(mongo_uri)
                if database_name:
                    self.db = client[database_name]
                else:
                    self.db = client.get_default_database(config.DEFAULT_DATABASE_NAME)
            except PyMongoError as e:
                raise StoreError(f"connect failed: {e}") from e

    async def __aenter__(self) -> "ZMongo":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ---------- Result helpers ----------
    @staticmethod
    def ok(data: Any = None) -> SafeResult:
        return SafeResult.ok(data)

    @staticmethod
    def fail(error: str, data: Any = None, exc: Optional[Exception] = None) -> SafeResult:
        return SafeResult.fail(error, data=data, exc=exc)

    @classmethod
    def _store_failure(cls, operation: str, collection: str, e: Exception) -> SafeResult:
        """Translate a driver exception into a typed failure."""
        if isinstance(e, DuplicateKeyError):
            exc: Exception = ValidationError(f"Duplicate key in '{collection}': {e.details or e}")
        elif isinstance(e, BulkWriteError) and any(
            err.get("code") == DUPLICATE_KEY_CODE for err in e.details.get("writeErrors", [])
        ):
            exc = ValidationError(f"Duplicate key in '{collection}'", errors=e.details["writeErrors"])
        else:
            exc = StoreError(f"{operation} on '{collection}' failed: {e}")
        exc.__cause__ = e
        return cls.fail(str(exc), exc=exc)

    # ---------- ObjectId helpers ----------
    @staticmethod
    def _to_objectid(value: Any) -> Any:
        """Return value as ObjectId if it's a 24-hex string or already an ObjectId; otherwise return as-is."""
        if isinstance(value, ObjectId):
            return value
        if isinstance(value, str) and ObjectId.is_valid(value):
            return ObjectId(value)
        return value

    @classmethod
    def _normalize_ids_in_query(cls, query: Any) -> Any:
        """Convert a string _id in an equality query to ObjectId."""
        if not isinstance(query, dict) or "_id" not in query:
            return query
        return {**query, "_id": cls._to_objectid(query["_id"])}

    @staticmethod
    def _doc_to_dict(doc: DocLike) -> Dict:
        if hasattr(doc, "to_document"):
            return doc.to_document()
        return dict(doc)

    @staticmethod
    def _projection(fields: Optional[Sequence[str]]) -> Optional[Dict[str, int]]:
        if not fields:
            return None
        return {field: 1 for field in fields}

    def close(self):
        """Closes the underlying MongoDB client connection."""
        if self.db is not None and self.db.client is not None:
            self.db.client.close()
            logger.info("MongoDB connection closed.")

    # ---------- Connection ----------
    async def ping(self) -> SafeResult:
        try:
            await self.db.client.admin.command("ping")
            return self.ok({"database": self.db.name})
        except PyMongoError as e:
            return self._store_failure("ping", self.db.name, e)

    # ---------- CRUD ----------
    async def insert_document(self, collection: str, document: DocLike) -> SafeResult:
        try:
            doc_dict = self._doc_to_dict(document)
            res: InsertOneResult = await self.db[collection].insert_one(doc_dict)
            return self.ok({**doc_dict, "_id": res.inserted_id})
        except (PyMongoError, BSONError) as e:
            return self._store_failure("insert_document", collection, e)

    async def insert_documents(self, collection: str, documents: List[DocLike]) -> SafeResult:
        if not documents:
            return self.ok([])
        try:
            doc_list = [self._doc_to_dict(doc) for doc in documents]
            res: InsertManyResult = await self.db[collection].insert_many(doc_list)
            return self.ok([{**doc, "_id": doc_id} for doc, doc_id in zip(doc_list, res.inserted_ids)])
        except (PyMongoError, BSONError) as e:
            return self._store_failure("insert_documents", collection, e)

    async def find_document(
        self,
        collection: str,
        query: JsonDict,
        *,
        fields: Optional[Sequence[str]] = None,
    ) -> SafeResult:
        """Returns ok(None) when nothing matches."""
        try:
            norm_query = self._normalize_ids_in_query(query)
            doc = await self.db[collection].find_one(norm_query, self._projection(fields))
            return self.ok(doc)
        except (PyMongoError, BSONError) as e:
            return self._store_failure("find_document", collection, e)

    async def find_documents(
        self,
        collection: str,
        query: Optional[JsonDict] = None,
        *,
        fields: Optional[Sequence[str]] = None,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> SafeResult:
        try:
            norm_query = self._normalize_ids_in_query(query or {})
            cursor = self.db[collection].find(norm_query, self._projection(fields))
            if sort:
                cursor = cursor.sort(sort)
            docs = await cursor.to_list(length=limit)
            return self.ok(docs)
        except (PyMongoError, BSONError) as e:
            return self._store_failure("find_documents", collection, e)

    async def update_document(
        self,
        collection: str,
        query: JsonDict,
        update_data: DocLike,
    ) -> SafeResult:
        """Apply the update to the first match and return the document as it is afterwards (None if no match)."""
        try:
            norm_query = self._normalize_ids_in_query(query)
            update_dict = dict(update_data)
            # Auto-wrap non-operator updates
            if not any(isinstance(k, str) and k.startswith("$") for k in update_dict.keys()):
                update_dict = {"$set": update_dict}
            doc = await self.db[collection].find_one_and_update(
                norm_query, update_dict, return_document=ReturnDocument.AFTER
            )
            return self.ok(doc)
        except (PyMongoError, BSONError) as e:
            return self._store_failure("update_document", collection, e)

    async def delete_document(self, collection: str, query: JsonDict) -> SafeResult:
        """Delete the first match and return its pre-deletion snapshot (None if no match)."""
        try:
            norm_query = self._normalize_ids_in_query(query)
            doc = await self.db[collection].find_one_and_delete(norm_query)
            return self.ok(doc)
        except (PyMongoError, BSONError) as e:
            return self._store_failure("delete_document", collection, e)

    async def delete_documents(self, collection: str, query: Optional[JsonDict] = None) -> SafeResult:
        try:
            norm_query = self._normalize_ids_in_query(query or {})
            res: DeleteResult = await self.db[collection].delete_many(norm_query)
            return self.ok({"deleted_count": res.deleted_count, "acknowledged": res.acknowledged})
        except (PyMongoError, BSONError) as e:
            return self._store_failure("delete_documents", collection, e)

    # ---------- Misc ----------
    async def count_documents(self, collection: str, query: Optional[JsonDict] = None) -> SafeResult:
        try:
            norm_query = self._normalize_ids_in_query(query or {})
            count = await self.db[collection].count_documents(norm_query)
            return self.ok({"count": count})
        except (PyMongoError, BSONError) as e:
            return self._store_failure("count_documents", collection, e)

    async def aggregate(self, collection: str, pipeline: List[JsonDict], *, limit: Optional[int] = None) -> SafeResult:
        try:
            norm_pipeline: List[JsonDict] = []
            for stage in pipeline:
                if "$match" in stage and isinstance(stage["$match"], dict):
                    norm_pipeline.append({"$match": self._normalize_ids_in_query(stage["$match"])})
                else:
                    norm_pipeline.append(stage)
            cursor = self.db[collection].aggregate(norm_pipeline)
            docs = await cursor.to_list(length=limit)
            return self.ok(docs)
        except (PyMongoError, BSONError) as e:
            return self._store_failure("aggregate", collection, e)

    async def create_index(
        self,
        collection: str,
        keys: Union[str, SortSpec],
        *,
        unique: bool = False,
    ) -> SafeResult:
        try:
            name = await self.db[collection].create_index(keys, unique=unique)
            return self.ok({"index": name})
        except PyMongoError as e:
            return self._store_failure("create_index", collection, e)
