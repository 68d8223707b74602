# zmongo_orgs/entity_service.py
import logging
from typing import Any, Dict, Iterable, Optional, Sequence, Type

from bson import ObjectId

from zmongo_orgs.errors import NotFoundError, ValidationError, ZMongoError
from zmongo_orgs.models import MongoModel, PartialUpdate, RecordLike, validate
from zmongo_orgs.safe_result import SafeResult
from zmongo_orgs.zmongo import INSERTION_ORDER, ZMongo

logger = logging.getLogger(__name__)


class EntityService:
    """
    create / get_by_id / update / delete / list_all over one collection.

    Subclasses name the collection and the models. When ``populated_model`` is
    set, get_by_id resolves every reference declared in ``model.references``;
    list_all never does.
    """

    collection: str = ""
    model: Type[MongoModel] = MongoModel
    update_model: Type[PartialUpdate] = PartialUpdate
    populated_model: Optional[Type[MongoModel]] = None

    def __init__(self, zmongo: ZMongo):
        self.zmongo = zmongo

    # ---------- helpers ----------
    @staticmethod
    def _check_id(record_id: Any) -> ObjectId:
        if isinstance(record_id, ObjectId):
            return record_id
        if isinstance(record_id, str) and ObjectId.is_valid(record_id):
            return ObjectId(record_id)
        raise ValidationError(f"{record_id!r} is not a valid record id")

    def _query(self, query: Dict[str, Any]) -> Dict[str, Any]:
        """Coerce reference values in an equality query to ObjectId."""
        normalized = dict(query)
        for field in self.model.references:
            if field in normalized:
                normalized[field] = ZMongo._to_objectid(normalized[field])
        return normalized

    def _to_model(self, doc: Dict[str, Any], model_cls: Optional[Type[MongoModel]] = None) -> MongoModel:
        return validate(model_cls or self.model, doc)

    async def _find_by_id(self, oid: ObjectId) -> Dict[str, Any]:
        doc = (await self.zmongo.find_document(self.collection, {"_id": oid})).unwrap()
        if doc is None:
            raise NotFoundError(self.collection, oid)
        return doc

    async def _resolve_references(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        resolved = dict(doc)
        for field, ref_collection in self.model.references.items():
            ref_id = resolved.get(field)
            if ref_id is None:
                continue
            ref_doc = (await self.zmongo.find_document(ref_collection, {"_id": ref_id})).unwrap()
            if ref_doc is None:
                raise NotFoundError(
                    ref_collection,
                    ref_id,
                    f"'{field}' of {self.collection} {doc.get('_id')} references missing "
                    f"{ref_collection} record {ref_id}",
                )
            resolved[field] = ref_doc
        return resolved

    async def _populate(self, doc: Dict[str, Any]) -> MongoModel:
        if self.populated_model is None:
            return self._to_model(doc)
        return self._to_model(await self._resolve_references(doc), self.populated_model)

    # ---------- operations ----------
    async def create(self, record: RecordLike) -> SafeResult:
        try:
            entity = validate(self.model, record)
            if entity.id is not None:
                raise ValidationError(f"New {self.model.__name__} records must not carry an _id")
            stored = (await self.zmongo.insert_document(self.collection, entity)).unwrap()
            return SafeResult.ok(self._to_model(stored))
        except ZMongoError as e:
            return SafeResult.from_exception(e)

    async def insert_many(self, records: Iterable[RecordLike]) -> SafeResult:
        try:
            entities = [validate(self.model, record) for record in records]
            stored = (await self.zmongo.insert_documents(self.collection, entities)).unwrap()
            return SafeResult.ok([self._to_model(doc) for doc in stored])
        except ZMongoError as e:
            return SafeResult.from_exception(e)

    async def get_by_id(self, record_id: Any) -> SafeResult:
        try:
            doc = await self._find_by_id(self._check_id(record_id))
            return SafeResult.ok(await self._populate(doc))
        except ZMongoError as e:
            return SafeResult.from_exception(e)

    async def update(self, record_id: Any, fields: RecordLike) -> SafeResult:
        """Partial update: only the supplied fields change."""
        try:
            oid = self._check_id(record_id)
            changes = validate(self.update_model, fields).to_update()
            if not changes:
                return SafeResult.ok(self._to_model(await self._find_by_id(oid)))
            doc = (await self.zmongo.update_document(self.collection, {"_id": oid}, {"$set": changes})).unwrap()
            if doc is None:
                raise NotFoundError(self.collection, oid)
            return SafeResult.ok(self._to_model(doc))
        except ZMongoError as e:
            return SafeResult.from_exception(e)

    async def delete(self, record_id: Any) -> SafeResult:
        """Delete one record and return its pre-deletion snapshot. Never cascades."""
        try:
            oid = self._check_id(record_id)
            doc = (await self.zmongo.delete_document(self.collection, {"_id": oid})).unwrap()
            if doc is None:
                raise NotFoundError(self.collection, oid)
            return SafeResult.ok(self._to_model(doc))
        except ZMongoError as e:
            return SafeResult.from_exception(e)

    async def list_all(self) -> SafeResult:
        """Every record in insertion order, references left unresolved."""
        try:
            docs = (await self.zmongo.find_documents(self.collection, {}, sort=INSERTION_ORDER)).unwrap()
            return SafeResult.ok([self._to_model(doc) for doc in docs])
        except ZMongoError as e:
            return SafeResult.from_exception(e)

    async def find_one(
        self,
        query: Dict[str, Any],
        *,
        fields: Optional[Sequence[str]] = None,
        populate: bool = False,
    ) -> SafeResult:
        """
        First record matching ``query``, or ok(None).

        With ``fields`` only those keys (plus _id) come back, as a plain dict
        since the record is incomplete. ``populate`` resolves references.
        """
        try:
            doc = (await self.zmongo.find_document(self.collection, self._query(query), fields=fields)).unwrap()
            if doc is None:
                return SafeResult.ok(None)
            if fields:
                return SafeResult.ok(await self._resolve_references(doc) if populate else doc)
            if populate:
                return SafeResult.ok(await self._populate(doc))
            return SafeResult.ok(self._to_model(doc))
        except ZMongoError as e:
            return SafeResult.from_exception(e)

    async def count(self, query: Optional[Dict[str, Any]] = None) -> SafeResult:
        try:
            res = (await self.zmongo.count_documents(self.collection, self._query(query or {}))).unwrap()
            return SafeResult.ok(res["count"])
        except ZMongoError as e:
            return SafeResult.from_exception(e)

    async def delete_all(self) -> SafeResult:
        result = await self.zmongo.delete_documents(self.collection, {})
        if result.success:
            logger.debug(f"Cleared {result.data['deleted_count']} record(s) from '{self.collection}'")
        return result
