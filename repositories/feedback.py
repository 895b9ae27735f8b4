import re
import logging
from datetime import datetime, time, timezone
from typing import List, Optional, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from domain.feedback.feedback import Feedback, FeedbackFilters, FeedbackStats

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {"created_at", "name", "category", "processed", "membership_number", "from_phone"}


def _serialize_doc(doc: dict) -> dict:
    """Convert MongoDB ObjectId to string for JSON serialization."""
    if doc is None:
        return None

    if "_id" in doc and isinstance(doc["_id"], ObjectId):
        doc["id"] = str(doc.pop("_id"))

    return doc


def _object_id(_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(_id)
    except (InvalidId, TypeError):
        return None


def _contains(value: str) -> dict:
    return {"$regex": re.escape(value), "$options": "i"}


def _parse_day(value: str, end_of_day: bool = False) -> datetime:
    day = datetime.strptime(value, "%Y-%m-%d").date()
    moment = time(23, 59, 59) if end_of_day else time(0, 0, 0)
    return datetime.combine(day, moment, tzinfo=timezone.utc)


def build_query(filters: FeedbackFilters) -> dict:
    """Traduz os filtros da API para uma query do MongoDB."""
    query: dict = {}

    if filters.from_phone:
        query["from_phone"] = filters.from_phone
    if filters.category:
        query["category"] = filters.category
    if filters.processed is not None:
        query["processed"] = filters.processed
    if filters.processed_by:
        query["processed_by"] = filters.processed_by
    if filters.name:
        query["name"] = _contains(filters.name)
    if filters.membership_number:
        query["membership_number"] = _contains(filters.membership_number)
    if filters.suggestion:
        query["suggestion"] = _contains(filters.suggestion)
    if filters.search:
        query["caption"] = _contains(filters.search)
    if filters.has_media is not None:
        query["media_url"] = {"$ne": None} if filters.has_media else None

    created_at = {}
    if filters.date_from:
        created_at["$gte"] = _parse_day(filters.date_from)
    if filters.date_to:
        created_at["$lte"] = _parse_day(filters.date_to, end_of_day=True)
    if created_at:
        query["created_at"] = created_at

    return query


class FeedbackRepository:
    def __init__(self, collection: AsyncIOMotorCollection):
        self._collection = collection

    # ------------------------
    # Conversation side
    # ------------------------
    async def save(self, feedback: Feedback) -> Optional[str]:
        """
        Persiste um feedback completo.
        Nunca lança: campos faltando ou erro do banco são apenas logados.
        """
        missing = feedback.missing_fields
        if missing:
            logger.error("Missing required fields in feedback: %s", missing)
            return None

        payload = feedback.to_dict()
        try:
            result = await self._collection.insert_one(payload)
        except Exception as e:
            logger.error("Feedback insert error: %s | payload=%s", e, payload)
            return None

        logger.info("Feedback saved: %s (%s)", result.inserted_id, feedback.from_phone)
        return str(result.inserted_id)

    # ------------------------
    # Query Operations
    # ------------------------
    async def list(self, filters: FeedbackFilters) -> Tuple[List[dict], int]:
        query = build_query(filters)
        sort_field = filters.sort_by if filters.sort_by in SORTABLE_FIELDS else "created_at"
        direction = ASCENDING if filters.sort_order == "asc" else DESCENDING

        total = await self._collection.count_documents(query)
        cursor = self._collection.find(query)\
            .sort(sort_field, direction)\
            .skip(filters.offset)\
            .limit(filters.limit)

        docs = [_serialize_doc(doc) async for doc in cursor]
        return docs, total

    async def get_by_id(self, _id: str) -> Optional[dict]:
        oid = _object_id(_id)
        if not oid:
            return None
        doc = await self._collection.find_one({"_id": oid})
        return _serialize_doc(doc)

    async def count(self, query: dict = None) -> int:
        return await self._collection.count_documents(query or {})

    async def distinct(self, field: str) -> List[str]:
        values = await self._collection.distinct(field)
        return [v for v in values if v is not None]

    async def stats(self) -> FeedbackStats:
        total = await self.count()
        processed = await self.count({"processed": True})
        with_media = await self.count({"media_url": {"$ne": None}})

        pipeline = [
            {"$match": {"category": {"$ne": None}}},
            {"$group": {"_id": "$category", "count": {"$sum": 1}}},
        ]
        categories = {}
        async for row in self._collection.aggregate(pipeline):
            categories[row["_id"]] = row["count"]

        return FeedbackStats(
            total=total,
            processed=processed,
            unprocessed=total - processed,
            with_media=with_media,
            without_media=total - with_media,
            categories=categories
        )

    async def list_between(self, start: datetime, end: datetime) -> List[dict]:
        """Feedbacks com created_at em [start, end), mais recentes primeiro."""
        cursor = self._collection.find(
            {"created_at": {"$gte": start, "$lt": end}},
            {"name": 1, "membership_number": 1, "category": 1, "suggestion": 1, "created_at": 1}
        ).sort("created_at", DESCENDING)
        return [_serialize_doc(doc) async for doc in cursor]

    async def count_between(self, start: datetime, end: datetime) -> int:
        return await self.count({"created_at": {"$gte": start, "$lt": end}})

    # ------------------------
    # Admin mutations
    # ------------------------
    async def update_processed(self, _id: str, processed: bool, user_id: Optional[str]) -> Optional[dict]:
        oid = _object_id(_id)
        if not oid:
            return None
        result = await self._collection.find_one_and_update(
            {"_id": oid},
            {"$set": {"processed": processed, "processed_by": user_id if processed else None}},
            return_document=ReturnDocument.AFTER
        )
        return _serialize_doc(result)

    async def delete(self, _id: str) -> Optional[dict]:
        oid = _object_id(_id)
        if not oid:
            return None
        result = await self._collection.find_one_and_delete({"_id": oid})
        return _serialize_doc(result)
