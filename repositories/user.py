from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection


def _serialize_doc(doc: dict) -> dict:
    if doc is None:
        return None
    if "_id" in doc and isinstance(doc["_id"], ObjectId):
        doc["_id"] = str(doc["_id"])
    return doc


class UserRepository():
    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self._collection = collection

    async def save(self, data: dict) -> str:
        result = await self._collection.insert_one(data)
        return str(result.inserted_id)

    async def find_by_email(self, email: str) -> Optional[dict]:
        result = await self._collection.find_one({"email": email})
        return _serialize_doc(result)

    async def touch_last_login(self, _id: str) -> datetime:
        now = datetime.now(timezone.utc)
        await self._collection.update_one({"_id": ObjectId(_id)}, {"$set": {"last_login": now}})
        return now
