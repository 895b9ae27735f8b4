from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    feedback = db.get_collection("feedback")
    optin = db.get_collection("optin")
    users = db.get_collection("users")

    # Relatório diário e listagem ordenam por data
    await feedback.create_index([("created_at", DESCENDING)])
    await feedback.create_index("from_phone")
    await feedback.create_index([("category", ASCENDING), ("processed", ASCENDING)])

    await optin.create_index("phone_number", unique=True)
    await users.create_index("email", unique=True)
