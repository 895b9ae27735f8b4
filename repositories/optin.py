import logging
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorCollection

from domain.session.chat_session import OptinStatus

logger = logging.getLogger(__name__)


class OptinRepository:
    """
    Consentimento por telefone.
    Documento presente na coleção = "yes"; ausente = "no".
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self._collection = collection

    async def get_status(self, phone: str) -> OptinStatus:
        try:
            doc = await self._collection.find_one({"phone_number": phone})
        except Exception as e:
            logger.error("Erro ao consultar opt-in de %s: %s", phone, e)
            return OptinStatus.NO
        return OptinStatus.YES if doc else OptinStatus.NO

    async def set_status(self, phone: str, status: OptinStatus) -> None:
        status = OptinStatus(status)
        if status == OptinStatus.YES:
            await self._collection.update_one(
                {"phone_number": phone},
                {"$setOnInsert": {"phone_number": phone, "created_at": datetime.now(timezone.utc)}},
                upsert=True
            )
            logger.info("User opted in: %s", phone)
        else:
            await self._collection.delete_one({"phone_number": phone})
            logger.info("User opted out: %s", phone)
