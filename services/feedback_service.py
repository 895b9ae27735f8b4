import logging
from typing import List

from fastapi import HTTPException

from domain.feedback.feedback import FeedbackFilters
from repositories.feedback import FeedbackRepository

logger = logging.getLogger(__name__)


class FeedbackService():
    """Consultas e ações do painel sobre os feedbacks gravados."""

    def __init__(self, repository: FeedbackRepository) -> None:
        self._repository = repository

    async def list_feedback(self, filters: FeedbackFilters) -> dict:
        try:
            docs, total = await self._repository.list(filters)
        except ValueError as e:
            # datas fora do formato YYYY-MM-DD
            raise HTTPException(status_code=400, detail=f"Invalid filter: {e}")
        except Exception as e:
            logger.exception("Error listing feedback")
            raise HTTPException(status_code=500, detail=f"Error listing feedback: {str(e)}")

        return {
            "success": True,
            "data": docs,
            "count": len(docs),
            "pagination": {
                "limit": filters.limit,
                "offset": filters.offset,
                "total": total,
                "has_more": filters.offset + len(docs) < total,
            },
        }

    async def get_stats(self) -> dict:
        stats = await self._repository.stats()
        return {"success": True, "data": stats.model_dump()}

    async def list_categories(self) -> dict:
        categories: List[str] = await self._repository.distinct("category")
        return {"success": True, "data": sorted(categories)}

    async def list_phones(self) -> dict:
        phones: List[str] = await self._repository.distinct("from_phone")
        return {"success": True, "data": sorted(phones)}

    async def get_feedback(self, _id: str) -> dict:
        doc = await self._repository.get_by_id(_id)
        if not doc:
            raise HTTPException(status_code=404, detail="Feedback not found")
        return {"success": True, "data": doc}

    async def mark_processed(self, _id: str, processed: bool, user: dict) -> dict:
        doc = await self._repository.update_processed(_id, processed, user.get("id"))
        if not doc:
            raise HTTPException(status_code=404, detail="Feedback not found")

        logger.info("Feedback %s marked processed=%s by %s", _id, processed, user.get("email"))
        return {
            "success": True,
            "message": f"Feedback marked as {'processed' if processed else 'unprocessed'}",
            "data": doc,
        }

    async def delete_feedback(self, _id: str, user: dict) -> dict:
        doc = await self._repository.delete(_id)
        if not doc:
            raise HTTPException(status_code=404, detail="Feedback not found")

        logger.info("Feedback %s deleted by %s", _id, user.get("email"))
        return {"success": True, "message": "Feedback deleted successfully"}
