from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status
from pydantic import BaseModel, StrictBool

from core.dependencies import get_feedback_service
from domain.feedback.feedback import FeedbackFilters
from services.feedback_service import FeedbackService
from utils.auth import get_current_user, require_admin


DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


# --- Schemas ---
class ProcessedUpdate(BaseModel):
    processed: StrictBool


class FeedbackRoutes():
    def __init__(self):
        self.router = APIRouter(prefix="/api/feedback", tags=["Feedback"])
        self._register_routes()

    def _register_routes(self):
        # rotas fixas antes de /{feedback_id}
        self.router.add_api_route("", self.list_feedback, methods=["GET"], status_code=status.HTTP_200_OK)
        self.router.add_api_route("/stats", self.get_stats, methods=["GET"], status_code=status.HTTP_200_OK)
        self.router.add_api_route("/categories", self.list_categories, methods=["GET"], status_code=status.HTTP_200_OK)
        self.router.add_api_route("/phones", self.list_phones, methods=["GET"], status_code=status.HTTP_200_OK)
        self.router.add_api_route("/{feedback_id}", self.get_feedback, methods=["GET"], status_code=status.HTTP_200_OK)
        self.router.add_api_route("/{feedback_id}/processed", self.mark_processed, methods=["PUT"], status_code=status.HTTP_200_OK)
        self.router.add_api_route("/{feedback_id}", self.delete_feedback, methods=["DELETE"], status_code=status.HTTP_200_OK)

    async def list_feedback(
        self,
        from_phone: Optional[str] = Query(None),
        category: Optional[str] = Query(None),
        processed: Optional[bool] = Query(None),
        has_media: Optional[bool] = Query(None),
        date_from: Optional[str] = Query(None, pattern=DATE_PATTERN, description="YYYY-MM-DD"),
        date_to: Optional[str] = Query(None, pattern=DATE_PATTERN, description="YYYY-MM-DD"),
        search: Optional[str] = Query(None, description="Busca na legenda da imagem"),
        name: Optional[str] = Query(None),
        membership_number: Optional[str] = Query(None),
        suggestion: Optional[str] = Query(None),
        processed_by: Optional[str] = Query(None),
        limit: int = Query(50, ge=1, le=500),
        offset: int = Query(0, ge=0),
        sort_by: str = Query("created_at"),
        sort_order: str = Query("desc", pattern="^(asc|desc)$"),
        user: dict = Depends(get_current_user),
        service: FeedbackService = Depends(get_feedback_service),
    ):
        """
        Lista feedbacks com filtros e paginação.
        """
        filters = FeedbackFilters(
            from_phone=from_phone,
            category=category,
            processed=processed,
            has_media=has_media,
            date_from=date_from,
            date_to=date_to,
            search=search,
            name=name,
            membership_number=membership_number,
            suggestion=suggestion,
            processed_by=processed_by,
            limit=limit,
            offset=offset,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return await service.list_feedback(filters)

    async def get_stats(self,
        user: dict = Depends(get_current_user),
        service: FeedbackService = Depends(get_feedback_service),
    ):
        return await service.get_stats()

    async def list_categories(self,
        user: dict = Depends(get_current_user),
        service: FeedbackService = Depends(get_feedback_service),
    ):
        return await service.list_categories()

    async def list_phones(self,
        user: dict = Depends(get_current_user),
        service: FeedbackService = Depends(get_feedback_service),
    ):
        return await service.list_phones()

    async def get_feedback(self,
        feedback_id: str,
        user: dict = Depends(get_current_user),
        service: FeedbackService = Depends(get_feedback_service),
    ):
        return await service.get_feedback(feedback_id)

    async def mark_processed(self,
        feedback_id: str,
        body: ProcessedUpdate = Body(...),
        user: dict = Depends(get_current_user),
        service: FeedbackService = Depends(get_feedback_service),
    ):
        """
        Marca (ou desmarca) o feedback como tratado pelo usuário logado.
        """
        return await service.mark_processed(feedback_id, body.processed, user)

    async def delete_feedback(self,
        feedback_id: str,
        user: dict = Depends(require_admin),
        service: FeedbackService = Depends(get_feedback_service),
    ):
        """
        Remove um feedback. Apenas administradores.
        """
        return await service.delete_feedback(feedback_id, user)


_routes = FeedbackRoutes()
router = _routes.router
