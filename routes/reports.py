import logging

from fastapi import APIRouter, Depends, HTTPException

from core.dependencies import get_report_service
from services.report_service import ReportService
from utils.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Reports"])


@router.post("/trigger-daily-report")
async def trigger_daily_report(
    user: dict = Depends(get_current_user),
    service: ReportService = Depends(get_report_service)
):
    """Envia o relatório do dia imediatamente."""
    logger.info("Daily report triggered manually by %s", user.get("email"))
    try:
        result = await service.send_daily_report()
    except Exception as e:
        logger.exception("Manual daily report failed")
        raise HTTPException(status_code=500, detail=f"Failed to send daily report: {str(e)}")
    return {"message": "Daily report sent", **result}
