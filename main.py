import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from core.db import mongo_manager
from core.dependencies import get_cache, get_notification_service, get_report_service
from core.environment import get_environment
from core.indexes import ensure_indexes
from core.settings import settings
from routes.auth import router as auth_router
from routes.feedback import router as feedback_router
from routes.reports import router as reports_router
from routes.webhook import router as webhook_router
from services.scheduler import DailyScheduler

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

env = get_environment()


async def run_daily_report() -> None:
    service = await get_report_service()
    await service.run_scheduled()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await mongo_manager.connect()
    await ensure_indexes(mongo_manager.get_db(env.DATABASE_NAME))

    if env.SESSION_BACKEND == "redis" and not await get_cache().ensure():
        logger.warning("Redis unavailable, conversation sessions will fail until it is back")

    scheduler = DailyScheduler(
        run_daily_report,
        hour=env.REPORT_HOUR,
        minute=env.REPORT_MINUTE,
        timezone_name=env.REPORT_TIMEZONE
    )
    if env.REPORT_ENABLED:
        scheduler.start()
    else:
        logger.info("Daily report scheduler disabled")

    yield

    await scheduler.stop()
    await get_notification_service().drain()
    if env.SESSION_BACKEND == "redis":
        await get_cache().close()
    await mongo_manager.disconnect()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.include_router(webhook_router)
app.include_router(auth_router)
app.include_router(feedback_router)
app.include_router(reports_router)


@app.get("/health")
async def health():
    return {"health": "fine"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=env.HOST, port=env.PORT)
