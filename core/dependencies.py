from functools import lru_cache

from motor.motor_asyncio import AsyncIOMotorCollection

from core.settings import settings
from core.db import mongo_manager
from core.environment import get_environment
from client.whatsapp.V24 import WhatsAppClient
from domain.config.chat_config import ChatConfig
from infrastructure.storage.r2 import R2Service
from repositories.feedback import FeedbackRepository
from repositories.optin import OptinRepository
from repositories.session import MemorySessionStore, RedisSessionStore, SessionStore
from repositories.user import UserRepository
from services.auth_service import AuthService
from services.conversation_service import ConversationService
from services.feedback_service import FeedbackService
from services.notification_service import NotificationService
from services.report_service import ReportService
from services.session_service import SessionService
from utils.cache import Cache
from utils.mailer import Mailer
from utils.retry import RetryPolicy, linear_backoff
from utils.security import Security

env = get_environment()


def get_settings():
    return settings


def get_db_collection(collection_name: str) -> AsyncIOMotorCollection:
    """Retorna uma coleção do MongoDB."""
    db = mongo_manager.get_db(db_name=env.DATABASE_NAME)
    return db[collection_name]


# ------------------------
# Singletons do processo
# ------------------------
@lru_cache(maxsize=1)
def get_cache() -> Cache:
    """Retorna a instância compartilhada do cache."""
    return Cache(env.REDIS_URL)


@lru_cache(maxsize=1)
def get_security() -> Security:
    return Security(env)


@lru_cache(maxsize=1)
def get_whatsapp_client() -> WhatsAppClient:
    return WhatsAppClient(
        phone_id=env.WHATSAPP_PHONE_ID,
        wa_token=env.WHATSAPP_TOKEN,
        base_url=env.WHATSAPP_API_URL,
        verify_token=env.VERIFY_TOKEN,
        language_code=env.WHATSAPP_TEMPLATE_LANGUAGE,
        request_timeout=settings.REQUEST_TIMEOUT,
        media_url_timeout=settings.MEDIA_URL_TIMEOUT,
        download_timeout=settings.MEDIA_DOWNLOAD_TIMEOUT,
        download_policy=RetryPolicy(
            max_attempts=settings.DOWNLOAD_MAX_ATTEMPTS,
            backoff=linear_backoff(settings.DOWNLOAD_BACKOFF_MS)
        )
    )


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    """Sessões em memória por padrão; Redis quando SESSION_BACKEND=redis."""
    if env.SESSION_BACKEND == "redis":
        return RedisSessionStore(get_cache(), ttl_seconds=settings.SESSION_IDLE_TIMEOUT_MS // 1000)
    return MemorySessionStore()


@lru_cache(maxsize=1)
def get_session_service() -> SessionService:
    return SessionService(
        get_session_store(),
        idle_timeout_ms=settings.SESSION_IDLE_TIMEOUT_MS,
        debounce_ms=settings.DEBOUNCE_MS
    )


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    return NotificationService(get_whatsapp_client(), env.notify_numbers)


@lru_cache(maxsize=1)
def get_storage() -> R2Service:
    return R2Service(
        account_id=env.R2_ACCOUNT_ID,
        access_key=env.R2_ACCESS_KEY,
        secret_key=env.R2_SECRET_KEY,
        bucket_name=env.R2_BUCKET,
        public_url=env.R2_PUBLIC_URL
    )


@lru_cache(maxsize=1)
def get_chat_config() -> ChatConfig:
    return ChatConfig(
        club_name=env.CLUB_NAME,
        categories=env.feedback_categories,
        optin_template=settings.OPTIN_TEMPLATE,
        select_template=settings.SELECT_TEMPLATE,
        image_upload_template=settings.IMAGE_UPLOAD_TEMPLATE
    )


@lru_cache(maxsize=1)
def get_mailer() -> Mailer:
    return Mailer(
        host=env.SMTP_HOST,
        port=env.SMTP_PORT,
        user=env.SMTP_USER,
        password=env.SMTP_PASSWORD,
        sender_name=f"{env.CLUB_NAME} Feedback System"
    )


# ------------------------
# Repositórios e serviços
# ------------------------
async def get_optin_repository() -> OptinRepository:
    return OptinRepository(get_db_collection("optin"))


async def get_feedback_repository() -> FeedbackRepository:
    return FeedbackRepository(get_db_collection("feedback"))


async def get_user_repository() -> UserRepository:
    return UserRepository(get_db_collection("users"))


async def get_conversation_service() -> ConversationService:
    return ConversationService(
        wa_client=get_whatsapp_client(),
        sessions=get_session_service(),
        optin_repo=await get_optin_repository(),
        feedback_repo=await get_feedback_repository(),
        storage=get_storage(),
        notifier=get_notification_service(),
        config=get_chat_config()
    )


async def get_feedback_service() -> FeedbackService:
    return FeedbackService(await get_feedback_repository())


async def get_auth_service() -> AuthService:
    return AuthService(await get_user_repository(), get_security())


async def get_report_service() -> ReportService:
    return ReportService(
        feedback_repo=await get_feedback_repository(),
        mailer=get_mailer(),
        recipients=env.report_recipients,
        timezone_name=env.REPORT_TIMEZONE,
        club_name=env.CLUB_NAME,
        schedule_label=f"{env.REPORT_HOUR:02d}:{env.REPORT_MINUTE:02d}"
    )
