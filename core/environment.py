from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class EnvironmentSettings(BaseSettings):
    # MongoDB
    DATABASE_URI: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "club_feedback"
    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    SESSION_BACKEND: str = "memory"  # "memory" ou "redis"

    # WhatsApp Cloud API
    WHATSAPP_API_URL: str = "https://graph.facebook.com/v22.0"
    WHATSAPP_TOKEN: str = ""
    WHATSAPP_PHONE_ID: str = ""
    WHATSAPP_TEMPLATE_LANGUAGE: str = "en"

    # Webhook
    VERIFY_TOKEN: str = ""

    # Auth
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 900

    # Cloudflare R2 (imagens dos feedbacks)
    R2_ACCOUNT_ID: str = ""
    R2_ACCESS_KEY: str = ""
    R2_SECRET_KEY: str = ""
    R2_BUCKET: str = "feedback-images"
    R2_PUBLIC_URL: str = ""

    # Email (relatório diário)
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    REPORT_RECIPIENTS: str = ""
    REPORT_TIMEZONE: str = "Asia/Kolkata"
    REPORT_HOUR: int = 23
    REPORT_MINUTE: int = 0
    REPORT_ENABLED: bool = True

    # Operadores notificados a cada feedback recebido
    NOTIFY_NUMBERS: str = ""

    CLUB_NAME: str = "Benares Club"
    FEEDBACK_CATEGORIES: str = "Upkeep & Maintenance,Others"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "allow",
    }

    @staticmethod
    def _split(raw: str) -> List[str]:
        return [item.strip() for item in raw.split(",") if item.strip()]

    @property
    def report_recipients(self) -> List[str]:
        return self._split(self.REPORT_RECIPIENTS)

    @property
    def notify_numbers(self) -> List[str]:
        return self._split(self.NOTIFY_NUMBERS)

    @property
    def feedback_categories(self) -> List[str]:
        return self._split(self.FEEDBACK_CATEGORIES)


@lru_cache(maxsize=1)
def get_environment() -> EnvironmentSettings:
    return EnvironmentSettings()
