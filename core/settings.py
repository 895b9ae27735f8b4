from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Club Feedback Bot"
    ENV: str = "development"

    # Conversa
    SESSION_IDLE_TIMEOUT_MS: int = 600_000
    DEBOUNCE_MS: int = 1_000

    # Timeouts (segundos) das chamadas externas
    REQUEST_TIMEOUT: int = 30
    MEDIA_URL_TIMEOUT: int = 5
    MEDIA_DOWNLOAD_TIMEOUT: int = 30

    # Download de mídia: tentativas e backoff linear (attempt * DOWNLOAD_BACKOFF_MS)
    DOWNLOAD_MAX_ATTEMPTS: int = 3
    DOWNLOAD_BACKOFF_MS: int = 1_000

    # Templates aprovados na Meta
    OPTIN_TEMPLATE: str = "optin"
    SELECT_TEMPLATE: str = "select"
    IMAGE_UPLOAD_TEMPLATE: str = "image_upload"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "allow",
    }


settings = Settings()
