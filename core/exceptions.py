class FeedbackBotError(Exception):
    """Base exception for the feedback bot."""


class MediaError(FeedbackBotError):
    """Falha ao obter uma mídia da Cloud API."""


class MediaNotFoundError(MediaError):
    """The media id is unknown or has expired."""


class MediaAuthError(MediaError):
    """Access token is invalid or expired."""


class MediaTimeoutError(MediaError):
    """Cloud API did not answer within the timeout."""


class MediaDownloadError(MediaError):
    """Download failed after every retry attempt."""


class StorageError(FeedbackBotError):
    """Upload to blob storage failed."""


class ReportError(FeedbackBotError):
    """Daily report could not be generated or sent."""
