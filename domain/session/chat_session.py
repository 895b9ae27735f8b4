from pydantic import BaseModel
from typing import Optional
from enum import Enum


class OptinStatus(str, Enum):
    YES = "yes"
    NO = "no"


class ConversationState(str, Enum):
    """
    Estado atual da coleta de feedback.

    Os estados de coleta usam como valor o nome do último prompt enviado
    (get_name, select, image_upload...).
    """
    NEW = "new"
    AWAITING_OPTIN = "optin"
    GET_NAME = "get_name"
    GET_MEMBERSHIP_NO = "get_membership_no"
    SELECT = "select"
    DESCRIBE_ISSUE = "describe_issue"
    IMAGE_UPLOAD = "image_upload"
    AWAITING_IMAGE = "awaiting_image"

    @property
    def template(self) -> Optional[str]:
        """Tag do último prompt enviado; AWAITING_IMAGE continua sendo image_upload."""
        if self in (ConversationState.NEW, ConversationState.AWAITING_OPTIN):
            return None
        if self == ConversationState.AWAITING_IMAGE:
            return ConversationState.IMAGE_UPLOAD.value
        return self.value


class FeedbackSession(BaseModel):
    phone_number: str
    state: ConversationState = ConversationState.NEW

    name: Optional[str] = None
    membership_number: Optional[str] = None
    category: Optional[str] = None
    suggestion: Optional[str] = None

    image_url: Optional[str] = None
    caption: Optional[str] = None

    optin_checked: bool = False
    optin_status: Optional[OptinStatus] = None

    # epoch em milissegundos
    updated_at: Optional[int] = None
    last_message_at: Optional[int] = None

    @property
    def last_template(self) -> Optional[str]:
        return self.state.template

    @property
    def awaiting_image_upload(self) -> bool:
        return self.state == ConversationState.AWAITING_IMAGE

    @property
    def has_all_required_data(self) -> bool:
        return all([self.name, self.membership_number, self.category, self.suggestion])

    def is_expired(self, now_ms: int, idle_timeout_ms: int) -> bool:
        return self.updated_at is not None and now_ms - self.updated_at > idle_timeout_ms

    def is_debounced(self, now_ms: int, debounce_ms: int) -> bool:
        return self.last_message_at is not None and now_ms - self.last_message_at < debounce_ms

    def touch(self, now_ms: int) -> None:
        self.last_message_at = now_ms
        self.updated_at = now_ms

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> "FeedbackSession":
        return cls(**data)
