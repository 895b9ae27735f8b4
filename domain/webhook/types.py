from enum import Enum


class MessageType(Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"
    STICKER = "sticker"
    LOCATION = "location"
    CONTACTS = "contacts"
    INTERACTIVE = "interactive"
    BUTTON = "button"
    REACTION = "reaction"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str) -> "MessageType":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_supported(self) -> bool:
        """Tipos que o fluxo de feedback sabe tratar."""
        return self in (MessageType.TEXT, MessageType.IMAGE, MessageType.BUTTON)
