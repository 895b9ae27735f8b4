"""
Domain Model das mensagens recebidas pelo webhook da WhatsApp Cloud API
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone

from domain.webhook.types import MessageType
from domain.webhook.value_objects import MediaInfo, ButtonReply


@dataclass
class InboundMessage:
    """
    Evento normalizado entregue ao ConversationService.

    `type` já vem reduzido ao que o fluxo entende: respostas de botão
    interativo são tratadas como BUTTON.
    """
    message_id: str
    from_number: str
    timestamp: int
    type: MessageType

    text: Optional[str] = None
    button: Optional[ButtonReply] = None
    media: Optional[MediaInfo] = None

    profile_name: Optional[str] = None
    display_phone_number: Optional[str] = None
    phone_number_id: Optional[str] = None
    from_me: bool = False

    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    raw_data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Mantém apenas os dígitos do telefone"""
        if self.from_number:
            self.from_number = "".join(filter(str.isdigit, str(self.from_number)))

    @property
    def button_payload(self) -> Optional[str]:
        return self.button.payload if self.button else None

    @property
    def is_self_echo(self) -> bool:
        if self.from_me:
            return True
        own_number = "".join(filter(str.isdigit, self.display_phone_number or ""))
        return bool(own_number) and own_number == self.from_number

    @classmethod
    def from_webhook(cls, msg: Dict[str, Any], metadata: Dict[str, Any] = None,
                     profile_name: Optional[str] = None) -> 'InboundMessage':
        """
        Cria InboundMessage a partir de um item de `value.messages`

        Example:
            message = InboundMessage.from_webhook({
                "id": "wamid.XXX",
                "from": "919999999999",
                "timestamp": "1234567890",
                "type": "text",
                "text": {"body": "hello"}
            })
        """
        metadata = metadata or {}
        msg_type = MessageType.parse(msg.get("type", ""))

        text = None
        button = None
        media = None

        if msg_type == MessageType.TEXT:
            text = msg.get("text", {}).get("body", "")
        elif msg_type == MessageType.BUTTON:
            button = ButtonReply.from_template(msg.get("button", {}))
        elif msg_type == MessageType.INTERACTIVE:
            button = ButtonReply.from_interactive(msg.get("interactive", {}))
            if button:
                msg_type = MessageType.BUTTON
        elif msg_type == MessageType.IMAGE:
            media = MediaInfo.from_webhook(msg.get("image", {}))

        try:
            timestamp = int(msg.get("timestamp") or 0)
        except (TypeError, ValueError):
            timestamp = 0

        return cls(
            message_id=msg.get("id", ""),
            from_number=msg.get("from", ""),
            timestamp=timestamp,
            type=msg_type,
            text=text,
            button=button,
            media=media,
            profile_name=profile_name,
            display_phone_number=metadata.get("display_phone_number"),
            phone_number_id=metadata.get("phone_number_id"),
            from_me=bool(msg.get("from_me", False)),
            raw_data=msg
        )

    @classmethod
    def parse_webhook(cls, webhook_data: Dict[str, Any]) -> List['InboundMessage']:
        """Analisa o envelope completo e retorna apenas as mensagens (status são ignorados)"""
        results = []

        for entry in webhook_data.get("entry", []) or []:
            for change in entry.get("changes", []) or []:
                value = change.get("value", {}) or {}
                if not value.get("messages"):
                    continue

                metadata = value.get("metadata", {}) or {}
                contacts = value.get("contacts", []) or []
                contact_names = {c.get("wa_id"): c.get("profile", {}).get("name") for c in contacts}

                for msg in value["messages"]:
                    results.append(cls.from_webhook(
                        msg,
                        metadata=metadata,
                        profile_name=contact_names.get(msg.get("from"))
                    ))
        return results
