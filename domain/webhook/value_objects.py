"""
Value Objects para WhatsApp Domain
"""
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


@dataclass
class MediaInfo:
    """Informações de mídia"""
    id: Optional[str] = None
    caption: Optional[str] = None
    mime_type: Optional[str] = None
    sha256: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Converte para dicionário"""
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_webhook(cls, data: Dict[str, Any]) -> Optional['MediaInfo']:
        """Cria MediaInfo a partir dos dados do webhook"""
        if not data:
            return None

        caption = (data.get("caption") or "").strip() or None
        return cls(
            id=data.get("id"),
            caption=caption,
            mime_type=data.get("mime_type"),
            sha256=data.get("sha256")
        )


@dataclass
class ButtonReply:
    """
    Resposta de botão.

    Template quick replies chegam como type "button" ({"payload", "text"});
    botões interativos chegam como "interactive.button_reply" ({"id", "title"}).
    Os dois viram um payload único.
    """
    payload: str
    title: str = ""

    @classmethod
    def from_template(cls, data: Dict[str, Any]) -> Optional['ButtonReply']:
        if not data:
            return None
        return cls(payload=data.get("payload", ""), title=data.get("text", ""))

    @classmethod
    def from_interactive(cls, data: Dict[str, Any]) -> Optional['ButtonReply']:
        reply = (data or {}).get("button_reply")
        if not reply:
            return None
        return cls(payload=reply.get("id", ""), title=reply.get("title", ""))
