import pytest
from unittest.mock import AsyncMock, MagicMock

from domain.config.chat_config import ChatConfig
from domain.session.chat_session import OptinStatus
from domain.webhook.message import InboundMessage
from domain.webhook.types import MessageType
from domain.webhook.value_objects import ButtonReply, MediaInfo
from repositories.session import MemorySessionStore
from services.conversation_service import ConversationService
from services.session_service import SessionService

USER_PHONE = "919876543210"
BOT_NUMBER = "15550001111"


class FakeClock:
    """Relógio controlado pelos testes (epoch ms)."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeOptinRepository:
    def __init__(self, opted_in=()):
        self.opted_in = set(opted_in)
        self.get_status = AsyncMock(side_effect=self._get_status)
        self.set_status = AsyncMock(side_effect=self._set_status)

    async def _get_status(self, phone):
        return OptinStatus.YES if phone in self.opted_in else OptinStatus.NO

    async def _set_status(self, phone, status):
        if OptinStatus(status) == OptinStatus.YES:
            self.opted_in.add(phone)
        else:
            self.opted_in.discard(phone)


def text_message(body: str, phone: str = USER_PHONE) -> InboundMessage:
    return InboundMessage(
        message_id="wamid.text", from_number=phone, timestamp=0,
        type=MessageType.TEXT, text=body, display_phone_number=BOT_NUMBER
    )


def button_message(payload: str, phone: str = USER_PHONE) -> InboundMessage:
    return InboundMessage(
        message_id="wamid.button", from_number=phone, timestamp=0,
        type=MessageType.BUTTON, button=ButtonReply(payload=payload, title=payload),
        display_phone_number=BOT_NUMBER
    )


def image_message(media_id: str = "media-1", caption: str = None, phone: str = USER_PHONE) -> InboundMessage:
    return InboundMessage(
        message_id="wamid.image", from_number=phone, timestamp=0,
        type=MessageType.IMAGE, media=MediaInfo(id=media_id, caption=caption, mime_type="image/jpeg"),
        display_phone_number=BOT_NUMBER
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wa_client():
    client = MagicMock()
    client.send_text = AsyncMock(return_value=None)
    client.send_template = AsyncMock(return_value=None)
    client.get_media_url = AsyncMock(return_value="https://lookaside.example/media-1")
    client.download_media = AsyncMock(return_value=b"\xff\xd8jpeg-bytes")
    return client


@pytest.fixture
def session_store():
    return MemorySessionStore()


@pytest.fixture
def sessions(session_store, clock):
    return SessionService(session_store, idle_timeout_ms=600_000, debounce_ms=1_000, clock=clock)


@pytest.fixture
def optin_repo():
    return FakeOptinRepository(opted_in={USER_PHONE})


@pytest.fixture
def feedback_repo():
    repo = MagicMock()
    repo.save = AsyncMock(return_value="652f0c0e9b1e8a0012345678")
    return repo


@pytest.fixture
def storage():
    r2 = MagicMock()
    r2.upload_image = AsyncMock(side_effect=lambda name, data: f"https://images.example/{name}")
    return r2


@pytest.fixture
def notifier():
    n = MagicMock()
    n.schedule = MagicMock()
    return n


@pytest.fixture
def conversation(wa_client, sessions, optin_repo, feedback_repo, storage, notifier):
    return ConversationService(
        wa_client=wa_client,
        sessions=sessions,
        optin_repo=optin_repo,
        feedback_repo=feedback_repo,
        storage=storage,
        notifier=notifier,
        config=ChatConfig()
    )


@pytest.fixture
def send(conversation, clock):
    """Entrega uma mensagem ao fluxo, avançando o relógio para fugir do debounce."""
    async def _send(message: InboundMessage):
        clock.advance(2_000)
        await conversation.process_incoming_message(message)
    return _send


def sent_texts(wa_client) -> list:
    return [c.args[1] for c in wa_client.send_text.await_args_list]


def sent_templates(wa_client) -> list:
    return [c.args[1] for c in wa_client.send_template.await_args_list]
