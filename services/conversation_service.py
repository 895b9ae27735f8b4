import logging
from typing import Optional

from client.whatsapp.V24 import WhatsAppClient
from domain.config.chat_config import ChatConfig
from domain.feedback.feedback import Feedback
from domain.session.chat_session import ConversationState, FeedbackSession, OptinStatus
from domain.webhook.message import InboundMessage
from domain.webhook.types import MessageType
from domain.webhook.value_objects import MediaInfo
from infrastructure.storage.r2 import R2Service
from repositories.feedback import FeedbackRepository
from repositories.optin import OptinRepository
from services.notification_service import NotificationService
from services.session_service import SessionService

logger = logging.getLogger(__name__)


class ConversationService:
    """
    Conduz a conversa de coleta de feedback, um evento por chamada.

    Ordem de avaliação: eco próprio, expiração/debounce, "stop", opt-in,
    tipo não suportado e por fim o estado da coleta.
    """

    def __init__(self,
                 wa_client: WhatsAppClient,
                 sessions: SessionService,
                 optin_repo: OptinRepository,
                 feedback_repo: FeedbackRepository,
                 storage: R2Service,
                 notifier: Optional[NotificationService] = None,
                 config: Optional[ChatConfig] = None):
        self.wa_client = wa_client
        self.sessions = sessions
        self._optin_repo = optin_repo
        self._feedback_repo = feedback_repo
        self._storage = storage
        self._notifier = notifier
        self._config = config or ChatConfig()

    async def process_incoming_message(self, message: InboundMessage) -> None:
        phone = message.from_number

        if not phone or message.is_self_echo:
            return

        session = await self.sessions.begin(phone)
        if session is None:
            return

        if message.type == MessageType.TEXT and self._is_stop(message.text):
            await self._opt_out(session, self._config.stop_message)
            return

        # sem consentimento nada além do opt-in é enviado
        if not await self._check_optin(session, message):
            return

        if not message.type.is_supported:
            await self.wa_client.send_text(phone, self._config.unsupported_message)
            return

        match message.type:
            case MessageType.TEXT:
                await self._handle_text(session, (message.text or "").strip())
            case MessageType.IMAGE:
                await self._handle_image(session, message.media)
            case MessageType.BUTTON:
                await self._handle_button(session, message.button_payload)

    # ------------------------
    # Opt-in
    # ------------------------
    def _is_stop(self, text: Optional[str]) -> bool:
        return (text or "").strip().lower() == self._config.stop_keyword

    async def _opt_out(self, session: FeedbackSession, confirmation: str) -> None:
        phone = session.phone_number
        await self._optin_repo.set_status(phone, OptinStatus.NO)
        await self.sessions.clear(phone)
        await self.wa_client.send_text(phone, confirmation)

    async def _send_optin_prompt(self, session: FeedbackSession) -> None:
        session.state = ConversationState.AWAITING_OPTIN
        await self.sessions.save(session)
        await self.wa_client.send_template(session.phone_number, self._config.optin_template)

    async def _check_optin(self, session: FeedbackSession, message: InboundMessage) -> bool:
        """True quando o fluxo pode continuar com este mesmo evento."""
        if not session.optin_checked:
            session.optin_status = await self._optin_repo.get_status(session.phone_number)
            session.optin_checked = True
            if session.optin_status == OptinStatus.YES:
                await self.sessions.save(session)
                return True
            await self._send_optin_prompt(session)
            return False

        if session.optin_status == OptinStatus.YES:
            return True

        payload = message.button_payload if message.type == MessageType.BUTTON else None
        if payload == self._config.yes_payload:
            await self._optin_repo.set_status(session.phone_number, OptinStatus.YES)
            session.optin_status = OptinStatus.YES
            await self._start_collection(session)
        elif payload == self._config.no_payload:
            await self._opt_out(session, self._config.optout_message)
        else:
            await self._send_optin_prompt(session)
        return False

    # ------------------------
    # Collection flow
    # ------------------------
    async def _start_collection(self, session: FeedbackSession) -> None:
        phone = session.phone_number
        session.state = ConversationState.GET_NAME
        await self.sessions.save(session)
        await self.wa_client.send_text(phone, self._config.greeting)
        await self.wa_client.send_text(phone, self._config.name_prompt)

    async def _handle_text(self, session: FeedbackSession, text: str) -> None:
        phone = session.phone_number

        if not session.name and session.state != ConversationState.GET_NAME:
            await self._start_collection(session)
            return

        if not session.name and session.state == ConversationState.GET_NAME:
            session.name = text
            session.state = ConversationState.GET_MEMBERSHIP_NO
            await self.sessions.save(session)
            await self.wa_client.send_text(phone, self._config.membership_prompt)
            return

        if not session.membership_number and session.state == ConversationState.GET_MEMBERSHIP_NO:
            session.membership_number = text
            session.state = ConversationState.SELECT
            await self.sessions.save(session)
            await self.wa_client.send_template(phone, self._config.select_template)
            return

        if not session.category:
            logger.debug("Ignoring text from %s before a category was chosen", phone)
            return

        if not session.suggestion and session.state == ConversationState.DESCRIBE_ISSUE:
            session.suggestion = text
            session.state = ConversationState.IMAGE_UPLOAD
            await self.sessions.save(session)
            await self.wa_client.send_template(phone, self._config.image_upload_template)
            return

        if session.awaiting_image_upload:
            await self.wa_client.send_text(phone, self._config.upload_image_reminder)

    async def _handle_button(self, session: FeedbackSession, payload: Optional[str]) -> None:
        phone = session.phone_number

        if payload in self._config.categories:
            if session.state not in (ConversationState.SELECT, ConversationState.DESCRIBE_ISSUE):
                logger.debug("Ignoring category %r from %s in state %s", payload, phone, session.state)
                return
            session.category = payload
            session.state = ConversationState.DESCRIBE_ISSUE
            await self.sessions.save(session)
            await self.wa_client.send_text(
                phone, self._config.describe_issue_prompt.format(category=payload.lower())
            )
            return

        if payload == self._config.yes_payload and session.state == ConversationState.IMAGE_UPLOAD:
            session.state = ConversationState.AWAITING_IMAGE
            await self.sessions.save(session)
            await self.wa_client.send_text(phone, self._config.upload_image_prompt)
            return

        if payload == self._config.no_payload and session.last_template == ConversationState.IMAGE_UPLOAD.value:
            await self._finalize(session, with_image=False)
            return

        logger.debug("Ignoring button %r from %s in state %s", payload, phone, session.state)

    # ------------------------
    # Media
    # ------------------------
    async def _handle_image(self, session: FeedbackSession, media: Optional[MediaInfo]) -> None:
        phone = session.phone_number
        try:
            if not media or not media.id:
                raise ValueError("Image message without media id")
            media_url = await self.wa_client.get_media_url(media.id)
            data = await self.wa_client.download_media(media_url)
            file_name = f"feedback_{phone}_{self.sessions.now_ms()}.jpg"
            public_url = await self._storage.upload_image(file_name, data)
        except Exception as e:
            logger.error("Failed to handle image upload from %s: %s", phone, e)
            await self.wa_client.send_text(phone, self._config.image_failed_message)
            return

        session.image_url = public_url
        session.caption = media.caption
        await self.sessions.save(session)

        if session.has_all_required_data:
            await self._finalize(session, with_image=True)
        else:
            await self.wa_client.send_text(phone, self._config.image_received_message)

    # ------------------------
    # Finalization
    # ------------------------
    async def _finalize(self, session: FeedbackSession, with_image: bool) -> None:
        phone = session.phone_number

        if not session.has_all_required_data:
            await self.wa_client.send_text(phone, self._config.restart_message)
            await self.sessions.clear(phone)
            fresh = FeedbackSession(
                phone_number=phone,
                optin_checked=True,
                optin_status=OptinStatus.YES
            )
            fresh.touch(self.sessions.now_ms())
            await self._start_collection(fresh)
            return

        feedback = Feedback(
            from_phone=phone,
            name=session.name,
            membership_number=session.membership_number,
            category=session.category,
            suggestion=session.suggestion,
            media_url=session.image_url if with_image else None,
            caption=session.caption if with_image else None,
        )
        await self._feedback_repo.save(feedback)
        await self.wa_client.send_text(phone, self._config.thank_you_message)
        if self._notifier:
            self._notifier.schedule(phone, session.name, session.membership_number)
        await self.sessions.clear(phone)
