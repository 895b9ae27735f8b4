import asyncio
import logging
from typing import List, Set

from client.whatsapp.V24 import WhatsAppClient

logger = logging.getLogger(__name__)


class NotificationService:
    """Avisa os operadores do clube a cada feedback registrado, em segundo plano."""

    def __init__(self, wa_client: WhatsAppClient, recipients: List[str]):
        self._wa_client = wa_client
        self._recipients = list(recipients)
        self._tasks: Set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return bool(self._recipients)

    @staticmethod
    def build_text(phone: str, name: str, membership_number: str) -> str:
        return (
            "New feedback received:\n"
            f"From: {phone}\n"
            f"Name: {name}\n"
            f"Membership No: {membership_number}"
        )

    async def notify_new_feedback(self, phone: str, name: str, membership_number: str) -> None:
        text = self.build_text(phone, name, membership_number)
        for to in self._recipients:
            try:
                await self._wa_client.send_text(to, text)
            except Exception:
                logger.exception("Failed to notify operator %s about feedback from %s", to, phone)

    def schedule(self, phone: str, name: str, membership_number: str) -> None:
        """Dispara a notificação sem bloquear a resposta ao usuário."""
        if not self.enabled:
            return
        task = asyncio.create_task(self.notify_new_feedback(phone, name, membership_number))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Aguarda as notificações pendentes (shutdown e testes)."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
