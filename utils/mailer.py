import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import List

logger = logging.getLogger(__name__)


class Mailer:
    """Envio de e-mails HTML via SMTP (Gmail com senha de app por padrão)."""

    def __init__(self, host: str, port: int, user: str, password: str,
                 sender_name: str = "Feedback System", timeout: float = 30):
        self._host = host
        self._port = port
        self._user = user
        self._password = password
        self._sender_name = sender_name
        self._timeout = timeout

    def build_message(self, to: List[str], subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((self._sender_name, self._user))
        msg["To"] = ", ".join(to)
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML capable e-mail client.")
        msg.add_alternative(html, subtype="html")
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        if self._port == 465:
            with smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout) as smtp:
                smtp.login(self._user, self._password)
                smtp.send_message(msg)
        else:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                smtp.starttls()
                smtp.login(self._user, self._password)
                smtp.send_message(msg)

    async def send(self, to: List[str], subject: str, html: str) -> str:
        """Envia e devolve o Message-ID gerado."""
        msg = self.build_message(to, subject, html)
        msg["Message-ID"] = make_msgid()
        await asyncio.to_thread(self._deliver, msg)
        logger.info("E-mail '%s' sent to %s", subject, to)
        return msg["Message-ID"]
