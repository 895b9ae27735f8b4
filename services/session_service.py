import time
import logging
from typing import Callable, Optional

from domain.session.chat_session import FeedbackSession
from repositories.session import SessionStore

logger = logging.getLogger(__name__)


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class SessionService:
    """
    Regras de vida da sessão aplicadas antes de qualquer transição:
    expiração por inatividade, debounce de mensagens repetidas e carimbo de tempo.
    """

    def __init__(self,
                 store: SessionStore,
                 idle_timeout_ms: int = 600_000,
                 debounce_ms: int = 1_000,
                 clock: Callable[[], int] = _epoch_ms):
        self._store = store
        self._idle_timeout_ms = idle_timeout_ms
        self._debounce_ms = debounce_ms
        self._clock = clock

    def now_ms(self) -> int:
        return self._clock()

    async def begin(self, phone: str) -> Optional[FeedbackSession]:
        """
        Carrega (ou cria) a sessão para um evento recebido.
        Retorna None quando o evento deve ser descartado pelo debounce.
        """
        now = self.now_ms()
        session = await self._store.get(phone)

        if session and session.is_expired(now, self._idle_timeout_ms):
            logger.info("Session for %s expired, starting over", phone)
            await self._store.clear(phone)
            session = None

        if session is None:
            session = FeedbackSession(phone_number=phone)
        elif session.is_debounced(now, self._debounce_ms):
            logger.debug("Debounced message from %s", phone)
            return None

        session.touch(now)
        await self._store.set(session)
        return session

    async def save(self, session: FeedbackSession) -> None:
        await self._store.set(session)

    async def get(self, phone: str) -> Optional[FeedbackSession]:
        return await self._store.get(phone)

    async def clear(self, phone: str) -> None:
        await self._store.clear(phone)
