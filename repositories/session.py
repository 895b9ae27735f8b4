from abc import ABC, abstractmethod
from typing import Dict, Optional

from domain.session.chat_session import FeedbackSession
from utils.cache import Cache


class SessionStore(ABC):
    """Armazena a sessão de conversa de cada telefone."""

    @abstractmethod
    async def get(self, phone: str) -> Optional[FeedbackSession]:
        ...

    @abstractmethod
    async def set(self, session: FeedbackSession) -> None:
        ...

    @abstractmethod
    async def clear(self, phone: str) -> None:
        ...


class MemorySessionStore(SessionStore):
    """
    Sessões em memória do processo.
    Tudo se perde ao reiniciar; expiração é feita pelo SessionService.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, dict] = {}

    async def get(self, phone: str) -> Optional[FeedbackSession]:
        data = self._sessions.get(phone)
        return FeedbackSession.from_dict(data) if data else None

    async def set(self, session: FeedbackSession) -> None:
        self._sessions[session.phone_number] = session.to_dict()

    async def clear(self, phone: str) -> None:
        self._sessions.pop(phone, None)

    def __len__(self) -> int:
        return len(self._sessions)


class RedisSessionStore(SessionStore):
    """Sessões no Redis, com TTL igual ao tempo de inatividade."""

    KEY_PREFIX = "feedback_session:"

    def __init__(self, cache: Cache, ttl_seconds: int) -> None:
        self._cache = cache
        self._ttl = ttl_seconds

    def _key(self, phone: str) -> str:
        return f"{self.KEY_PREFIX}{phone}"

    async def get(self, phone: str) -> Optional[FeedbackSession]:
        data = await self._cache.get(self._key(phone))
        return FeedbackSession.from_dict(data) if data else None

    async def set(self, session: FeedbackSession) -> None:
        await self._cache.set(self._key(session.phone_number), session.to_dict(), ttl=self._ttl)

    async def clear(self, phone: str) -> None:
        await self._cache.delete(self._key(phone))
