import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def linear_backoff(step_ms: int) -> Callable[[int], float]:
    """Espera `attempt * step_ms` antes da próxima tentativa (em segundos)."""
    return lambda attempt: attempt * step_ms / 1000


class RetryExhausted(Exception):
    def __init__(self, attempts: int, last_error: BaseException):
        super().__init__(f"Failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


@dataclass
class RetryPolicy:
    max_attempts: int = 3
    backoff: Callable[[int], float] = field(default_factory=lambda: linear_backoff(1000))
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    async def run(self, operation: Callable[[], Awaitable[T]], label: str = "operation") -> T:
        """
        Executa `operation` até dar certo ou esgotar as tentativas.
        Não espera depois da última falha.
        """
        last_error = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except Exception as e:
                last_error = e
                logger.warning("%s attempt %s/%s failed: %s", label, attempt, self.max_attempts, e)
                if attempt < self.max_attempts:
                    await self.sleep(self.backoff(attempt))
        raise RetryExhausted(self.max_attempts, last_error)
