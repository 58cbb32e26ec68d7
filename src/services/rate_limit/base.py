"""RateLimiter - admission control для мутирующих операций.

Одна корзина на ключ (email principal). consume() атомарен: два конкурентных
вызова не могут оба получить accepted, если осталась одна единица.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from src.core.enums import RateLimitPolicy


@dataclass(frozen=True)
class RateLimitDecision:
    """Результат consume().

    Attributes:
        accepted: Запрос допущен
        remaining: Остаток единиц после решения
        retry_after: Через сколько секунд появится нужное количество единиц (0 если accepted)

    """

    accepted: bool
    remaining: int
    retry_after: float = 0.0


class RateLimiter(ABC):
    """Базовый интерфейс rate limiter.

    Attributes:
        capacity: Единиц на интервал
        interval: Длина окна / время полного пополнения (секунды)
        policy: Политика пополнения

    """

    def __init__(self, capacity: int, interval_seconds: float, policy: RateLimitPolicy | str) -> None:
        if capacity < 1:
            msg = f"capacity должен быть >= 1, получено: {capacity}"
            raise ValueError(msg)
        if interval_seconds <= 0:
            msg = f"interval должен быть > 0, получено: {interval_seconds}"
            raise ValueError(msg)

        self.capacity = capacity
        self.interval = float(interval_seconds)
        self.policy = RateLimitPolicy(policy)

    def _check_cost(self, cost: int) -> None:
        if not 1 <= cost <= self.capacity:
            msg = f"cost должен быть в диапазоне 1-{self.capacity}, получено: {cost}"
            raise ValueError(msg)

    @abstractmethod
    async def consume(self, key: str, cost: int = 1) -> RateLimitDecision:
        """Атомарно проверить и списать cost единиц для ключа.

        Args:
            key: Ключ корзины (email principal)
            cost: Количество единиц

        Returns:
            RateLimitDecision

        Raises:
            ValueError: cost вне диапазона 1..capacity

        """

    async def close(self) -> None:
        """Освободить ресурсы limiter."""
        return None
