# utils/async_utils.py

"""
Комбинаторы "попытаться и собрать результаты".

Используются там, где подчиненная операция выполняется по принципу
best-effort: ошибка отдельного элемента превращается в Outcome с error
и не прерывает остальные.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Outcome(Generic[T]):
    """Результат одной попытки"""
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: T) -> T:
        return self.value if self.ok else default


async def attempt(awaitable: Awaitable[T], label: str = "") -> Outcome[T]:
    """Выполнить awaitable, исключение сохраняется в Outcome"""
    try:
        return Outcome(value=await awaitable)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        if label:
            logger.warning(f"⚠️ {label}: {e}")
        return Outcome(error=e)


async def attempt_all(awaitables: Iterable[Awaitable[Any]], label: str = "") -> List[Outcome[Any]]:
    """Параллельный запуск с сохранением порядка, ошибки не пробрасываются"""
    return list(await asyncio.gather(*(attempt(aw, label) for aw in awaitables)))


def failures(outcomes: Iterable[Outcome[Any]]) -> List[Outcome[Any]]:
    return [outcome for outcome in outcomes if not outcome.ok]
