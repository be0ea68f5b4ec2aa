"""
Утилиты для работы с таймаутами.

asyncio.wait_for() кидает asyncio.TimeoutError без деталей,
тут мы оборачиваем его с нормальным сообщением.
"""
import asyncio
from typing import Any, Coroutine, Optional, TypeVar

T = TypeVar("T")


async def with_timeout(
    coro: Coroutine[Any, Any, T],
    timeout: Optional[float],
    operation: str = ""
) -> T:
    """
    Обёртка над wait_for с понятной ошибкой.

    Вместо голого TimeoutError получаем:
    "Timeout during parsing request after 15.0s"

    timeout=None — без ограничения, просто await.
    """
    if timeout is None:
        return await coro
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except asyncio.TimeoutError:
        raise TimeoutError(f"Timeout during {operation} after {timeout}s")
