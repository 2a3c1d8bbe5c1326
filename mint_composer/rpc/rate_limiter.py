import asyncio

from loguru import logger


class RpcRateLimiter:
    """Spaces JSON-RPC calls so one client stays under ``max_rps``.

    Calls are serialized through a lock; ``max_rps <= 0`` disables throttling
    (private RPC endpoints). Usable as ``await limiter.acquire()`` or
    ``async with limiter:``.
    """

    def __init__(self, max_rps: float) -> None:
        self._min_interval = 1.0 / max_rps if max_rps > 0 else 0.0
        self._next_slot = 0.0
        self._lock = asyncio.Lock()
        self.throttled_sec = 0.0

    @property
    def enabled(self) -> bool:
        return self._min_interval > 0

    async def acquire(self) -> None:
        if not self.enabled:
            return
        async with self._lock:
            loop = asyncio.get_running_loop()
            wait = self._next_slot - loop.time()
            if wait > 0:
                self.throttled_sec += wait
                logger.debug(f"[RPC] Throttled {wait * 1000:.0f}ms")
                await asyncio.sleep(wait)
            self._next_slot = loop.time() + self._min_interval

    async def __aenter__(self) -> "RpcRateLimiter":
        await self.acquire()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None
