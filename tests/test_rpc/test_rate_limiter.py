"""Tests for the JSON-RPC call spacer."""

import asyncio

import pytest

from mint_composer.rpc.rate_limiter import RpcRateLimiter


class TestRpcRateLimiter:
    @pytest.mark.asyncio
    async def test_spaces_requests(self) -> None:
        limiter = RpcRateLimiter(max_rps=20.0)
        loop = asyncio.get_running_loop()
        start = loop.time()
        for _ in range(3):
            await limiter.acquire()
        # first call is free, the next two wait ~50ms each
        assert loop.time() - start >= 0.09
        assert limiter.throttled_sec > 0

    @pytest.mark.asyncio
    async def test_context_manager(self) -> None:
        limiter = RpcRateLimiter(max_rps=1000.0)
        async with limiter as acquired:
            assert acquired is limiter

    @pytest.mark.asyncio
    async def test_disabled(self) -> None:
        limiter = RpcRateLimiter(max_rps=0)
        assert not limiter.enabled
        for _ in range(50):
            await limiter.acquire()
        assert limiter.throttled_sec == 0.0
