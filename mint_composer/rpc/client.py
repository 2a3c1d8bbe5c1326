"""Solana JSON-RPC reads — the network collaborator behind every builder.

Builders only depend on the ``AccountReader`` protocol, so tests pass an
in-memory fake and production code passes ``SolanaRpcClient``.
"""

from __future__ import annotations

import asyncio
import base64
from typing import Any, Protocol, Sequence

import httpx
from loguru import logger
from solders.hash import Hash  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from config.settings import settings
from mint_composer.errors import TransportError
from mint_composer.rpc.models import EncodedAccount
from mint_composer.rpc.rate_limiter import RpcRateLimiter


class AccountReader(Protocol):
    async def get_account_info(self, address: Pubkey) -> EncodedAccount | None: ...

    async def get_latest_blockhash(self) -> Hash: ...

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int: ...


async def get_multiple_accounts(
    reader: AccountReader, addresses: Sequence[Pubkey]
) -> list[EncodedAccount | None]:
    """Independent reads issued concurrently; result order matches ``addresses``."""
    return list(await asyncio.gather(*(reader.get_account_info(a) for a in addresses)))


class SolanaRpcClient:
    """Async JSON-RPC client for the reads the builders need.

    No retry layer: transport errors from httpx propagate unchanged, malformed
    responses and RPC error objects raise ``TransportError``.
    """

    def __init__(
        self,
        rpc_url: str = "",
        *,
        commitment: str = "",
        timeout: float | None = None,
        max_rps: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._rpc_url = rpc_url or settings.solana_rpc_url
        self._commitment = commitment or settings.rpc_commitment
        self._rate_limiter = RpcRateLimiter(settings.rpc_max_rps if max_rps is None else max_rps)
        self._client = client or httpx.AsyncClient(timeout=timeout or settings.rpc_timeout_sec)

    async def close(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        async with self._rate_limiter:
            resp = await self._client.post(self._rpc_url, json=payload)
        if resp.status_code != 200:
            raise TransportError(f"{method} HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError(f"{method} returned invalid JSON") from e

        if "error" in data:
            logger.warning(f"[RPC] {method} error: {data['error']}")
            raise TransportError(f"{method} RPC error: {data['error']}")
        if "result" not in data:
            raise TransportError(f"{method} response missing result")
        return data["result"]

    async def get_account_info(self, address: Pubkey) -> EncodedAccount | None:
        result = await self._call(
            "getAccountInfo",
            [str(address), {"encoding": "base64", "commitment": self._commitment}],
        )
        value = result.get("value") if isinstance(result, dict) else None
        if value is None:
            logger.debug(f"[RPC] Account {str(address)[:12]} not found")
            return None

        try:
            raw_b64 = value["data"][0]
            return EncodedAccount(
                address=address,
                owner=Pubkey.from_string(value["owner"]),
                data=base64.b64decode(raw_b64),
                lamports=int(value.get("lamports", 0)),
                executable=bool(value.get("executable", False)),
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed getAccountInfo value for {address}: {e}") from e

    async def get_multiple_accounts(
        self, addresses: Sequence[Pubkey]
    ) -> list[EncodedAccount | None]:
        return await get_multiple_accounts(self, addresses)

    async def get_latest_blockhash(self) -> Hash:
        result = await self._call("getLatestBlockhash", [{"commitment": self._commitment}])
        try:
            return Hash.from_string(result["value"]["blockhash"])
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed getLatestBlockhash result: {e}") from e

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        result = await self._call("getMinimumBalanceForRentExemption", [size])
        if not isinstance(result, int):
            raise TransportError(f"Unexpected rent result: {result!r}")
        return result
