"""Tests for the Solana JSON-RPC client."""

import base64
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from solders.hash import Hash  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.constants import TOKEN_2022_PROGRAM_ID
from mint_composer.errors import TransportError
from mint_composer.rpc.client import SolanaRpcClient, get_multiple_accounts


def _build_client(payload=None, status_code: int = 200) -> SolanaRpcClient:
    client = SolanaRpcClient("http://rpc.test", max_rps=0)
    mock_resp = MagicMock()
    mock_resp.status_code = status_code
    mock_resp.json.return_value = payload
    client._client = AsyncMock()
    client._client.post = AsyncMock(return_value=mock_resp)
    return client


class TestGetAccountInfo:
    @pytest.mark.asyncio
    async def test_decodes_account(self) -> None:
        address = Pubkey.new_unique()
        client = _build_client(
            {
                "jsonrpc": "2.0",
                "id": 1,
                "result": {
                    "context": {"slot": 1},
                    "value": {
                        "data": [base64.b64encode(b"\x01\x02\x03").decode(), "base64"],
                        "owner": str(TOKEN_2022_PROGRAM_ID),
                        "lamports": 1461600,
                        "executable": False,
                    },
                },
            }
        )

        account = await client.get_account_info(address)

        assert account is not None
        assert account.address == address
        assert account.owner == TOKEN_2022_PROGRAM_ID
        assert account.data == b"\x01\x02\x03"
        assert account.lamports == 1461600

        payload = client._client.post.call_args.kwargs["json"]
        assert payload["method"] == "getAccountInfo"
        assert payload["params"][0] == str(address)
        assert payload["params"][1]["encoding"] == "base64"

    @pytest.mark.asyncio
    async def test_missing_account(self) -> None:
        client = _build_client({"result": {"context": {"slot": 1}, "value": None}})
        assert await client.get_account_info(Pubkey.new_unique()) is None

    @pytest.mark.asyncio
    async def test_malformed_value(self) -> None:
        client = _build_client({"result": {"value": {"data": [], "owner": "not-a-key"}}})
        with pytest.raises(TransportError, match="Malformed"):
            await client.get_account_info(Pubkey.new_unique())


class TestTransportErrors:
    @pytest.mark.asyncio
    async def test_http_status(self) -> None:
        client = _build_client({}, status_code=503)
        with pytest.raises(TransportError, match="HTTP 503"):
            await client.get_latest_blockhash()

    @pytest.mark.asyncio
    async def test_rpc_error_object(self) -> None:
        client = _build_client({"error": {"code": -32005, "message": "Node is behind"}})
        with pytest.raises(TransportError, match="RPC error"):
            await client.get_minimum_balance_for_rent_exemption(82)

    @pytest.mark.asyncio
    async def test_missing_result(self) -> None:
        client = _build_client({"jsonrpc": "2.0", "id": 1})
        with pytest.raises(TransportError, match="missing result"):
            await client.get_latest_blockhash()

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        client = _build_client()
        client._client.post.return_value.json.side_effect = ValueError("bad json")
        with pytest.raises(TransportError, match="invalid JSON"):
            await client.get_latest_blockhash()

    @pytest.mark.asyncio
    async def test_httpx_errors_propagate(self) -> None:
        client = _build_client()
        client._client.post.side_effect = httpx.ConnectError("refused")
        with pytest.raises(httpx.ConnectError):
            await client.get_account_info(Pubkey.new_unique())


class TestOtherReads:
    @pytest.mark.asyncio
    async def test_latest_blockhash(self) -> None:
        blockhash = Hash.new_unique()
        client = _build_client(
            {"result": {"value": {"blockhash": str(blockhash), "lastValidBlockHeight": 100}}}
        )
        assert await client.get_latest_blockhash() == blockhash

    @pytest.mark.asyncio
    async def test_rent(self) -> None:
        client = _build_client({"result": 1461600})
        assert await client.get_minimum_balance_for_rent_exemption(82) == 1461600
        assert client._client.post.call_args.kwargs["json"]["params"] == [82]

    @pytest.mark.asyncio
    async def test_rent_not_int(self) -> None:
        client = _build_client({"result": "lots"})
        with pytest.raises(TransportError):
            await client.get_minimum_balance_for_rent_exemption(82)


class TestGetMultipleAccounts:
    @pytest.mark.asyncio
    async def test_order_preserved(self, reader) -> None:
        present, missing = Pubkey.new_unique(), Pubkey.new_unique()
        reader.add_wallet(present)

        accounts = await get_multiple_accounts(reader, [missing, present])

        assert accounts[0] is None
        assert accounts[1] is not None and accounts[1].address == present
