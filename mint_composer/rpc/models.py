"""Pydantic models for JSON-RPC account reads."""

from pydantic import BaseModel, ConfigDict
from solders.pubkey import Pubkey  # type: ignore[import-untyped]


class EncodedAccount(BaseModel):
    """Raw account as returned by getAccountInfo (base64 data decoded)."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    address: Pubkey
    owner: Pubkey
    data: bytes
    lamports: int = 0
    executable: bool = False
