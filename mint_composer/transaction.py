"""Unsigned transaction assembly for instruction plans."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Sequence

import base58
from loguru import logger
from solders.hash import Hash  # type: ignore[import-untyped]
from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.message import MessageV0  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.signature import Signature  # type: ignore[import-untyped]
from solders.transaction import VersionedTransaction  # type: ignore[import-untyped]

from mint_composer.rpc.client import AccountReader


@dataclass(frozen=True)
class UnsignedTransaction:
    """Instruction plan compiled against a blockhash, awaiting signatures.

    Signatures are zero placeholders; the wallet fills them in.
    """

    fee_payer: Pubkey
    instructions: tuple[Instruction, ...]
    blockhash: Hash

    @property
    def message(self) -> MessageV0:
        return MessageV0.try_compile(
            payer=self.fee_payer,
            instructions=list(self.instructions),
            address_lookup_table_accounts=[],
            recent_blockhash=self.blockhash,
        )

    @property
    def required_signers(self) -> list[Pubkey]:
        msg = self.message
        return list(msg.account_keys[: msg.header.num_required_signatures])

    def to_versioned(self) -> VersionedTransaction:
        msg = self.message
        placeholders = [Signature.default()] * msg.header.num_required_signatures
        return VersionedTransaction.populate(msg, placeholders)

    def sign(self, signers: Sequence[Keypair]) -> VersionedTransaction:
        """Fully sign with every required keypair (local tooling and tests)."""
        return VersionedTransaction(self.message, list(signers))

    def to_bytes(self) -> bytes:
        return bytes(self.to_versioned())

    def to_base64(self) -> str:
        return base64.b64encode(self.to_bytes()).decode("ascii")

    def to_base58(self) -> str:
        return base58.b58encode(self.to_bytes()).decode("ascii")


async def build_unsigned_transaction(
    reader: AccountReader,
    fee_payer: Pubkey,
    instructions: Sequence[Instruction],
) -> UnsignedTransaction:
    blockhash = await reader.get_latest_blockhash()
    tx = UnsignedTransaction(
        fee_payer=fee_payer,
        instructions=tuple(instructions),
        blockhash=blockhash,
    )
    logger.debug(
        f"[TX] Built: {len(tx.instructions)} instructions, "
        f"payer={str(fee_payer)[:12]}, blockhash={str(blockhash)[:16]}..."
    )
    return tx
