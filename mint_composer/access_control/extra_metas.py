"""Extra-account-meta lists (spl-tlv-account-resolution) for permissionless thaw.

The gating program publishes, per mint, a TLV account listing the extra
accounts its can-thaw hook needs. Layout:
  [0:8]    instruction discriminator
  [8:12]   u32 byte length of the value
  [12:16]  u32 meta count
  [16:]    count x 35-byte ExtraAccountMeta

ExtraAccountMeta: u8 discriminator, 32-byte address config, u8 is_signer,
u8 is_writable. Discriminator 0 = fixed address, 1 = PDA of the gating
program, 128 + i = PDA of the program found at account index i.

Seeds packed into an address config:
  1 literal        [1, len, bytes...]
  2 instr. data    [2, index, length]
  3 account key    [3, index]
  4 account data   [4, account_index, data_index, length]
  0 terminates
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

from loguru import logger
from solders.instruction import AccountMeta  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.errors import AccountNotFoundError

EXTRA_ACCOUNT_META_SIZE = 35
_HEADER_SIZE = 16

FIXED_ADDRESS = 0
PDA_OF_GATING_PROGRAM = 1
EXTERNAL_PDA_BASE = 128

SEED_LITERAL = 1
SEED_INSTRUCTION_DATA = 2
SEED_ACCOUNT_KEY = 3
SEED_ACCOUNT_DATA = 4

# Returns raw account data or None when the account does not exist
AccountDataFetcher = Callable[[Pubkey], Awaitable["bytes | None"]]


@dataclass(frozen=True)
class Seed:
    kind: int
    index: int = 0
    data_index: int = 0
    length: int = 0
    literal: bytes = b""


@dataclass(frozen=True)
class ExtraAccountMeta:
    discriminator: int
    address_config: bytes
    is_signer: bool
    is_writable: bool

    @classmethod
    def fixed(cls, address: Pubkey, *, is_signer: bool = False, is_writable: bool = False) -> ExtraAccountMeta:
        return cls(FIXED_ADDRESS, bytes(address), is_signer, is_writable)

    @classmethod
    def pda(
        cls,
        seeds: Sequence[Seed],
        *,
        program_index: int | None = None,
        is_signer: bool = False,
        is_writable: bool = False,
    ) -> ExtraAccountMeta:
        disc = PDA_OF_GATING_PROGRAM if program_index is None else EXTERNAL_PDA_BASE + program_index
        return cls(disc, pack_seeds(seeds), is_signer, is_writable)

    def to_bytes(self) -> bytes:
        return (
            bytes([self.discriminator])
            + self.address_config
            + bytes([1 if self.is_signer else 0, 1 if self.is_writable else 0])
        )


def pack_seeds(seeds: Sequence[Seed]) -> bytes:
    out = bytearray()
    for seed in seeds:
        if seed.kind == SEED_LITERAL:
            out += bytes([SEED_LITERAL, len(seed.literal)]) + seed.literal
        elif seed.kind == SEED_INSTRUCTION_DATA:
            out += bytes([SEED_INSTRUCTION_DATA, seed.index, seed.length])
        elif seed.kind == SEED_ACCOUNT_KEY:
            out += bytes([SEED_ACCOUNT_KEY, seed.index])
        elif seed.kind == SEED_ACCOUNT_DATA:
            out += bytes([SEED_ACCOUNT_DATA, seed.index, seed.data_index, seed.length])
        else:
            raise ValueError(f"Unknown seed kind {seed.kind}")
    if len(out) > 32:
        raise ValueError(f"Packed seeds exceed 32 bytes ({len(out)})")
    return bytes(out) + bytes(32 - len(out))


def unpack_seeds(config: bytes) -> list[Seed]:
    seeds: list[Seed] = []
    i = 0
    while i < len(config):
        kind = config[i]
        if kind == 0:
            break
        if kind == SEED_LITERAL:
            length = config[i + 1]
            seeds.append(Seed(SEED_LITERAL, literal=bytes(config[i + 2:i + 2 + length])))
            i += 2 + length
        elif kind == SEED_INSTRUCTION_DATA:
            seeds.append(Seed(SEED_INSTRUCTION_DATA, index=config[i + 1], length=config[i + 2]))
            i += 3
        elif kind == SEED_ACCOUNT_KEY:
            seeds.append(Seed(SEED_ACCOUNT_KEY, index=config[i + 1]))
            i += 2
        elif kind == SEED_ACCOUNT_DATA:
            seeds.append(
                Seed(
                    SEED_ACCOUNT_DATA,
                    index=config[i + 1],
                    data_index=config[i + 2],
                    length=config[i + 3],
                )
            )
            i += 4
        else:
            raise ValueError(f"Unknown seed kind {kind} in address config")
    return seeds


def encode_extra_account_metas(discriminator: bytes, metas: Sequence[ExtraAccountMeta]) -> bytes:
    body = struct.pack("<I", len(metas)) + b"".join(m.to_bytes() for m in metas)
    return bytes(discriminator) + struct.pack("<I", len(body)) + body


def decode_extra_account_metas(raw: bytes) -> list[ExtraAccountMeta]:
    if len(raw) < _HEADER_SIZE:
        raise ValueError(f"Extra metas account too short: {len(raw)} bytes")
    (count,) = struct.unpack_from("<I", raw, 12)
    end = _HEADER_SIZE + count * EXTRA_ACCOUNT_META_SIZE
    if end > len(raw):
        raise ValueError(f"Extra metas account truncated: {count} metas, {len(raw)} bytes")

    metas: list[ExtraAccountMeta] = []
    for off in range(_HEADER_SIZE, end, EXTRA_ACCOUNT_META_SIZE):
        metas.append(
            ExtraAccountMeta(
                discriminator=raw[off],
                address_config=bytes(raw[off + 1:off + 33]),
                is_signer=raw[off + 33] != 0,
                is_writable=raw[off + 34] != 0,
            )
        )
    return metas


async def _seed_bytes(
    seed: Seed,
    accounts: Sequence[AccountMeta],
    instruction_data: bytes,
    fetch: AccountDataFetcher,
) -> bytes:
    if seed.kind == SEED_LITERAL:
        return seed.literal
    if seed.kind == SEED_INSTRUCTION_DATA:
        end = seed.index + seed.length
        if end > len(instruction_data):
            raise ValueError(f"Instruction data too short for seed [{seed.index}:{end}]")
        return instruction_data[seed.index:end]
    if seed.index >= len(accounts):
        raise ValueError(f"Seed references account index {seed.index} of {len(accounts)}")
    key = accounts[seed.index].pubkey
    if seed.kind == SEED_ACCOUNT_KEY:
        return bytes(key)

    data = await fetch(key)
    if data is None:
        raise AccountNotFoundError(f"Account {key} needed for seed resolution not found")
    end = seed.data_index + seed.length
    if end > len(data):
        raise ValueError(f"Account {key} data too short for seed [{seed.data_index}:{end}]")
    return data[seed.data_index:end]


async def resolve_extra_metas(
    fetch: AccountDataFetcher,
    extra_metas_data: bytes,
    previous_metas: Sequence[AccountMeta],
    instruction_data: bytes,
    program_id: Pubkey,
) -> list[AccountMeta]:
    """Append the resolved extra accounts to ``previous_metas``.

    Metas resolve in order, so a later meta may reference an earlier one by
    account index.
    """
    accounts = list(previous_metas)
    for meta in decode_extra_account_metas(extra_metas_data):
        if meta.discriminator == FIXED_ADDRESS:
            address = Pubkey.from_bytes(meta.address_config)
        else:
            if meta.discriminator == PDA_OF_GATING_PROGRAM:
                owner = program_id
            elif meta.discriminator >= EXTERNAL_PDA_BASE:
                idx = meta.discriminator - EXTERNAL_PDA_BASE
                if idx >= len(accounts):
                    raise ValueError(f"External PDA program index {idx} out of range")
                owner = accounts[idx].pubkey
            else:
                raise ValueError(f"Unknown extra meta discriminator {meta.discriminator}")
            seeds = [
                await _seed_bytes(s, accounts, instruction_data, fetch)
                for s in unpack_seeds(meta.address_config)
            ]
            address, _bump = Pubkey.find_program_address(seeds, owner)
        accounts.append(AccountMeta(address, is_signer=meta.is_signer, is_writable=meta.is_writable))

    logger.debug(f"[ACL] Resolved {len(accounts) - len(previous_metas)} extra metas")
    return accounts
