"""Allow/block list program: list configs, wallet entries, thaw extra metas.

ListConfig layout (75 bytes):
  [0]      discriminator
  [1:33]   authority
  [33:65]  seed
  [65]     mode (ListMode)
  [66]     bump
  [67:75]  wallets_count (u64)

PDAs:
  list config  ["list_config", authority, seed]  (seed = mint for mint lists)
  wallet entry [list_config, wallet]
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

from loguru import logger
from solders.instruction import AccountMeta, Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.access_control.gating import find_mint_config_pda, find_thaw_extra_metas_pda
from mint_composer.constants import SYSTEM_PROGRAM_ID, ProgramConfig, default_programs
from mint_composer.errors import AccountNotFoundError, StateMismatchError
from mint_composer.rpc.client import AccountReader

LIST_CONFIG_SEED = b"list_config"
LIST_CONFIG_SIZE = 75


class ListMode(IntEnum):
    ALLOW = 0
    ALLOW_ALL_EOAS = 1  # allow-list that also lets plain wallets thaw permissionlessly
    BLOCK = 2


class ListInstruction(IntEnum):
    INIT_LIST_CONFIG = 0
    ADD_WALLET = 1
    REMOVE_WALLET = 2
    SET_EXTRA_METAS_THAW = 3


@dataclass(frozen=True)
class ListConfig:
    authority: Pubkey
    seed: Pubkey
    mode: ListMode
    bump: int
    wallets_count: int

    @property
    def is_allowlist(self) -> bool:
        return self.mode in (ListMode.ALLOW, ListMode.ALLOW_ALL_EOAS)

    @property
    def is_blocklist(self) -> bool:
        return self.mode == ListMode.BLOCK


def decode_list_config(raw: bytes) -> ListConfig:
    if len(raw) < LIST_CONFIG_SIZE:
        raise ValueError(f"List config too short: {len(raw)} bytes")
    return ListConfig(
        authority=Pubkey.from_bytes(raw[1:33]),
        seed=Pubkey.from_bytes(raw[33:65]),
        mode=ListMode(raw[65]),
        bump=raw[66],
        wallets_count=struct.unpack_from("<Q", raw, 67)[0],
    )


def encode_list_config(config: ListConfig, discriminator: int = 1) -> bytes:
    return (
        bytes([discriminator])
        + bytes(config.authority)
        + bytes(config.seed)
        + bytes([int(config.mode), config.bump])
        + struct.pack("<Q", config.wallets_count)
    )


def find_list_config_pda(
    authority: Pubkey, seed: Pubkey, programs: ProgramConfig | None = None
) -> Pubkey:
    programs = programs or default_programs()
    pda, _bump = Pubkey.find_program_address(
        [LIST_CONFIG_SEED, bytes(authority), bytes(seed)], programs.list_program
    )
    return pda


def find_wallet_entry_pda(
    list_config: Pubkey, wallet: Pubkey, programs: ProgramConfig | None = None
) -> Pubkey:
    programs = programs or default_programs()
    pda, _bump = Pubkey.find_program_address([bytes(list_config), bytes(wallet)], programs.list_program)
    return pda


async def get_list_config(reader: AccountReader, list_config: Pubkey) -> ListConfig:
    account = await reader.get_account_info(list_config)
    if account is None:
        raise AccountNotFoundError(f"List config {list_config} not found")
    try:
        return decode_list_config(account.data)
    except ValueError as e:
        raise StateMismatchError(f"{list_config} is not a list config: {e}") from e


# ─── Instructions ─────────────────────────────────────────────────


def initialize_list_config(
    *,
    authority: Pubkey,
    seed: Pubkey,
    mode: ListMode,
    programs: ProgramConfig | None = None,
) -> tuple[Instruction, Pubkey]:
    """Create a list; returns the instruction and the list config address."""
    programs = programs or default_programs()
    list_config = find_list_config_pda(authority, seed, programs)
    ix = Instruction(
        programs.list_program,
        bytes([ListInstruction.INIT_LIST_CONFIG]) + bytes(seed) + bytes([int(mode)]),
        [
            AccountMeta(authority, is_signer=True, is_writable=True),
            AccountMeta(list_config, is_signer=False, is_writable=True),
            AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        ],
    )
    logger.debug(f"[ACL] init list {str(list_config)[:12]} mode={mode.name}")
    return ix, list_config


def add_wallet(
    *,
    authority: Pubkey,
    list_config: Pubkey,
    wallet: Pubkey,
    programs: ProgramConfig | None = None,
) -> Instruction:
    programs = programs or default_programs()
    return Instruction(
        programs.list_program,
        bytes([ListInstruction.ADD_WALLET]),
        [
            AccountMeta(authority, is_signer=True, is_writable=True),
            AccountMeta(list_config, is_signer=False, is_writable=True),
            AccountMeta(wallet, is_signer=False, is_writable=False),
            AccountMeta(find_wallet_entry_pda(list_config, wallet, programs), is_signer=False, is_writable=True),
            AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        ],
    )


def remove_wallet(
    *,
    authority: Pubkey,
    list_config: Pubkey,
    wallet: Pubkey,
    programs: ProgramConfig | None = None,
) -> Instruction:
    programs = programs or default_programs()
    return Instruction(
        programs.list_program,
        bytes([ListInstruction.REMOVE_WALLET]),
        [
            AccountMeta(authority, is_signer=True, is_writable=True),
            AccountMeta(list_config, is_signer=False, is_writable=True),
            AccountMeta(find_wallet_entry_pda(list_config, wallet, programs), is_signer=False, is_writable=True),
        ],
    )


def set_extra_metas_thaw(
    *,
    authority: Pubkey,
    list_config: Pubkey,
    mint: Pubkey,
    programs: ProgramConfig | None = None,
) -> Instruction:
    """Register ``list_config`` as the list the gating program checks on thaw."""
    programs = programs or default_programs()
    return Instruction(
        programs.list_program,
        bytes([ListInstruction.SET_EXTRA_METAS_THAW]),
        [
            AccountMeta(authority, is_signer=True, is_writable=True),
            AccountMeta(list_config, is_signer=False, is_writable=False),
            AccountMeta(mint, is_signer=False, is_writable=False),
            AccountMeta(find_mint_config_pda(mint, programs), is_signer=False, is_writable=False),
            AccountMeta(
                find_thaw_extra_metas_pda(mint, programs.list_program),
                is_signer=False,
                is_writable=True,
            ),
            AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        ],
    )
