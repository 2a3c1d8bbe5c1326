"""Token ACL (freeze-authority gating program) instructions and state.

When a mint's freeze authority is handed to the gating program, freeze/thaw
go through it: the mint-config PDA holds the real freeze authority, and the
configured gating (list) program decides who may thaw permissionlessly.

MintConfig layout (100 bytes):
  [0]      discriminator
  [1]      bump
  [2]      enable_permissionless_thaw (bool)
  [3]      enable_permissionless_freeze (bool)
  [4:36]   mint
  [36:68]  freeze_authority
  [68:100] gating_program
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import IntEnum

from loguru import logger
from solders.instruction import AccountMeta, Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.access_control.extra_metas import resolve_extra_metas
from mint_composer.constants import (
    SYSTEM_PROGRAM_ID,
    ProgramConfig,
    default_programs,
)
from mint_composer.errors import AccountNotFoundError, StateMismatchError
from mint_composer.extensions.catalog import AccountState
from mint_composer.extensions.codec import (
    decode_mint_account,
    decode_token_account,
    encode_token_account,
)
from mint_composer.programs import token_2022
from mint_composer.rpc.client import AccountReader

MINT_CONFIG_SEED = b"MINT_CFG"
THAW_EXTRA_METAS_SEED = b"thaw-extra-account-metas"
MINT_CONFIG_SIZE = 100

# Interface discriminator stored at the head of the thaw extra-metas account
CAN_THAW_PERMISSIONLESS_DISCRIMINATOR = hashlib.sha256(
    b"efficient-allow-block-list-standard:can-thaw-permissionless"
).digest()[:8]


class GatingInstruction(IntEnum):
    CREATE_CONFIG = 0
    SET_AUTHORITY = 1
    SET_GATING_PROGRAM = 2
    THAW = 3
    FREEZE = 4
    THAW_PERMISSIONLESS = 5
    FREEZE_PERMISSIONLESS = 6
    TOGGLE_PERMISSIONLESS_INSTRUCTIONS = 7


@dataclass(frozen=True)
class MintConfig:
    bump: int
    enable_permissionless_thaw: bool
    enable_permissionless_freeze: bool
    mint: Pubkey
    freeze_authority: Pubkey
    gating_program: Pubkey


def decode_mint_config(raw: bytes) -> MintConfig:
    if len(raw) < MINT_CONFIG_SIZE:
        raise ValueError(f"Mint config too short: {len(raw)} bytes")
    return MintConfig(
        bump=raw[1],
        enable_permissionless_thaw=raw[2] != 0,
        enable_permissionless_freeze=raw[3] != 0,
        mint=Pubkey.from_bytes(raw[4:36]),
        freeze_authority=Pubkey.from_bytes(raw[36:68]),
        gating_program=Pubkey.from_bytes(raw[68:100]),
    )


def encode_mint_config(config: MintConfig, discriminator: int = 1) -> bytes:
    return (
        bytes(
            [
                discriminator,
                config.bump,
                1 if config.enable_permissionless_thaw else 0,
                1 if config.enable_permissionless_freeze else 0,
            ]
        )
        + bytes(config.mint)
        + bytes(config.freeze_authority)
        + bytes(config.gating_program)
    )


def find_mint_config_pda(mint: Pubkey, programs: ProgramConfig | None = None) -> Pubkey:
    programs = programs or default_programs()
    pda, _bump = Pubkey.find_program_address([MINT_CONFIG_SEED, bytes(mint)], programs.token_acl)
    return pda


def find_thaw_extra_metas_pda(mint: Pubkey, gating_program: Pubkey) -> Pubkey:
    pda, _bump = Pubkey.find_program_address([THAW_EXTRA_METAS_SEED, bytes(mint)], gating_program)
    return pda


def is_gating_freeze_authority(
    mint: Pubkey, freeze_authority: Pubkey | None, programs: ProgramConfig | None = None
) -> bool:
    """True when freeze authority sits with the gating program (id or its mint config)."""
    if freeze_authority is None:
        return False
    programs = programs or default_programs()
    return freeze_authority in (programs.token_acl, find_mint_config_pda(mint, programs))


async def fetch_mint_config(
    reader: AccountReader, mint: Pubkey, programs: ProgramConfig | None = None
) -> MintConfig:
    address = find_mint_config_pda(mint, programs)
    account = await reader.get_account_info(address)
    if account is None:
        raise AccountNotFoundError(f"Gating mint config {address} not found for mint {mint}")
    return decode_mint_config(account.data)


# ─── Instructions ─────────────────────────────────────────────────


def create_config(
    *,
    payer: Pubkey,
    authority: Pubkey,
    mint: Pubkey,
    gating_program: Pubkey,
    programs: ProgramConfig | None = None,
) -> Instruction:
    """Hand the mint's freeze authority to the gating program's mint config."""
    programs = programs or default_programs()
    return Instruction(
        programs.token_acl,
        bytes([GatingInstruction.CREATE_CONFIG]) + bytes(gating_program),
        [
            AccountMeta(payer, is_signer=True, is_writable=True),
            AccountMeta(authority, is_signer=True, is_writable=False),
            AccountMeta(mint, is_signer=False, is_writable=True),
            AccountMeta(find_mint_config_pda(mint, programs), is_signer=False, is_writable=True),
            AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(programs.token_program, is_signer=False, is_writable=False),
        ],
    )


def set_gating_program(
    *,
    authority: Pubkey,
    mint: Pubkey,
    gating_program: Pubkey,
    programs: ProgramConfig | None = None,
) -> Instruction:
    programs = programs or default_programs()
    return Instruction(
        programs.token_acl,
        bytes([GatingInstruction.SET_GATING_PROGRAM]) + bytes(gating_program),
        [
            AccountMeta(authority, is_signer=True, is_writable=False),
            AccountMeta(find_mint_config_pda(mint, programs), is_signer=False, is_writable=True),
        ],
    )


def toggle_permissionless_instructions(
    *,
    authority: Pubkey,
    mint: Pubkey,
    thaw_enabled: bool,
    freeze_enabled: bool = False,
    programs: ProgramConfig | None = None,
) -> Instruction:
    programs = programs or default_programs()
    return Instruction(
        programs.token_acl,
        bytes(
            [
                GatingInstruction.TOGGLE_PERMISSIONLESS_INSTRUCTIONS,
                1 if freeze_enabled else 0,
                1 if thaw_enabled else 0,
            ]
        ),
        [
            AccountMeta(authority, is_signer=True, is_writable=False),
            AccountMeta(find_mint_config_pda(mint, programs), is_signer=False, is_writable=True),
        ],
    )


def enable_permissionless_thaw(
    *, authority: Pubkey, mint: Pubkey, programs: ProgramConfig | None = None
) -> Instruction:
    return toggle_permissionless_instructions(
        authority=authority, mint=mint, thaw_enabled=True, freeze_enabled=False, programs=programs
    )


def _authority_freeze_or_thaw(
    tag: GatingInstruction,
    authority: Pubkey,
    mint: Pubkey,
    token_account: Pubkey,
    programs: ProgramConfig,
) -> Instruction:
    return Instruction(
        programs.token_acl,
        bytes([tag]),
        [
            AccountMeta(authority, is_signer=True, is_writable=False),
            AccountMeta(mint, is_signer=False, is_writable=False),
            AccountMeta(token_account, is_signer=False, is_writable=True),
            AccountMeta(find_mint_config_pda(mint, programs), is_signer=False, is_writable=False),
            AccountMeta(programs.token_program, is_signer=False, is_writable=False),
        ],
    )


def freeze(
    *, authority: Pubkey, mint: Pubkey, token_account: Pubkey, programs: ProgramConfig | None = None
) -> Instruction:
    """Freeze through the mint config (caller must be the config's freeze authority)."""
    return _authority_freeze_or_thaw(
        GatingInstruction.FREEZE, authority, mint, token_account, programs or default_programs()
    )


def thaw(
    *, authority: Pubkey, mint: Pubkey, token_account: Pubkey, programs: ProgramConfig | None = None
) -> Instruction:
    return _authority_freeze_or_thaw(
        GatingInstruction.THAW, authority, mint, token_account, programs or default_programs()
    )


def _thaw_permissionless_base(
    *,
    authority: Pubkey,
    mint: Pubkey,
    token_account: Pubkey,
    token_account_owner: Pubkey,
    gating_program: Pubkey,
    programs: ProgramConfig,
) -> Instruction:
    return Instruction(
        programs.token_acl,
        bytes([GatingInstruction.THAW_PERMISSIONLESS]),
        [
            AccountMeta(authority, is_signer=True, is_writable=False),
            AccountMeta(token_account, is_signer=False, is_writable=True),
            AccountMeta(mint, is_signer=False, is_writable=False),
            AccountMeta(find_mint_config_pda(mint, programs), is_signer=False, is_writable=False),
            AccountMeta(token_account_owner, is_signer=False, is_writable=False),
            AccountMeta(programs.token_program, is_signer=False, is_writable=False),
            AccountMeta(gating_program, is_signer=False, is_writable=False),
        ],
    )


async def get_thaw_permissionless_instructions(
    reader: AccountReader,
    *,
    authority: Pubkey,
    mint: Pubkey,
    token_account: Pubkey,
    token_account_owner: Pubkey,
    programs: ProgramConfig | None = None,
) -> list[Instruction]:
    """Permissionless thaw with the gating program's extra accounts resolved.

    If ``token_account`` does not exist yet (it is about to be created in the
    same transaction), seeds read from a synthesized frozen token account for
    ``mint``/``token_account_owner`` so the result matches a thaw built after
    creation.
    """
    programs = programs or default_programs()
    config = await fetch_mint_config(reader, mint, programs)
    extra_metas_address = find_thaw_extra_metas_pda(mint, config.gating_program)

    extra_metas_account = await reader.get_account_info(extra_metas_address)
    if extra_metas_account is None:
        raise AccountNotFoundError(f"Thaw extra metas {extra_metas_address} not found for mint {mint}")

    synthesized = encode_token_account(mint=mint, owner=token_account_owner, state=AccountState.FROZEN)

    async def fetch(address: Pubkey) -> bytes | None:
        account = await reader.get_account_info(address)
        if account is None and address == token_account:
            return synthesized
        return None if account is None else account.data

    base = _thaw_permissionless_base(
        authority=authority,
        mint=mint,
        token_account=token_account,
        token_account_owner=token_account_owner,
        gating_program=config.gating_program,
        programs=programs,
    )
    can_thaw_metas = [
        AccountMeta(authority, is_signer=False, is_writable=False),
        AccountMeta(token_account, is_signer=False, is_writable=False),
        AccountMeta(mint, is_signer=False, is_writable=False),
        AccountMeta(token_account_owner, is_signer=False, is_writable=False),
        AccountMeta(extra_metas_address, is_signer=False, is_writable=False),
    ]
    resolved = await resolve_extra_metas(
        fetch, extra_metas_account.data, can_thaw_metas, bytes(base.data), config.gating_program
    )

    # Keep the extra-metas account itself plus everything resolved after it
    accounts = list(base.accounts) + resolved[4:]
    logger.debug(
        f"[ACL] thaw_permissionless {str(token_account)[:12]}: {len(accounts)} accounts"
    )
    return [Instruction(base.program_id, bytes(base.data), accounts)]


# ─── Freeze / thaw choosing gating vs direct ─────────────────────


async def _token_account_and_mint(reader: AccountReader, token_account: Pubkey):
    account = await reader.get_account_info(token_account)
    if account is None:
        raise AccountNotFoundError(f"Token account {token_account} not found")
    try:
        decoded = decode_token_account(account.data)
    except ValueError as e:
        raise StateMismatchError(f"{token_account} is not a token account: {e}") from e

    mint_account = await reader.get_account_info(decoded.mint)
    if mint_account is None:
        raise AccountNotFoundError(f"Mint {decoded.mint} not found")
    return decoded, decode_mint_account(mint_account.data), mint_account.owner


async def get_freeze_instructions(
    reader: AccountReader,
    *,
    authority: Pubkey,
    token_account: Pubkey,
    programs: ProgramConfig | None = None,
) -> list[Instruction]:
    """Freeze one account, via the gating program when it holds freeze authority."""
    programs = programs or default_programs()
    decoded, mint, token_program = await _token_account_and_mint(reader, token_account)
    if is_gating_freeze_authority(decoded.mint, mint.freeze_authority, programs):
        return [freeze(authority=authority, mint=decoded.mint, token_account=token_account, programs=programs)]
    return [token_2022.freeze_account(token_account, decoded.mint, authority, token_program)]


async def get_thaw_instructions(
    reader: AccountReader,
    *,
    authority: Pubkey,
    token_account: Pubkey,
    programs: ProgramConfig | None = None,
) -> list[Instruction]:
    programs = programs or default_programs()
    decoded, mint, token_program = await _token_account_and_mint(reader, token_account)
    if is_gating_freeze_authority(decoded.mint, mint.freeze_authority, programs):
        return [thaw(authority=authority, mint=decoded.mint, token_account=token_account, programs=programs)]
    return [token_2022.thaw_account(token_account, decoded.mint, authority, token_program)]
