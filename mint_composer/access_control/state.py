"""Access-control state derived from a mint, and token-account resolution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from loguru import logger
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.access_control.gating import is_gating_freeze_authority
from mint_composer.constants import SYSTEM_PROGRAM_ID, TOKEN_2022_PROGRAM_ID, ProgramConfig
from mint_composer.errors import TokenAccountMismatchError
from mint_composer.extensions.catalog import AccountState
from mint_composer.extensions.codec import decode_token_account
from mint_composer.inspection.models import MintAccountView
from mint_composer.programs.associated_token import get_associated_token_address
from mint_composer.rpc.client import AccountReader


class AclMode(str, Enum):
    ALLOW = "allowlist"  # new accounts start frozen until allowed
    BLOCK = "blocklist"  # new accounts start usable until blocked
    NONE = "none"


@dataclass(frozen=True)
class AccessControlState:
    mode: AclMode
    gating_active: bool


def derive_access_control(view: MintAccountView, programs: ProgramConfig | None = None) -> AccessControlState:
    """Mode from the default account state; gating active only for frozen-default
    mints whose freeze authority sits with the gating program."""
    das = view.default_account_state
    if das is None:
        mode = AclMode.NONE
    elif das.state == AccountState.FROZEN:
        mode = AclMode.ALLOW
    else:
        mode = AclMode.BLOCK

    gating_active = (
        das is not None
        and das.state == AccountState.FROZEN
        and is_gating_freeze_authority(view.address, view.freeze_authority, programs)
    )
    return AccessControlState(mode=mode, gating_active=gating_active)


@dataclass(frozen=True)
class ResolvedTokenAccount:
    token_account: Pubkey
    owner: Pubkey
    is_initialized: bool
    is_frozen: bool


async def resolve_token_account(
    reader: AccountReader,
    account: Pubkey,
    mint: Pubkey,
    token_program: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> ResolvedTokenAccount:
    """Accept either a token account for ``mint`` or a wallet (resolved to its ATA).

    A wallet whose ATA does not exist yet is reported uninitialized and frozen:
    under gating it will be created frozen and thawed through the gating program.
    """
    info = await reader.get_account_info(account)

    if info is not None and info.owner == token_program:
        try:
            decoded = decode_token_account(info.data)
        except ValueError as e:
            raise TokenAccountMismatchError(f"{account} is not a token account: {e}") from e
        if decoded.mint != mint:
            raise TokenAccountMismatchError(
                f"Token account {account} is not for mint {mint} but for {decoded.mint}"
            )
        return ResolvedTokenAccount(
            token_account=account,
            owner=decoded.owner,
            is_initialized=True,
            is_frozen=decoded.is_frozen,
        )

    if info is not None and info.owner != SYSTEM_PROGRAM_ID:
        raise TokenAccountMismatchError(
            f"Account {account} (owner {info.owner}) is not a valid account for mint {mint}"
        )

    ata = get_associated_token_address(account, mint, token_program)
    ata_info = await reader.get_account_info(ata)
    if ata_info is None:
        logger.debug(f"[ACL] ATA {str(ata)[:12]} for {str(account)[:12]} not created yet")
        return ResolvedTokenAccount(token_account=ata, owner=account, is_initialized=False, is_frozen=True)

    try:
        decoded = decode_token_account(ata_info.data)
    except ValueError as e:
        raise TokenAccountMismatchError(f"ATA {ata} is not a token account: {e}") from e
    return ResolvedTokenAccount(
        token_account=ata,
        owner=account,
        is_initialized=True,
        is_frozen=decoded.is_frozen,
    )
