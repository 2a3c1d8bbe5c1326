"""Allow-list / block-list membership changes with the matching freeze or thaw.

Un-restrict (allow-list add, block-list remove):
  gating inactive -> direct thaw by the freeze authority
  gating active   -> list update, then permissionless thaw if the account is frozen

Restrict (block-list add, allow-list remove):
  gating inactive -> direct freeze by the freeze authority
  gating active   -> list update, then gating-program freeze if the account is thawed

The list mode is checked before any instruction is built.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from loguru import logger
from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.access_control import gating, lists
from mint_composer.access_control.lists import ListConfig
from mint_composer.access_control.state import derive_access_control, resolve_token_account
from mint_composer.constants import ProgramConfig, default_programs
from mint_composer.errors import WrongListModeError
from mint_composer.inspection.inspector import fetch_mint_view
from mint_composer.programs import token_2022
from mint_composer.rpc.client import AccountReader
from mint_composer.signers import AuthorityInput, as_address
from mint_composer.transaction import UnsignedTransaction, build_unsigned_transaction

ListOp = Callable[..., Instruction]


async def _build_membership_change(
    reader: AccountReader,
    mint: Pubkey,
    account: AuthorityInput,
    authority: AuthorityInput,
    *,
    allowlist: bool,
    list_op: ListOp,
    restrict: bool,
    programs: ProgramConfig | None,
) -> list[Instruction]:
    programs = programs or default_programs()
    authority_address = as_address(authority)
    resolved, view = await asyncio.gather(
        resolve_token_account(reader, as_address(account), mint, programs.token_program),
        fetch_mint_view(reader, mint),
    )
    state = derive_access_control(view, programs)
    action = "restrict" if restrict else "unrestrict"

    if not state.gating_active:
        direct = token_2022.freeze_account if restrict else token_2022.thaw_account
        logger.info(f"[ACL] {action} {str(resolved.token_account)[:12]}: direct {direct.__name__}")
        return [direct(resolved.token_account, mint, authority_address, view.program_id)]

    list_config = lists.find_list_config_pda(authority_address, mint, programs)
    config = await lists.get_list_config(reader, list_config)
    _require_list_mode(config, allowlist=allowlist, list_config=list_config)

    instructions = [
        list_op(
            authority=authority_address,
            list_config=list_config,
            wallet=resolved.owner,
            programs=programs,
        )
    ]

    if restrict and resolved.is_initialized and not resolved.is_frozen:
        instructions.append(
            gating.freeze(
                authority=authority_address,
                mint=mint,
                token_account=resolved.token_account,
                programs=programs,
            )
        )
    elif not restrict and resolved.is_initialized and resolved.is_frozen:
        instructions.extend(
            await gating.get_thaw_permissionless_instructions(
                reader,
                authority=authority_address,
                mint=mint,
                token_account=resolved.token_account,
                token_account_owner=resolved.owner,
                programs=programs,
            )
        )

    logger.info(
        f"[ACL] {action} {str(resolved.token_account)[:12]} via list {str(list_config)[:12]}: "
        f"{len(instructions)} instructions"
    )
    return instructions


def _require_list_mode(config: ListConfig, *, allowlist: bool, list_config: Pubkey) -> None:
    if allowlist and not config.is_allowlist:
        logger.warning(f"[ACL] {list_config} is a {config.mode.name} list, expected allow-list")
        raise WrongListModeError(f"List {list_config} is not an allow-list (mode {config.mode.name})")
    if not allowlist and not config.is_blocklist:
        logger.warning(f"[ACL] {list_config} is a {config.mode.name} list, expected block-list")
        raise WrongListModeError(f"List {list_config} is not a block-list (mode {config.mode.name})")


async def get_add_to_allowlist_instructions(
    reader: AccountReader,
    mint: Pubkey,
    account: AuthorityInput,
    authority: AuthorityInput,
    programs: ProgramConfig | None = None,
) -> list[Instruction]:
    return await _build_membership_change(
        reader, mint, account, authority,
        allowlist=True, list_op=lists.add_wallet, restrict=False, programs=programs,
    )


async def get_remove_from_allowlist_instructions(
    reader: AccountReader,
    mint: Pubkey,
    account: AuthorityInput,
    authority: AuthorityInput,
    programs: ProgramConfig | None = None,
) -> list[Instruction]:
    return await _build_membership_change(
        reader, mint, account, authority,
        allowlist=True, list_op=lists.remove_wallet, restrict=True, programs=programs,
    )


async def get_add_to_blocklist_instructions(
    reader: AccountReader,
    mint: Pubkey,
    account: AuthorityInput,
    authority: AuthorityInput,
    programs: ProgramConfig | None = None,
) -> list[Instruction]:
    return await _build_membership_change(
        reader, mint, account, authority,
        allowlist=False, list_op=lists.add_wallet, restrict=True, programs=programs,
    )


async def get_remove_from_blocklist_instructions(
    reader: AccountReader,
    mint: Pubkey,
    account: AuthorityInput,
    authority: AuthorityInput,
    programs: ProgramConfig | None = None,
) -> list[Instruction]:
    return await _build_membership_change(
        reader, mint, account, authority,
        allowlist=False, list_op=lists.remove_wallet, restrict=False, programs=programs,
    )


# ─── Transaction variants (fee payer = authority) ─────────────────


async def create_add_to_allowlist_transaction(
    reader: AccountReader,
    mint: Pubkey,
    account: AuthorityInput,
    authority: AuthorityInput,
    programs: ProgramConfig | None = None,
) -> UnsignedTransaction:
    ixs = await get_add_to_allowlist_instructions(reader, mint, account, authority, programs)
    return await build_unsigned_transaction(reader, as_address(authority), ixs)


async def create_remove_from_allowlist_transaction(
    reader: AccountReader,
    mint: Pubkey,
    account: AuthorityInput,
    authority: AuthorityInput,
    programs: ProgramConfig | None = None,
) -> UnsignedTransaction:
    ixs = await get_remove_from_allowlist_instructions(reader, mint, account, authority, programs)
    return await build_unsigned_transaction(reader, as_address(authority), ixs)


async def create_add_to_blocklist_transaction(
    reader: AccountReader,
    mint: Pubkey,
    account: AuthorityInput,
    authority: AuthorityInput,
    programs: ProgramConfig | None = None,
) -> UnsignedTransaction:
    ixs = await get_add_to_blocklist_instructions(reader, mint, account, authority, programs)
    return await build_unsigned_transaction(reader, as_address(authority), ixs)


async def create_remove_from_blocklist_transaction(
    reader: AccountReader,
    mint: Pubkey,
    account: AuthorityInput,
    authority: AuthorityInput,
    programs: ProgramConfig | None = None,
) -> UnsignedTransaction:
    ixs = await get_remove_from_blocklist_instructions(reader, mint, account, authority, programs)
    return await build_unsigned_transaction(reader, as_address(authority), ixs)
