"""Permanent-delegate transfers and burns (seizure / recovery flows)."""

from __future__ import annotations

import asyncio

from loguru import logger
from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.access_control.state import ResolvedTokenAccount, resolve_token_account
from mint_composer.constants import ProgramConfig, default_programs
from mint_composer.errors import AccountNotFoundError, AuthorityMismatchError
from mint_composer.inspection.inspector import fetch_mint_view
from mint_composer.inspection.models import MintAccountView
from mint_composer.management.amounts import Amount, decimal_amount_to_raw
from mint_composer.management.mint import prepare_destination
from mint_composer.programs import token_2022
from mint_composer.rpc.client import AccountReader
from mint_composer.signers import AuthorityInput, as_address
from mint_composer.transaction import UnsignedTransaction, build_unsigned_transaction


def validate_permanent_delegate(view: MintAccountView, delegate: Pubkey) -> None:
    current = view.permanent_delegate
    if current is None:
        raise AuthorityMismatchError(f"Mint {view.address} has no permanent delegate")
    if current != delegate:
        logger.warning(f"[MINT] {str(delegate)[:12]} is not the permanent delegate of {str(view.address)[:12]}")
        raise AuthorityMismatchError(
            f"{delegate} is not the permanent delegate of mint {view.address} (delegate is {current})"
        )


def _require_source(source: ResolvedTokenAccount, mint: Pubkey) -> None:
    if not source.is_initialized:
        raise AccountNotFoundError(f"No token account for mint {mint} at {source.token_account}")


async def get_force_transfer_instructions(
    reader: AccountReader,
    *,
    mint: Pubkey,
    from_account: AuthorityInput,
    to_account: AuthorityInput,
    amount: Amount,
    permanent_delegate: AuthorityInput,
    fee_payer: AuthorityInput,
    programs: ProgramConfig | None = None,
) -> list[Instruction]:
    programs = programs or default_programs()
    delegate = as_address(permanent_delegate)
    view, source, destination = await asyncio.gather(
        fetch_mint_view(reader, mint),
        resolve_token_account(reader, as_address(from_account), mint, programs.token_program),
        resolve_token_account(reader, as_address(to_account), mint, programs.token_program),
    )
    validate_permanent_delegate(view, delegate)
    _require_source(source, mint)
    raw_amount = decimal_amount_to_raw(amount, view.decimals)

    instructions = await prepare_destination(reader, view, destination, as_address(fee_payer), programs)
    instructions.append(
        token_2022.transfer_checked(
            source.token_account,
            mint,
            destination.token_account,
            delegate,
            raw_amount,
            view.decimals,
            view.program_id,
        )
    )
    logger.info(
        f"[MINT] force transfer {str(source.token_account)[:12]} -> "
        f"{str(destination.token_account)[:12]}: raw={raw_amount}"
    )
    return instructions


async def get_force_burn_instructions(
    reader: AccountReader,
    *,
    mint: Pubkey,
    from_account: AuthorityInput,
    amount: Amount,
    permanent_delegate: AuthorityInput,
    programs: ProgramConfig | None = None,
) -> list[Instruction]:
    programs = programs or default_programs()
    delegate = as_address(permanent_delegate)
    view, source = await asyncio.gather(
        fetch_mint_view(reader, mint),
        resolve_token_account(reader, as_address(from_account), mint, programs.token_program),
    )
    validate_permanent_delegate(view, delegate)
    _require_source(source, mint)
    raw_amount = decimal_amount_to_raw(amount, view.decimals)

    logger.info(f"[MINT] force burn {str(source.token_account)[:12]}: raw={raw_amount}")
    return [
        token_2022.burn_checked(
            source.token_account, mint, delegate, raw_amount, view.decimals, view.program_id
        )
    ]


async def create_force_transfer_transaction(
    reader: AccountReader,
    *,
    mint: Pubkey,
    from_account: AuthorityInput,
    to_account: AuthorityInput,
    amount: Amount,
    permanent_delegate: AuthorityInput,
    fee_payer: AuthorityInput,
    programs: ProgramConfig | None = None,
) -> UnsignedTransaction:
    ixs = await get_force_transfer_instructions(
        reader,
        mint=mint,
        from_account=from_account,
        to_account=to_account,
        amount=amount,
        permanent_delegate=permanent_delegate,
        fee_payer=fee_payer,
        programs=programs,
    )
    return await build_unsigned_transaction(reader, as_address(fee_payer), ixs)


async def create_force_burn_transaction(
    reader: AccountReader,
    *,
    mint: Pubkey,
    from_account: AuthorityInput,
    amount: Amount,
    permanent_delegate: AuthorityInput,
    fee_payer: AuthorityInput,
    programs: ProgramConfig | None = None,
) -> UnsignedTransaction:
    ixs = await get_force_burn_instructions(
        reader,
        mint=mint,
        from_account=from_account,
        amount=amount,
        permanent_delegate=permanent_delegate,
        programs=programs,
    )
    return await build_unsigned_transaction(reader, as_address(fee_payer), ixs)
