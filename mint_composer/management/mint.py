"""Mint new supply to a wallet or token account."""

from __future__ import annotations

import asyncio

from loguru import logger
from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.access_control import gating
from mint_composer.access_control.state import (
    ResolvedTokenAccount,
    derive_access_control,
    resolve_token_account,
)
from mint_composer.constants import ProgramConfig, default_programs
from mint_composer.inspection.inspector import fetch_mint_view
from mint_composer.inspection.models import MintAccountView
from mint_composer.management.amounts import Amount, decimal_amount_to_raw
from mint_composer.programs import associated_token, token_2022
from mint_composer.rpc.client import AccountReader
from mint_composer.signers import AuthorityInput, as_address
from mint_composer.transaction import UnsignedTransaction, build_unsigned_transaction


async def prepare_destination(
    reader: AccountReader,
    view: MintAccountView,
    destination: ResolvedTokenAccount,
    fee_payer: Pubkey,
    programs: ProgramConfig,
) -> list[Instruction]:
    """Create the destination ATA if needed and thaw it when gating allows.

    Shared by minting and force transfers: under gating a fresh account starts
    frozen, so the permissionless thaw follows the create in the same transaction.
    """
    instructions: list[Instruction] = []
    if not destination.is_initialized:
        instructions.append(
            associated_token.create_associated_token_account_idempotent(
                fee_payer, destination.owner, view.address, view.program_id
            )
        )

    if destination.is_frozen and derive_access_control(view, programs).gating_active:
        instructions.extend(
            await gating.get_thaw_permissionless_instructions(
                reader,
                authority=fee_payer,
                mint=view.address,
                token_account=destination.token_account,
                token_account_owner=destination.owner,
                programs=programs,
            )
        )
    return instructions


async def get_mint_to_instructions(
    reader: AccountReader,
    *,
    mint: Pubkey,
    recipient: AuthorityInput,
    amount: Amount,
    mint_authority: AuthorityInput,
    fee_payer: AuthorityInput,
    programs: ProgramConfig | None = None,
) -> list[Instruction]:
    programs = programs or default_programs()
    payer = as_address(fee_payer)
    view, destination = await asyncio.gather(
        fetch_mint_view(reader, mint),
        resolve_token_account(reader, as_address(recipient), mint, programs.token_program),
    )
    raw_amount = decimal_amount_to_raw(amount, view.decimals)

    instructions = await prepare_destination(reader, view, destination, payer, programs)
    instructions.append(
        token_2022.mint_to_checked(
            mint,
            destination.token_account,
            as_address(mint_authority),
            raw_amount,
            view.decimals,
            view.program_id,
        )
    )
    logger.info(
        f"[MINT] mint_to {str(destination.token_account)[:12]}: raw={raw_amount}, "
        f"{len(instructions)} instructions"
    )
    return instructions


async def create_mint_to_transaction(
    reader: AccountReader,
    *,
    mint: Pubkey,
    recipient: AuthorityInput,
    amount: Amount,
    mint_authority: AuthorityInput,
    fee_payer: AuthorityInput,
    programs: ProgramConfig | None = None,
) -> UnsignedTransaction:
    ixs = await get_mint_to_instructions(
        reader,
        mint=mint,
        recipient=recipient,
        amount=amount,
        mint_authority=mint_authority,
        fee_payer=fee_payer,
        programs=programs,
    )
    return await build_unsigned_transaction(reader, as_address(fee_payer), ixs)
