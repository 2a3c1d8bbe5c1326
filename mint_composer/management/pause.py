"""Pause / resume a mint through its Pausable extension."""

from __future__ import annotations

from loguru import logger
from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.errors import AlreadyPausedError, NotPausedError, PreconditionError
from mint_composer.extensions.catalog import PausableConfig
from mint_composer.inspection.inspector import fetch_mint_view
from mint_composer.inspection.models import MintAccountView
from mint_composer.programs import token_2022
from mint_composer.rpc.client import AccountReader
from mint_composer.signers import AuthorityInput, as_address
from mint_composer.transaction import UnsignedTransaction, build_unsigned_transaction


def _require_pausable(view: MintAccountView) -> PausableConfig:
    pausable = view.pausable
    if pausable is None:
        raise PreconditionError(f"Mint {view.address} has no Pausable extension")
    return pausable


async def get_token_pause_state(reader: AccountReader, mint: Pubkey) -> bool:
    """False for mints without the Pausable extension. Read errors propagate."""
    view = await fetch_mint_view(reader, mint)
    pausable = view.pausable
    return bool(pausable and pausable.paused)


async def get_pause_instructions(
    reader: AccountReader, mint: Pubkey, pause_authority: AuthorityInput
) -> list[Instruction]:
    view = await fetch_mint_view(reader, mint)
    if _require_pausable(view).paused:
        logger.warning(f"[PAUSE] {str(mint)[:12]} already paused")
        raise AlreadyPausedError(f"Mint {mint} is already paused")
    logger.info(f"[PAUSE] pause {str(mint)[:12]}")
    return [token_2022.pause(mint, as_address(pause_authority), view.program_id)]


async def get_resume_instructions(
    reader: AccountReader, mint: Pubkey, pause_authority: AuthorityInput
) -> list[Instruction]:
    view = await fetch_mint_view(reader, mint)
    if not _require_pausable(view).paused:
        logger.warning(f"[PAUSE] {str(mint)[:12]} is not paused")
        raise NotPausedError(f"Mint {mint} is not paused")
    logger.info(f"[PAUSE] resume {str(mint)[:12]}")
    return [token_2022.resume(mint, as_address(pause_authority), view.program_id)]


async def get_toggle_pause_instruction(
    reader: AccountReader, mint: Pubkey, pause_authority: AuthorityInput
) -> tuple[bool, Instruction]:
    """Returns (currently_paused, instruction flipping that state)."""
    view = await fetch_mint_view(reader, mint)
    currently_paused = _require_pausable(view).paused
    build = token_2022.resume if currently_paused else token_2022.pause
    return currently_paused, build(mint, as_address(pause_authority), view.program_id)


async def create_pause_transaction(
    reader: AccountReader,
    mint: Pubkey,
    pause_authority: AuthorityInput,
    fee_payer: AuthorityInput,
) -> UnsignedTransaction:
    ixs = await get_pause_instructions(reader, mint, pause_authority)
    return await build_unsigned_transaction(reader, as_address(fee_payer), ixs)


async def create_resume_transaction(
    reader: AccountReader,
    mint: Pubkey,
    pause_authority: AuthorityInput,
    fee_payer: AuthorityInput,
) -> UnsignedTransaction:
    ixs = await get_resume_instructions(reader, mint, pause_authority)
    return await build_unsigned_transaction(reader, as_address(fee_payer), ixs)
