"""Scaled-amount security token (splits, dividends via UI multiplier)."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.access_control.state import AclMode
from mint_composer.constants import ProgramConfig, default_programs
from mint_composer.issuance.mint_builder import MintBuilder
from mint_composer.rpc.client import AccountReader
from mint_composer.signers import AuthorityInput, as_address
from mint_composer.templates.gating_setup import TemplateResult, assemble_template
from mint_composer.transaction import UnsignedTransaction


async def get_scaled_security_instructions(
    reader: AccountReader,
    *,
    name: str,
    symbol: str,
    uri: str,
    decimals: int,
    mint: AuthorityInput,
    mint_authority: AuthorityInput,
    fee_payer: AuthorityInput,
    acl_mode: AclMode | str = AclMode.BLOCK,
    metadata_authority: Pubkey | None = None,
    pausable_authority: Pubkey | None = None,
    confidential_balances_authority: Pubkey | None = None,
    permanent_delegate_authority: Pubkey | None = None,
    scaled_ui_amount_authority: Pubkey | None = None,
    multiplier: float = 1.0,
    new_multiplier_effective_timestamp: int = 0,
    new_multiplier: float = 1.0,
    enable_gating: bool = False,
    freeze_authority: AuthorityInput | None = None,
    additional_metadata: Mapping[str, str] | Iterable[tuple[str, str]] = (),
    require_gating: bool = False,
    programs: ProgramConfig | None = None,
) -> TemplateResult:
    programs = programs or default_programs()
    authority = as_address(mint_authority)
    builder = (
        MintBuilder()
        .with_metadata(
            mint=mint,
            authority=metadata_authority or authority,
            name=name,
            symbol=symbol,
            uri=uri,
            additional_metadata=additional_metadata,
        )
        .with_pausable(pausable_authority or authority)
        .with_default_account_state(initialized=not enable_gating)
        .with_confidential_balances(confidential_balances_authority or authority)
        .with_permanent_delegate(permanent_delegate_authority or authority)
        .with_scaled_ui_amount(
            scaled_ui_amount_authority or authority,
            multiplier=multiplier,
            new_multiplier_effective_timestamp=new_multiplier_effective_timestamp,
            new_multiplier=new_multiplier,
        )
    )
    if freeze_authority is None and enable_gating:
        freeze_authority = programs.token_acl

    return await assemble_template(
        reader,
        builder,
        template="scaled-security",
        decimals=decimals,
        mint=mint,
        fee_payer=fee_payer,
        mint_authority=mint_authority,
        freeze_authority=freeze_authority,
        enable_gating=enable_gating,
        acl_mode=acl_mode,
        require_gating=require_gating,
        programs=programs,
    )


async def create_scaled_security_transaction(
    reader: AccountReader, **kwargs: Any
) -> UnsignedTransaction:
    result = await get_scaled_security_instructions(reader, **kwargs)
    return await result.to_transaction(reader)
