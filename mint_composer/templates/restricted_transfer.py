"""Restricted-transfer token (regulated stable value).

Closed-loop extension set plus confidential balances. Gated mints default to a
block-list; pass ``acl_mode="allowlist"`` for KYC-first issuance.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.access_control.state import AclMode
from mint_composer.constants import ProgramConfig
from mint_composer.issuance.mint_builder import MintBuilder
from mint_composer.rpc.client import AccountReader
from mint_composer.signers import AuthorityInput, as_address
from mint_composer.templates.gating_setup import TemplateResult, assemble_template
from mint_composer.transaction import UnsignedTransaction


async def get_restricted_transfer_instructions(
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
    enable_gating: bool = False,
    freeze_authority: AuthorityInput | None = None,
    additional_metadata: Mapping[str, str] | Iterable[tuple[str, str]] = (),
    require_gating: bool = False,
    programs: ProgramConfig | None = None,
) -> TemplateResult:
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
    )
    return await assemble_template(
        reader,
        builder,
        template="restricted-transfer",
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


async def create_restricted_transfer_transaction(
    reader: AccountReader, **kwargs: Any
) -> UnsignedTransaction:
    result = await get_restricted_transfer_instructions(reader, **kwargs)
    return await result.to_transaction(reader)
