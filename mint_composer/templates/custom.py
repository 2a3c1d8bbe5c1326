"""Free-form composition: any catalog extension, toggled individually.

Metadata is on unless explicitly disabled. Every extension authority falls
back to the mint authority.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.access_control.state import AclMode
from mint_composer.constants import ProgramConfig
from mint_composer.issuance.mint_builder import MintBuilder
from mint_composer.rpc.client import AccountReader
from mint_composer.signers import AuthorityInput, as_address
from mint_composer.templates.gating_setup import TemplateResult, assemble_template
from mint_composer.transaction import UnsignedTransaction


@dataclass(frozen=True)
class CustomTokenOptions:
    enable_metadata: bool = True
    enable_pausable: bool = False
    enable_permanent_delegate: bool = False
    enable_default_account_state: bool = False
    enable_confidential_balances: bool = False
    enable_scaled_ui_amount: bool = False
    enable_transfer_fee: bool = False
    enable_interest_bearing: bool = False
    enable_non_transferable: bool = False
    enable_transfer_hook: bool = False
    enable_close_authority: bool = False
    enable_gating: bool = False

    acl_mode: AclMode | str = AclMode.BLOCK
    # None -> Frozen under gating, Initialized otherwise
    default_account_state_initialized: bool | None = None

    metadata_authority: Pubkey | None = None
    pausable_authority: Pubkey | None = None
    permanent_delegate_authority: Pubkey | None = None
    confidential_balances_authority: Pubkey | None = None
    scaled_ui_amount_authority: Pubkey | None = None
    transfer_fee_authority: Pubkey | None = None
    interest_rate_authority: Pubkey | None = None
    transfer_hook_authority: Pubkey | None = None
    close_authority: Pubkey | None = None
    freeze_authority: Pubkey | None = None

    additional_metadata: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    scaled_ui_amount_multiplier: float = 1.0
    scaled_ui_amount_new_multiplier: float = 1.0
    scaled_ui_amount_new_multiplier_effective_timestamp: int = 0
    transfer_fee_basis_points: int = 0
    transfer_fee_maximum: int = 0
    interest_rate: int = 0
    transfer_hook_program_id: Pubkey | None = None


def build_custom_mint(
    options: CustomTokenOptions,
    *,
    name: str,
    symbol: str,
    uri: str,
    mint: AuthorityInput,
    mint_authority: AuthorityInput,
) -> MintBuilder:
    authority = as_address(mint_authority)
    builder = MintBuilder()

    if options.enable_metadata:
        builder = builder.with_metadata(
            mint=mint,
            authority=options.metadata_authority or authority,
            name=name,
            symbol=symbol,
            uri=uri,
            additional_metadata=options.additional_metadata,
        )
    if options.enable_pausable:
        builder = builder.with_pausable(options.pausable_authority or authority)
    if options.enable_permanent_delegate:
        builder = builder.with_permanent_delegate(options.permanent_delegate_authority or authority)
    if options.enable_default_account_state or options.enable_gating:
        initialized = options.default_account_state_initialized
        if initialized is None:
            initialized = not options.enable_gating
        builder = builder.with_default_account_state(initialized)
    if options.enable_confidential_balances:
        builder = builder.with_confidential_balances(options.confidential_balances_authority or authority)
    if options.enable_scaled_ui_amount:
        builder = builder.with_scaled_ui_amount(
            options.scaled_ui_amount_authority or authority,
            multiplier=options.scaled_ui_amount_multiplier,
            new_multiplier_effective_timestamp=options.scaled_ui_amount_new_multiplier_effective_timestamp,
            new_multiplier=options.scaled_ui_amount_new_multiplier,
        )
    if options.enable_transfer_fee:
        builder = builder.with_transfer_fee(
            options.transfer_fee_authority or authority,
            fee_basis_points=options.transfer_fee_basis_points,
            maximum_fee=options.transfer_fee_maximum,
        )
    if options.enable_interest_bearing:
        builder = builder.with_interest_bearing(
            options.interest_rate_authority or authority, rate=options.interest_rate
        )
    if options.enable_non_transferable:
        builder = builder.with_non_transferable()
    if options.enable_transfer_hook:
        builder = builder.with_transfer_hook(
            options.transfer_hook_authority or authority, options.transfer_hook_program_id
        )
    if options.enable_close_authority:
        builder = builder.with_close_authority(options.close_authority or authority)
    return builder


async def get_custom_token_instructions(
    reader: AccountReader,
    *,
    name: str,
    symbol: str,
    uri: str,
    decimals: int,
    mint: AuthorityInput,
    mint_authority: AuthorityInput,
    fee_payer: AuthorityInput,
    options: CustomTokenOptions | None = None,
    require_gating: bool = False,
    programs: ProgramConfig | None = None,
) -> TemplateResult:
    options = options or CustomTokenOptions()
    builder = build_custom_mint(
        options, name=name, symbol=symbol, uri=uri, mint=mint, mint_authority=mint_authority
    )
    return await assemble_template(
        reader,
        builder,
        template="custom",
        decimals=decimals,
        mint=mint,
        fee_payer=fee_payer,
        mint_authority=mint_authority,
        freeze_authority=options.freeze_authority,
        enable_gating=options.enable_gating,
        acl_mode=options.acl_mode,
        require_gating=require_gating,
        programs=programs,
    )


async def create_custom_token_transaction(reader: AccountReader, **kwargs: Any) -> UnsignedTransaction:
    result = await get_custom_token_instructions(reader, **kwargs)
    return await result.to_transaction(reader)
