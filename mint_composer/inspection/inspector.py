"""Token-2022 mint inspection — decode a mint into a flat, display-ready summary."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.access_control.state import AccessControlState, derive_access_control
from mint_composer.constants import TOKEN_2022_PROGRAM_ID, TOKEN_PROGRAM_ID, ProgramConfig
from mint_composer.errors import InvalidMintAccountError, MintNotFoundError, ValidationError
from mint_composer.extensions.catalog import ScaledUiAmountConfig
from mint_composer.extensions.codec import decode_mint_account
from mint_composer.inspection.models import (
    MintAccountView,
    ScaledUiAmountInfo,
    TokenAuthorities,
    TokenDashboardData,
    TokenMetadataSummary,
)
from mint_composer.inspection.patterns import detect_token_patterns
from mint_composer.rpc.client import AccountReader


async def fetch_mint_view(reader: AccountReader, mint: Pubkey) -> MintAccountView:
    account = await reader.get_account_info(mint)
    if account is None:
        raise MintNotFoundError(f"Mint account not found at address: {mint}")
    if account.owner == TOKEN_PROGRAM_ID:
        raise InvalidMintAccountError(f"Mint {mint} belongs to the legacy SPL Token program, not Token-2022")
    if account.owner != TOKEN_2022_PROGRAM_ID:
        raise InvalidMintAccountError(f"Invalid mint account {mint}. Program owner: {account.owner}")

    try:
        decoded = decode_mint_account(account.data)
    except (ValueError, ValidationError) as e:
        raise InvalidMintAccountError(f"Cannot decode mint {mint}: {e}") from e

    return MintAccountView(
        address=mint,
        program_id=account.owner,
        decimals=decoded.decimals,
        supply=decoded.supply,
        is_initialized=decoded.is_initialized,
        mint_authority=decoded.mint_authority,
        freeze_authority=decoded.freeze_authority,
        extensions=decoded.extensions,
    )


@dataclass(frozen=True)
class TokenInspection:
    view: MintAccountView
    authorities: TokenAuthorities
    metadata: TokenMetadataSummary | None
    is_pausable: bool
    is_paused: bool
    access_control: AccessControlState
    scaled_ui_amount: ScaledUiAmountInfo | None
    detected_patterns: tuple[str, ...]

    @property
    def address(self) -> Pubkey:
        return self.view.address

    @property
    def extensions(self) -> list[str]:
        return self.view.extension_names

    def to_dashboard_data(self) -> TokenDashboardData:
        auth = self.authorities
        return TokenDashboardData(
            name=self.metadata.name if self.metadata else "",
            symbol=self.metadata.symbol if self.metadata else "",
            address=str(self.address),
            decimals=self.view.decimals,
            supply=str(self.view.supply),
            uri=self.metadata.uri if self.metadata else None,
            detected_patterns=list(self.detected_patterns),
            acl_mode=self.access_control.mode.value,
            gating_active=self.access_control.gating_active,
            mint_authority=_str_or_none(auth.mint_authority),
            freeze_authority=_str_or_none(auth.freeze_authority),
            metadata_authority=_str_or_none(auth.metadata_authority),
            pausable_authority=_str_or_none(auth.pausable_authority),
            confidential_balances_authority=_str_or_none(auth.confidential_balances_authority),
            permanent_delegate_authority=_str_or_none(auth.permanent_delegate),
            scaled_ui_amount_authority=_str_or_none(auth.scaled_ui_amount_authority),
            extensions=self.extensions,
            is_paused=self.is_paused,
            multiplier=self.scaled_ui_amount.multiplier if self.scaled_ui_amount else None,
        )


def _str_or_none(key: Pubkey | None) -> str | None:
    return None if key is None else str(key)


def inspect_view(view: MintAccountView, programs: ProgramConfig | None = None) -> TokenInspection:
    """Pure part of inspection, usable on an already-fetched view."""
    token_metadata = view.token_metadata
    pausable = view.pausable

    scaled: ScaledUiAmountInfo | None = None
    for ext in view.extensions:
        if isinstance(ext, ScaledUiAmountConfig):
            scaled = ScaledUiAmountInfo(enabled=True, multiplier=ext.multiplier, authority=ext.authority)

    return TokenInspection(
        view=view,
        authorities=TokenAuthorities.from_view(view),
        metadata=TokenMetadataSummary.from_extension(token_metadata) if token_metadata else None,
        is_pausable=pausable is not None,
        is_paused=bool(pausable and pausable.paused),
        access_control=derive_access_control(view, programs),
        scaled_ui_amount=scaled,
        detected_patterns=detect_token_patterns(view.extension_names),
    )


async def inspect_token(
    reader: AccountReader, mint: Pubkey, programs: ProgramConfig | None = None
) -> TokenInspection:
    view = await fetch_mint_view(reader, mint)
    inspection = inspect_view(view, programs)
    logger.info(
        f"[INSPECT] {str(mint)[:12]}: patterns={list(inspection.detected_patterns)}, "
        f"extensions={inspection.extensions}, acl={inspection.access_control.mode.value}, "
        f"gating={inspection.access_control.gating_active}"
    )
    return inspection


async def get_token_extensions(reader: AccountReader, mint: Pubkey) -> list[str]:
    view = await fetch_mint_view(reader, mint)
    return view.extension_names


async def get_token_metadata(reader: AccountReader, mint: Pubkey) -> TokenMetadataSummary | None:
    view = await fetch_mint_view(reader, mint)
    ext = view.token_metadata
    return TokenMetadataSummary.from_extension(ext) if ext else None


async def get_token_dashboard_data(
    reader: AccountReader, mint: Pubkey, programs: ProgramConfig | None = None
) -> TokenDashboardData:
    inspection = await inspect_token(reader, mint, programs)
    return inspection.to_dashboard_data()
