"""Read-only projections of a decoded mint."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.extensions.catalog import (
    ConfidentialTransferMint,
    DecodedExtension,
    DefaultAccountState,
    ExtensionKind,
    InterestBearingConfig,
    MetadataPointer,
    MintCloseAuthority,
    PausableConfig,
    PermanentDelegate,
    ScaledUiAmountConfig,
    TokenMetadata,
    TransferFeeConfig,
    TransferHook,
    UnknownExtension,
)


@dataclass(frozen=True)
class MintAccountView:
    address: Pubkey
    program_id: Pubkey
    decimals: int
    supply: int
    is_initialized: bool
    mint_authority: Pubkey | None
    freeze_authority: Pubkey | None
    extensions: tuple[DecodedExtension, ...] = field(default_factory=tuple)

    @property
    def extension_names(self) -> list[str]:
        return [ext.label for ext in self.extensions]

    def get_extension(self, kind: ExtensionKind) -> DecodedExtension | None:
        for ext in self.extensions:
            if not isinstance(ext, UnknownExtension) and ext.kind == kind:
                return ext
        return None

    @property
    def token_metadata(self) -> TokenMetadata | None:
        ext = self.get_extension(ExtensionKind.TOKEN_METADATA)
        return ext if isinstance(ext, TokenMetadata) else None

    @property
    def default_account_state(self) -> DefaultAccountState | None:
        ext = self.get_extension(ExtensionKind.DEFAULT_ACCOUNT_STATE)
        return ext if isinstance(ext, DefaultAccountState) else None

    @property
    def pausable(self) -> PausableConfig | None:
        ext = self.get_extension(ExtensionKind.PAUSABLE_CONFIG)
        return ext if isinstance(ext, PausableConfig) else None

    @property
    def permanent_delegate(self) -> Pubkey | None:
        ext = self.get_extension(ExtensionKind.PERMANENT_DELEGATE)
        return ext.delegate if isinstance(ext, PermanentDelegate) else None


@dataclass(frozen=True)
class TokenAuthorities:
    """Flat lookup of every authority, whichever extension holds it."""

    mint_authority: Pubkey | None = None
    freeze_authority: Pubkey | None = None
    metadata_authority: Pubkey | None = None
    metadata_pointer_authority: Pubkey | None = None
    permanent_delegate: Pubkey | None = None
    pausable_authority: Pubkey | None = None
    confidential_balances_authority: Pubkey | None = None
    scaled_ui_amount_authority: Pubkey | None = None
    transfer_fee_config_authority: Pubkey | None = None
    withdraw_withheld_authority: Pubkey | None = None
    interest_rate_authority: Pubkey | None = None
    transfer_hook_authority: Pubkey | None = None
    close_authority: Pubkey | None = None

    @property
    def update_authority(self) -> Pubkey | None:
        return self.metadata_authority

    @classmethod
    def from_view(cls, view: MintAccountView) -> TokenAuthorities:
        found: dict[str, Pubkey | None] = {}
        for ext in view.extensions:
            if isinstance(ext, TokenMetadata):
                found["metadata_authority"] = ext.update_authority
            elif isinstance(ext, MetadataPointer):
                found["metadata_pointer_authority"] = ext.authority
            elif isinstance(ext, PermanentDelegate):
                found["permanent_delegate"] = ext.delegate
            elif isinstance(ext, PausableConfig):
                found["pausable_authority"] = ext.authority
            elif isinstance(ext, ConfidentialTransferMint):
                found["confidential_balances_authority"] = ext.authority
            elif isinstance(ext, ScaledUiAmountConfig):
                found["scaled_ui_amount_authority"] = ext.authority
            elif isinstance(ext, TransferFeeConfig):
                found["transfer_fee_config_authority"] = ext.transfer_fee_config_authority
                found["withdraw_withheld_authority"] = ext.withdraw_withheld_authority
            elif isinstance(ext, InterestBearingConfig):
                found["interest_rate_authority"] = ext.rate_authority
            elif isinstance(ext, TransferHook):
                found["transfer_hook_authority"] = ext.authority
            elif isinstance(ext, MintCloseAuthority):
                found["close_authority"] = ext.close_authority
        return cls(
            mint_authority=view.mint_authority,
            freeze_authority=view.freeze_authority,
            **found,
        )


@dataclass(frozen=True)
class TokenMetadataSummary:
    name: str
    symbol: str
    uri: str
    update_authority: Pubkey | None
    additional_metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_extension(cls, ext: TokenMetadata) -> TokenMetadataSummary:
        return cls(
            name=ext.name,
            symbol=ext.symbol,
            uri=ext.uri,
            update_authority=ext.update_authority,
            additional_metadata=dict(ext.additional_metadata),
        )


@dataclass(frozen=True)
class ScaledUiAmountInfo:
    enabled: bool
    multiplier: float
    authority: Pubkey | None


class TokenDashboardData(BaseModel):
    """Display summary with every address rendered as a string."""

    name: str = ""
    symbol: str = ""
    address: str
    decimals: int
    supply: str
    uri: str | None = None
    detected_patterns: list[str] = []

    acl_mode: str = "none"
    gating_active: bool = False

    mint_authority: str | None = None
    freeze_authority: str | None = None
    metadata_authority: str | None = None
    pausable_authority: str | None = None
    confidential_balances_authority: str | None = None
    permanent_delegate_authority: str | None = None
    scaled_ui_amount_authority: str | None = None

    extensions: list[str] = []
    is_paused: bool = False
    multiplier: float | None = None
