"""Tests for mint inspection and the dashboard summary."""

import math
import struct

import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.access_control.gating import find_mint_config_pda
from mint_composer.access_control.state import AclMode
from mint_composer.constants import TOKEN_PROGRAM_ID
from mint_composer.errors import InvalidMintAccountError, MintNotFoundError
from mint_composer.extensions.catalog import (
    AccountState,
    ConfidentialTransferMint,
    DefaultAccountState,
    ExtensionKind,
    MetadataPointer,
    PausableConfig,
    PermanentDelegate,
    ScaledUiAmountConfig,
    TokenMetadata,
)
from mint_composer.inspection.inspector import (
    get_token_dashboard_data,
    get_token_extensions,
    get_token_metadata,
    inspect_token,
)
from mint_composer.issuance.mint_builder import MintBuilder


def _build_security_extensions(mint: Pubkey, auth: Pubkey, state: AccountState) -> list:
    return [
        MetadataPointer(auth, mint),
        PausableConfig(auth, paused=True),
        DefaultAccountState(state),
        ConfidentialTransferMint(auth),
        PermanentDelegate(auth),
        ScaledUiAmountConfig(auth, multiplier=1.5),
        TokenMetadata(
            update_authority=auth,
            mint=mint,
            name="Acme Share",
            symbol="ACME",
            uri="https://acme.example/meta.json",
            additional_metadata=(("isin", "US0000000001"),),
        ),
    ]


class TestInspectToken:
    @pytest.mark.asyncio
    async def test_scaled_security_mint(self, reader, programs) -> None:
        mint, auth = Pubkey.new_unique(), Pubkey.new_unique()
        reader.add_mint(
            mint,
            mint_authority=auth,
            freeze_authority=auth,
            decimals=2,
            supply=10_000,
            extensions=_build_security_extensions(mint, auth, AccountState.INITIALIZED),
        )

        inspection = await inspect_token(reader, mint, programs)

        assert inspection.detected_patterns == ("scaled-security", "restricted-transfer")
        assert inspection.is_pausable and inspection.is_paused
        assert inspection.access_control.mode == AclMode.BLOCK
        assert not inspection.access_control.gating_active
        assert inspection.metadata.additional_metadata == {"isin": "US0000000001"}
        assert inspection.authorities.permanent_delegate == auth
        assert inspection.authorities.update_authority == auth
        assert inspection.scaled_ui_amount.multiplier == 1.5

    @pytest.mark.asyncio
    async def test_gating_active_with_mint_config_freeze_authority(self, reader, programs) -> None:
        mint, auth = Pubkey.new_unique(), Pubkey.new_unique()
        reader.add_mint(
            mint,
            mint_authority=auth,
            freeze_authority=find_mint_config_pda(mint, programs),
            extensions=_build_security_extensions(mint, auth, AccountState.FROZEN),
        )

        inspection = await inspect_token(reader, mint, programs)

        assert inspection.access_control.mode == AclMode.ALLOW
        assert inspection.access_control.gating_active

    @pytest.mark.asyncio
    async def test_plain_mint(self, reader, programs) -> None:
        mint = Pubkey.new_unique()
        reader.add_mint(mint, mint_authority=None, freeze_authority=None, decimals=9)

        inspection = await inspect_token(reader, mint, programs)

        assert inspection.extensions == []
        assert inspection.detected_patterns == ("unknown",)
        assert inspection.metadata is None
        assert not inspection.is_pausable
        assert inspection.access_control.mode == AclMode.NONE

    @pytest.mark.asyncio
    async def test_missing_mint(self, reader, programs) -> None:
        with pytest.raises(MintNotFoundError):
            await inspect_token(reader, Pubkey.new_unique(), programs)

    @pytest.mark.asyncio
    async def test_legacy_token_program_rejected(self, reader, programs) -> None:
        mint = Pubkey.new_unique()
        reader.add_mint(mint, mint_authority=None, freeze_authority=None, owner=TOKEN_PROGRAM_ID)
        with pytest.raises(InvalidMintAccountError):
            await inspect_token(reader, mint, programs)

    @pytest.mark.asyncio
    async def test_garbage_data_rejected(self, reader, programs) -> None:
        mint = Pubkey.new_unique()
        reader.set_account(mint, programs.token_program, b"\x00" * 10)
        with pytest.raises(InvalidMintAccountError):
            await inspect_token(reader, mint, programs)


class TestConvenienceReads:
    @pytest.mark.asyncio
    async def test_extensions_and_metadata(self, reader) -> None:
        mint, auth = Pubkey.new_unique(), Pubkey.new_unique()
        reader.add_mint(
            mint,
            mint_authority=auth,
            freeze_authority=None,
            extensions=_build_security_extensions(mint, auth, AccountState.INITIALIZED),
        )

        assert (await get_token_extensions(reader, mint))[0] == "MetadataPointer"
        metadata = await get_token_metadata(reader, mint)
        assert metadata.symbol == "ACME"

    @pytest.mark.asyncio
    async def test_dashboard_data(self, reader, programs) -> None:
        mint, auth = Pubkey.new_unique(), Pubkey.new_unique()
        reader.add_mint(
            mint,
            mint_authority=auth,
            freeze_authority=None,
            supply=2**63,
            extensions=_build_security_extensions(mint, auth, AccountState.INITIALIZED),
        )

        data = await get_token_dashboard_data(reader, mint, programs)

        assert data.address == str(mint)
        assert data.supply == str(2**63)
        assert data.acl_mode == "blocklist"
        assert data.freeze_authority is None
        assert data.permanent_delegate_authority == str(auth)
        assert data.is_paused is True
        assert data.multiplier == 1.5
        assert data.model_dump()["detected_patterns"] == ["scaled-security", "restricted-transfer"]


def _build_every_extension(mint: Pubkey, auth: Pubkey) -> MintBuilder:
    return (
        MintBuilder()
        .with_metadata(
            mint=mint,
            authority=auth,
            name="Everything",
            symbol="ALL",
            uri="https://example.com/all.json",
            additional_metadata={"isin": "US0000000002"},
        )
        .with_permanent_delegate(auth)
        .with_pausable(auth)
        .with_default_account_state(initialized=False)
        .with_confidential_balances(auth)
        .with_scaled_ui_amount(auth, multiplier=2.0, new_multiplier_effective_timestamp=1_700_000_000)
        .with_transfer_fee(auth, fee_basis_points=25, maximum_fee=2**64 - 1)
        .with_interest_bearing(auth, rate=150)
        .with_non_transferable()
        .with_transfer_hook(auth, Pubkey.new_unique())
        .with_close_authority(auth)
    )


def _build_fee_and_hook(mint: Pubkey, auth: Pubkey) -> MintBuilder:
    return (
        MintBuilder()
        .with_transfer_fee(auth, fee_basis_points=100, maximum_fee=5_000)
        .with_transfer_hook(auth, Pubkey.new_unique())
    )


def _build_scaled_security(mint: Pubkey, auth: Pubkey) -> MintBuilder:
    return (
        MintBuilder()
        .with_metadata(mint=mint, authority=auth, name="Share", symbol="SHR", uri="")
        .with_scaled_ui_amount(auth, multiplier=1.25)
        .with_pausable(auth)
        .with_default_account_state(initialized=True)
    )


def _build_soulbound(mint: Pubkey, auth: Pubkey) -> MintBuilder:
    return MintBuilder().with_non_transferable().with_interest_bearing(auth, rate=0).with_close_authority(auth)


class TestBuilderRoundTrip:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "build",
        [
            _build_every_extension,
            _build_fee_and_hook,
            _build_scaled_security,
            _build_soulbound,
            lambda mint, auth: MintBuilder(),
        ],
        ids=["every-extension", "fee-and-hook", "scaled-security", "soulbound", "empty"],
    )
    async def test_inspected_kinds_match_composed_kinds(self, reader, programs, build) -> None:
        mint, auth = Pubkey.new_unique(), Pubkey.new_unique()
        builder = build(mint, auth)
        reader.add_mint(mint, mint_authority=auth, freeze_authority=auth, extensions=builder.extensions)

        inspection = await inspect_token(reader, mint, programs)

        assert set(inspection.extensions) == {e.label for e in builder.extensions}

    def test_every_extension_builder_covers_catalog(self) -> None:
        builder = _build_every_extension(Pubkey.new_unique(), Pubkey.new_unique())
        assert {e.kind for e in builder.extensions} == set(ExtensionKind)


class TestMalformedMintData:
    @pytest.mark.asyncio
    async def test_legacy_program_named_in_error(self, reader, programs) -> None:
        mint = Pubkey.new_unique()
        reader.add_mint(mint, mint_authority=None, freeze_authority=None, owner=TOKEN_PROGRAM_ID)
        with pytest.raises(InvalidMintAccountError, match="legacy SPL Token"):
            await inspect_token(reader, mint, programs)

    @pytest.mark.asyncio
    async def test_non_finite_multiplier_rejected(self, reader, programs) -> None:
        mint, auth = Pubkey.new_unique(), Pubkey.new_unique()
        reader.add_mint(
            mint,
            mint_authority=auth,
            freeze_authority=None,
            extensions=[ScaledUiAmountConfig(auth, multiplier=1.5)],
        )
        account = reader.accounts[mint]
        data = account.data.replace(struct.pack("<d", 1.5), struct.pack("<d", math.nan), 1)
        reader.set_account(mint, account.owner, data)

        with pytest.raises(InvalidMintAccountError, match="finite"):
            await inspect_token(reader, mint, programs)
