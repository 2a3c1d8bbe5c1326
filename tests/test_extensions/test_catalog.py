"""Tests for the extension catalog — descriptor validation and ordering."""

import math

import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.errors import ValidationError
from mint_composer.extensions.catalog import (
    DESCRIPTOR_TYPES,
    I64_MAX,
    I64_MIN,
    U64_MAX,
    AccountState,
    DefaultAccountState,
    ExtensionKind,
    InterestBearingConfig,
    OrderingClass,
    PausableConfig,
    ScaledUiAmountConfig,
    TokenMetadata,
    TransferFeeConfig,
    TransferHook,
    ensure_unique_kinds,
    ordering_class,
)

AUTH = Pubkey.new_unique()


class TestExtensionKind:
    def test_type_ids_match_token_2022(self) -> None:
        assert ExtensionKind.TRANSFER_FEE_CONFIG == 1
        assert ExtensionKind.DEFAULT_ACCOUNT_STATE == 6
        assert ExtensionKind.PERMANENT_DELEGATE == 12
        assert ExtensionKind.METADATA_POINTER == 18
        assert ExtensionKind.TOKEN_METADATA == 19
        assert ExtensionKind.SCALED_UI_AMOUNT_CONFIG == 25
        assert ExtensionKind.PAUSABLE_CONFIG == 26

    def test_label_round_trip(self) -> None:
        for kind in ExtensionKind:
            assert ExtensionKind.from_label(kind.label) is kind

    def test_unknown_label(self) -> None:
        with pytest.raises(ValueError):
            ExtensionKind.from_label("GroupPointer")

    def test_every_kind_has_one_descriptor(self) -> None:
        assert set(DESCRIPTOR_TYPES) == set(ExtensionKind)


class TestOrdering:
    def test_only_metadata_is_post_init(self) -> None:
        post = [k for k in ExtensionKind if ordering_class(k) == OrderingClass.POST_INIT]
        assert post == [ExtensionKind.TOKEN_METADATA]

    def test_pointer_is_pre_init(self) -> None:
        assert ordering_class(ExtensionKind.METADATA_POINTER) == OrderingClass.PRE_INIT


class TestValidation:
    @pytest.mark.parametrize("bps", [-1, 10_001])
    def test_fee_bps_out_of_range(self, bps: int) -> None:
        with pytest.raises(ValidationError):
            TransferFeeConfig(AUTH, AUTH, fee_basis_points=bps, maximum_fee=0)

    def test_fee_bps_bounds_accepted(self) -> None:
        TransferFeeConfig(AUTH, AUTH, fee_basis_points=0, maximum_fee=0)
        TransferFeeConfig(AUTH, AUTH, fee_basis_points=10_000, maximum_fee=5)

    def test_fee_must_be_integer(self) -> None:
        with pytest.raises(ValidationError):
            TransferFeeConfig(AUTH, AUTH, fee_basis_points=1.5, maximum_fee=0)  # type: ignore[arg-type]

    def test_negative_interest_rate(self) -> None:
        with pytest.raises(ValidationError):
            InterestBearingConfig(rate_authority=AUTH, rate=-5)

    def test_transfer_hook_requires_program(self) -> None:
        with pytest.raises(ValidationError):
            TransferHook(authority=AUTH, program_id=None)

    def test_default_state_rejects_uninitialized(self) -> None:
        with pytest.raises(ValidationError):
            DefaultAccountState(AccountState.UNINITIALIZED)

    def test_scaled_multiplier_positive(self) -> None:
        with pytest.raises(ValidationError):
            ScaledUiAmountConfig(authority=AUTH, multiplier=0)

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    @pytest.mark.parametrize("label", ["multiplier", "new_multiplier"])
    def test_scaled_multiplier_finite(self, label: str, value: float) -> None:
        with pytest.raises(ValidationError, match="finite"):
            ScaledUiAmountConfig(authority=AUTH, **{label: value})

    @pytest.mark.parametrize("label", ["maximum_fee", "withheld_amount"])
    @pytest.mark.parametrize("value", [-1, U64_MAX + 1])
    def test_fee_amounts_fit_u64(self, label: str, value: int) -> None:
        params = {"maximum_fee": 0, label: value}
        with pytest.raises(ValidationError, match=label):
            TransferFeeConfig(AUTH, AUTH, fee_basis_points=0, **params)

    def test_fee_amounts_u64_max_accepted(self) -> None:
        ext = TransferFeeConfig(AUTH, AUTH, fee_basis_points=0, maximum_fee=U64_MAX, withheld_amount=U64_MAX)
        assert ext.maximum_fee == U64_MAX

    @pytest.mark.parametrize("label", ["initialization_timestamp", "last_update_timestamp"])
    @pytest.mark.parametrize("value", [I64_MIN - 1, I64_MAX + 1])
    def test_interest_timestamps_fit_i64(self, label: str, value: int) -> None:
        with pytest.raises(ValidationError, match=label):
            InterestBearingConfig(rate_authority=AUTH, rate=5, **{label: value})

    def test_interest_average_rate_fits_i16(self) -> None:
        with pytest.raises(ValidationError, match="pre_update_average_rate"):
            InterestBearingConfig(rate_authority=AUTH, rate=5, pre_update_average_rate=2**15)

    @pytest.mark.parametrize("value", [-1, I64_MAX + 1])
    def test_scaled_timestamp_fits_i64(self, value: int) -> None:
        with pytest.raises(ValidationError, match="new_multiplier_effective_timestamp"):
            ScaledUiAmountConfig(authority=AUTH, new_multiplier_effective_timestamp=value)

    def test_metadata_duplicate_keys(self) -> None:
        with pytest.raises(ValidationError):
            TokenMetadata(
                update_authority=AUTH,
                mint=AUTH,
                name="A",
                symbol="A",
                uri="",
                additional_metadata=(("k", "1"), ("k", "2")),
            )

    def test_duplicate_kinds_rejected(self) -> None:
        with pytest.raises(ValidationError, match="PausableConfig"):
            ensure_unique_kinds((PausableConfig(AUTH), PausableConfig(AUTH)))

    def test_descriptor_fields(self) -> None:
        ext = PausableConfig(AUTH, paused=True)
        assert ext.label == "PausableConfig"
        assert ext.fields() == {"authority": AUTH, "paused": True}
