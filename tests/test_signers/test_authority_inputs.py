"""Tests for authority capability resolution."""

import pytest
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.errors import ValidationError
from mint_composer.signers import (
    AddressCapability,
    SignerCapability,
    as_address,
    as_capability,
    optional_address,
)


class TestAsCapability:
    def test_pubkey_is_address_only(self) -> None:
        key = Pubkey.new_unique()
        cap = as_capability(key)
        assert cap == AddressCapability(key)
        assert not cap.can_sign

    def test_base58_string(self) -> None:
        key = Pubkey.new_unique()
        assert as_address(str(key)) == key

    def test_invalid_string(self) -> None:
        with pytest.raises(ValidationError):
            as_capability("not-base58!")

    def test_keypair_signs(self) -> None:
        kp = Keypair()
        cap = as_capability(kp)
        assert isinstance(cap, SignerCapability)
        assert cap.can_sign
        assert cap.address == kp.pubkey()

    def test_capability_passes_through(self) -> None:
        cap = AddressCapability(Pubkey.new_unique())
        assert as_capability(cap) is cap

    def test_unsupported_type(self) -> None:
        with pytest.raises(ValidationError, match="int"):
            as_capability(42)

    def test_optional(self) -> None:
        assert optional_address(None) is None
        kp = Keypair()
        assert optional_address(kp) == kp.pubkey()
