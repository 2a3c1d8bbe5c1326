"""Tests for authority rotation and revocation."""

import pytest
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.administration.authority import (
    get_remove_authority_instructions,
    get_remove_authority_transaction,
    get_update_authority_instructions,
    get_update_authority_transaction,
)
from mint_composer.errors import AuthorityMismatchError, ValidationError
from mint_composer.extensions.catalog import AuthorityType, PausableConfig, TokenMetadata
from mint_composer.issuance import metadata as metadata_ix
from mint_composer.programs import token_2022

MINT = Pubkey.new_unique()
CURRENT = Pubkey.new_unique()
NEW = Pubkey.new_unique()


class TestInstructions:
    def test_set_authority_rotation(self) -> None:
        (ix,) = get_update_authority_instructions(MINT, AuthorityType.PAUSE, CURRENT, NEW)
        assert bytes(ix.data) == bytes([token_2022.SET_AUTHORITY, 16, 1]) + bytes(NEW)
        assert ix.accounts[0].pubkey == MINT
        assert ix.accounts[1].pubkey == CURRENT and ix.accounts[1].is_signer

    def test_set_authority_revocation(self) -> None:
        (ix,) = get_remove_authority_instructions(MINT, AuthorityType.FREEZE_ACCOUNT, CURRENT)
        assert bytes(ix.data) == bytes([token_2022.SET_AUTHORITY, 1, 0])

    def test_metadata_rotation(self) -> None:
        (ix,) = get_update_authority_instructions(MINT, "Metadata", CURRENT, str(NEW))
        assert bytes(ix.data) == metadata_ix.UPDATE_AUTHORITY_DISCRIMINATOR + bytes(NEW)

    def test_metadata_revocation_is_zero_key(self) -> None:
        (ix,) = get_remove_authority_instructions(MINT, "Metadata", CURRENT)
        assert bytes(ix.data) == metadata_ix.UPDATE_AUTHORITY_DISCRIMINATOR + bytes(32)

    def test_int_role_accepted(self) -> None:
        (ix,) = get_remove_authority_instructions(MINT, 0, CURRENT)
        assert ix.data[1] == AuthorityType.MINT_TOKENS

    @pytest.mark.parametrize("role", ["Pause", 99])
    def test_unknown_role(self, role) -> None:
        with pytest.raises(ValidationError):
            get_remove_authority_instructions(MINT, role, CURRENT)


class TestTransactions:
    @pytest.mark.asyncio
    async def test_verified_rotation(self, reader) -> None:
        current = Keypair()
        mint = reader.add_mint(
            Pubkey.new_unique(),
            mint_authority=current.pubkey(),
            freeze_authority=None,
            extensions=[PausableConfig(current.pubkey())],
        )

        tx = await get_update_authority_transaction(
            reader, payer=current, mint=mint, role=AuthorityType.PAUSE, current_authority=current, new_authority=NEW
        )

        assert len(tx.instructions) == 1
        assert tx.required_signers == [current.pubkey()]

    @pytest.mark.asyncio
    async def test_mismatch_rejected(self, reader) -> None:
        mint = reader.add_mint(Pubkey.new_unique(), mint_authority=Pubkey.new_unique(), freeze_authority=None)
        with pytest.raises(AuthorityMismatchError):
            await get_remove_authority_transaction(
                reader, payer=CURRENT, mint=mint, role=AuthorityType.MINT_TOKENS, current_authority=CURRENT
            )

    @pytest.mark.asyncio
    async def test_metadata_role_verified_against_update_authority(self, reader) -> None:
        mint = Pubkey.new_unique()
        reader.add_mint(
            mint,
            mint_authority=None,
            freeze_authority=None,
            extensions=[TokenMetadata(update_authority=CURRENT, mint=mint, name="n", symbol="s", uri="u")],
        )

        tx = await get_remove_authority_transaction(
            reader, payer=CURRENT, mint=mint, role="Metadata", current_authority=CURRENT
        )

        assert bytes(tx.instructions[0].data[8:]) == bytes(32)

    @pytest.mark.asyncio
    async def test_unverified_skips_read(self, reader) -> None:
        tx = await get_remove_authority_transaction(
            reader, payer=CURRENT, mint=MINT, role=AuthorityType.PAUSE, current_authority=CURRENT, verify=False
        )
        assert reader.reads == []
        assert tx.fee_payer == CURRENT
