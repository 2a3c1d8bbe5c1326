"""Tests for access-control derivation and token-account resolution."""

import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.access_control.gating import find_mint_config_pda
from mint_composer.access_control.state import AclMode, derive_access_control, resolve_token_account
from mint_composer.constants import TOKEN_2022_PROGRAM_ID
from mint_composer.errors import TokenAccountMismatchError
from mint_composer.extensions.catalog import AccountState, DefaultAccountState
from mint_composer.inspection.models import MintAccountView
from mint_composer.programs.associated_token import get_associated_token_address


def _build_view(mint: Pubkey, freeze_authority: Pubkey | None, state: AccountState | None) -> MintAccountView:
    extensions = () if state is None else (DefaultAccountState(state),)
    return MintAccountView(
        address=mint,
        program_id=TOKEN_2022_PROGRAM_ID,
        decimals=6,
        supply=0,
        is_initialized=True,
        mint_authority=None,
        freeze_authority=freeze_authority,
        extensions=extensions,
    )


class TestDeriveAccessControl:
    def test_frozen_default_with_gating_authority(self, programs) -> None:
        mint = Pubkey.new_unique()
        state = derive_access_control(_build_view(mint, programs.token_acl, AccountState.FROZEN), programs)
        assert state.mode == AclMode.ALLOW
        assert state.gating_active

    def test_frozen_default_with_config_pda(self, programs) -> None:
        mint = Pubkey.new_unique()
        view = _build_view(mint, find_mint_config_pda(mint, programs), AccountState.FROZEN)
        assert derive_access_control(view, programs).gating_active

    def test_frozen_default_with_issuer_authority(self, programs) -> None:
        state = derive_access_control(_build_view(Pubkey.new_unique(), Pubkey.new_unique(), AccountState.FROZEN), programs)
        assert state.mode == AclMode.ALLOW
        assert not state.gating_active

    def test_initialized_default_never_gated(self, programs) -> None:
        state = derive_access_control(_build_view(Pubkey.new_unique(), programs.token_acl, AccountState.INITIALIZED), programs)
        assert state.mode == AclMode.BLOCK
        assert not state.gating_active

    def test_no_default_state(self, programs) -> None:
        state = derive_access_control(_build_view(Pubkey.new_unique(), programs.token_acl, None), programs)
        assert state.mode == AclMode.NONE
        assert not state.gating_active


class TestResolveTokenAccount:
    @pytest.mark.asyncio
    async def test_token_account_passthrough(self, reader) -> None:
        mint, owner, account = Pubkey.new_unique(), Pubkey.new_unique(), Pubkey.new_unique()
        reader.add_token_account(account, mint=mint, owner=owner, frozen=True)

        resolved = await resolve_token_account(reader, account, mint)

        assert resolved.token_account == account
        assert resolved.owner == owner
        assert resolved.is_initialized and resolved.is_frozen

    @pytest.mark.asyncio
    async def test_wallet_resolves_to_ata(self, reader) -> None:
        mint, wallet = Pubkey.new_unique(), Pubkey.new_unique()
        reader.add_wallet(wallet)
        ata = get_associated_token_address(wallet, mint)
        reader.add_token_account(ata, mint=mint, owner=wallet)

        resolved = await resolve_token_account(reader, wallet, mint)

        assert resolved.token_account == ata
        assert resolved.owner == wallet
        assert not resolved.is_frozen

    @pytest.mark.asyncio
    async def test_unfunded_wallet_without_ata(self, reader) -> None:
        mint, wallet = Pubkey.new_unique(), Pubkey.new_unique()

        resolved = await resolve_token_account(reader, wallet, mint)

        assert resolved.token_account == get_associated_token_address(wallet, mint)
        assert not resolved.is_initialized
        assert resolved.is_frozen

    @pytest.mark.asyncio
    async def test_account_for_other_mint(self, reader) -> None:
        account = Pubkey.new_unique()
        reader.add_token_account(account, mint=Pubkey.new_unique(), owner=Pubkey.new_unique())
        with pytest.raises(TokenAccountMismatchError):
            await resolve_token_account(reader, account, Pubkey.new_unique())

    @pytest.mark.asyncio
    async def test_program_owned_account_rejected(self, reader) -> None:
        account = Pubkey.new_unique()
        reader.set_account(account, Pubkey.new_unique(), b"\x01" * 40)
        with pytest.raises(TokenAccountMismatchError):
            await resolve_token_account(reader, account, Pubkey.new_unique())
