"""Shared test fixtures: an in-memory account store standing in for RPC."""

import pytest
from solders.hash import Hash  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.access_control.extra_metas import (
    SEED_ACCOUNT_DATA,
    SEED_ACCOUNT_KEY,
    ExtraAccountMeta,
    Seed,
    encode_extra_account_metas,
)
from mint_composer.access_control.gating import (
    CAN_THAW_PERMISSIONLESS_DISCRIMINATOR,
    MintConfig,
    encode_mint_config,
    find_mint_config_pda,
    find_thaw_extra_metas_pda,
)
from mint_composer.access_control.lists import (
    ListConfig,
    ListMode,
    encode_list_config,
    find_list_config_pda,
)
from mint_composer.constants import SYSTEM_PROGRAM_ID, TOKEN_2022_PROGRAM_ID, ProgramConfig
from mint_composer.extensions.catalog import AccountState
from mint_composer.extensions.codec import encode_mint_account, encode_token_account
from mint_composer.rpc.models import EncodedAccount

LAMPORTS_PER_BYTE_YEAR = 3480
EXEMPTION_YEARS = 2
ACCOUNT_STORAGE_OVERHEAD = 128


class FakeAccountReader:
    """AccountReader over a dict; records every address read."""

    def __init__(self) -> None:
        self.accounts: dict[Pubkey, EncodedAccount] = {}
        self.reads: list[Pubkey] = []
        self.rent_sizes: list[int] = []
        self.blockhash = Hash.new_unique()

    async def get_account_info(self, address: Pubkey) -> EncodedAccount | None:
        self.reads.append(address)
        return self.accounts.get(address)

    async def get_latest_blockhash(self) -> Hash:
        return self.blockhash

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        self.rent_sizes.append(size)
        return (ACCOUNT_STORAGE_OVERHEAD + size) * LAMPORTS_PER_BYTE_YEAR * EXEMPTION_YEARS

    # ── seeding helpers ────────────────────────────────────────────

    def set_account(self, address: Pubkey, owner: Pubkey, data: bytes, lamports: int = 1_000_000) -> None:
        self.accounts[address] = EncodedAccount(address=address, owner=owner, data=data, lamports=lamports)

    def add_wallet(self, address: Pubkey) -> Pubkey:
        self.set_account(address, SYSTEM_PROGRAM_ID, b"")
        return address

    def add_mint(
        self,
        address: Pubkey,
        *,
        mint_authority: Pubkey | None,
        freeze_authority: Pubkey | None,
        decimals: int = 6,
        extensions=(),
        supply: int = 0,
        owner: Pubkey = TOKEN_2022_PROGRAM_ID,
    ) -> Pubkey:
        data = encode_mint_account(
            mint_authority=mint_authority,
            freeze_authority=freeze_authority,
            decimals=decimals,
            extensions=extensions,
            supply=supply,
        )
        self.set_account(address, owner, data)
        return address

    def add_token_account(
        self,
        address: Pubkey,
        *,
        mint: Pubkey,
        owner: Pubkey,
        frozen: bool = False,
        amount: int = 0,
    ) -> Pubkey:
        state = AccountState.FROZEN if frozen else AccountState.INITIALIZED
        data = encode_token_account(mint=mint, owner=owner, state=state, amount=amount)
        self.set_account(address, TOKEN_2022_PROGRAM_ID, data)
        return address

    def add_gating(
        self,
        mint: Pubkey,
        authority: Pubkey,
        programs: ProgramConfig,
        mode: ListMode = ListMode.ALLOW,
    ) -> Pubkey:
        """Mint config + list config + thaw extra metas, as gating setup leaves them."""
        config_address = find_mint_config_pda(mint, programs)
        config = MintConfig(
            bump=255,
            enable_permissionless_thaw=True,
            enable_permissionless_freeze=False,
            mint=mint,
            freeze_authority=authority,
            gating_program=programs.list_program,
        )
        self.set_account(config_address, programs.token_acl, encode_mint_config(config))

        list_config = find_list_config_pda(authority, mint, programs)
        listed = ListConfig(authority=authority, seed=mint, mode=mode, bump=254, wallets_count=0)
        self.set_account(list_config, programs.list_program, encode_list_config(listed))

        # can-thaw accounts: [authority, token_account, mint, owner, extra_metas, ...]
        metas = [
            ExtraAccountMeta.fixed(list_config),
            ExtraAccountMeta.pda(
                [
                    Seed(SEED_ACCOUNT_KEY, index=5),
                    Seed(SEED_ACCOUNT_DATA, index=1, data_index=32, length=32),
                ]
            ),
        ]
        self.set_account(
            find_thaw_extra_metas_pda(mint, programs.list_program),
            programs.list_program,
            encode_extra_account_metas(CAN_THAW_PERMISSIONLESS_DISCRIMINATOR, metas),
        )
        return list_config


@pytest.fixture
def reader() -> FakeAccountReader:
    return FakeAccountReader()


@pytest.fixture
def programs() -> ProgramConfig:
    return ProgramConfig(token_acl=Pubkey.new_unique(), list_program=Pubkey.new_unique())


@pytest.fixture
def authority() -> Keypair:
    return Keypair()
