"""Program addresses, layout sizes and injectable program configuration."""

from __future__ import annotations

from dataclasses import dataclass

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from config.settings import settings

TOKEN_2022_PROGRAM_ID = Pubkey.from_string("TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb")
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string(
    "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
)
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")

# SPL Token mint layout: 82 bytes
# [0:36]   mintAuthorityOption (4) + mintAuthority (32)
# [36:44]  supply (u64)
# [44:45]  decimals (u8)
# [45:46]  isInitialized (bool)
# [46:82]  freezeAuthorityOption (4) + freezeAuthority (32)
MINT_SIZE = 82

# Token account layout (165 bytes), also the padding target for extended mints
TOKEN_ACCOUNT_SIZE = 165

# Multisig accounts are 355 bytes; an extended mint must never collide with it
MULTISIG_SIZE = 355

# TLV entry header: u16 type + u16 length
TLV_HEADER_SIZE = 4


@dataclass(frozen=True)
class ProgramConfig:
    """External gating programs a deployment talks to.

    token_acl: holds the mint freeze authority, offers permissionless thaw.
    list_program: allow/block list program plugged into token_acl as gating program.
    """

    token_acl: Pubkey
    list_program: Pubkey
    token_program: Pubkey = TOKEN_2022_PROGRAM_ID

    @classmethod
    def from_settings(cls) -> ProgramConfig:
        return cls(
            token_acl=Pubkey.from_string(settings.token_acl_program_id),
            list_program=Pubkey.from_string(settings.list_program_id),
        )


def default_programs() -> ProgramConfig:
    return ProgramConfig.from_settings()
