"""Token-2022 instruction encoders.

Instruction data follows spl-token-2022 ``TokenInstruction``: one tag byte,
extension instructions add a sub-tag byte. ``COption<Pubkey>`` in instruction
data is a one-byte tag (0 = None, 1 = Some) followed by the key when present;
``OptionalNonZeroPubkey`` is 32 bytes with all-zero meaning None.
"""

from __future__ import annotations

import struct

from solders.instruction import AccountMeta, Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.constants import SYSTEM_PROGRAM_ID, TOKEN_2022_PROGRAM_ID
from mint_composer.extensions.catalog import (
    AuthorityType,
    ConfidentialTransferMint,
    DefaultAccountState,
    ExtensionDescriptor,
    ExtensionKind,
    InterestBearingConfig,
    MetadataPointer,
    MintCloseAuthority,
    PausableConfig,
    PermanentDelegate,
    ScaledUiAmountConfig,
    TransferFeeConfig,
    TransferHook,
)
from mint_composer.extensions.codec import key_bytes

# TokenInstruction tags
SET_AUTHORITY = 6
FREEZE_ACCOUNT = 10
THAW_ACCOUNT = 11
TRANSFER_CHECKED = 12
MINT_TO_CHECKED = 14
BURN_CHECKED = 15
INITIALIZE_MINT_2 = 20
INITIALIZE_MINT_CLOSE_AUTHORITY = 25
TRANSFER_FEE_EXTENSION = 26
CONFIDENTIAL_TRANSFER_EXTENSION = 27
DEFAULT_ACCOUNT_STATE_EXTENSION = 28
REALLOCATE = 29
INITIALIZE_NON_TRANSFERABLE_MINT = 32
INTEREST_BEARING_MINT_EXTENSION = 33
INITIALIZE_PERMANENT_DELEGATE = 35
TRANSFER_HOOK_EXTENSION = 36
METADATA_POINTER_EXTENSION = 39
SCALED_UI_AMOUNT_EXTENSION = 43
PAUSABLE_EXTENSION = 44

# Extension sub-instructions
INITIALIZE = 0
PAUSE = 1
RESUME = 2


def _coption(key: Pubkey | None) -> bytes:
    return b"\x00" if key is None else b"\x01" + bytes(key)


def _mint_only(mint: Pubkey, data: bytes, program_id: Pubkey) -> Instruction:
    return Instruction(program_id, data, [AccountMeta(mint, is_signer=False, is_writable=True)])


# ─── Mint initialization ──────────────────────────────────────────


def initialize_mint2(
    mint: Pubkey,
    decimals: int,
    mint_authority: Pubkey,
    freeze_authority: Pubkey | None,
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    data = bytes([INITIALIZE_MINT_2, decimals]) + bytes(mint_authority) + _coption(freeze_authority)
    return _mint_only(mint, data, program_id)


def _init_transfer_fee(ext: TransferFeeConfig) -> bytes:
    return (
        bytes([TRANSFER_FEE_EXTENSION, INITIALIZE])
        + _coption(ext.transfer_fee_config_authority)
        + _coption(ext.withdraw_withheld_authority)
        + struct.pack("<HQ", ext.fee_basis_points, ext.maximum_fee)
    )


def _init_close_authority(ext: MintCloseAuthority) -> bytes:
    return bytes([INITIALIZE_MINT_CLOSE_AUTHORITY]) + _coption(ext.close_authority)


def _init_confidential(ext: ConfidentialTransferMint) -> bytes:
    return (
        bytes([CONFIDENTIAL_TRANSFER_EXTENSION, INITIALIZE])
        + key_bytes(ext.authority)
        + bytes([1 if ext.auto_approve_new_accounts else 0])
        + (ext.auditor_elgamal_pubkey or bytes(32))
    )


def _init_default_state(ext: DefaultAccountState) -> bytes:
    return bytes([DEFAULT_ACCOUNT_STATE_EXTENSION, INITIALIZE, int(ext.state)])


def _init_interest(ext: InterestBearingConfig) -> bytes:
    return (
        bytes([INTEREST_BEARING_MINT_EXTENSION, INITIALIZE])
        + key_bytes(ext.rate_authority)
        + struct.pack("<h", ext.rate)
    )


def _init_permanent_delegate(ext: PermanentDelegate) -> bytes:
    return bytes([INITIALIZE_PERMANENT_DELEGATE]) + key_bytes(ext.delegate)


def _init_transfer_hook(ext: TransferHook) -> bytes:
    return (
        bytes([TRANSFER_HOOK_EXTENSION, INITIALIZE])
        + key_bytes(ext.authority)
        + key_bytes(ext.program_id)
    )


def _init_metadata_pointer(ext: MetadataPointer) -> bytes:
    return (
        bytes([METADATA_POINTER_EXTENSION, INITIALIZE])
        + key_bytes(ext.authority)
        + key_bytes(ext.metadata_address)
    )


def _init_scaled(ext: ScaledUiAmountConfig) -> bytes:
    return (
        bytes([SCALED_UI_AMOUNT_EXTENSION, INITIALIZE])
        + key_bytes(ext.authority)
        + struct.pack("<d", float(ext.multiplier))
    )


def _init_pausable(ext: PausableConfig) -> bytes:
    return bytes([PAUSABLE_EXTENSION, INITIALIZE]) + key_bytes(ext.authority)


_PRE_INIT_ENCODERS = {
    ExtensionKind.TRANSFER_FEE_CONFIG: _init_transfer_fee,
    ExtensionKind.MINT_CLOSE_AUTHORITY: _init_close_authority,
    ExtensionKind.CONFIDENTIAL_TRANSFER_MINT: _init_confidential,
    ExtensionKind.DEFAULT_ACCOUNT_STATE: _init_default_state,
    ExtensionKind.NON_TRANSFERABLE: lambda ext: bytes([INITIALIZE_NON_TRANSFERABLE_MINT]),
    ExtensionKind.INTEREST_BEARING_CONFIG: _init_interest,
    ExtensionKind.PERMANENT_DELEGATE: _init_permanent_delegate,
    ExtensionKind.TRANSFER_HOOK: _init_transfer_hook,
    ExtensionKind.METADATA_POINTER: _init_metadata_pointer,
    ExtensionKind.SCALED_UI_AMOUNT_CONFIG: _init_scaled,
    ExtensionKind.PAUSABLE_CONFIG: _init_pausable,
}


def pre_init_instruction(
    mint: Pubkey,
    descriptor: ExtensionDescriptor,
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    """Extension initializer that must run before InitializeMint2."""
    encoder = _PRE_INIT_ENCODERS.get(descriptor.kind)
    if encoder is None:
        raise ValueError(f"{descriptor.kind.label} has no pre-initialization instruction")
    return _mint_only(mint, encoder(descriptor), program_id)


# ─── Authority-gated mint operations ──────────────────────────────


def set_authority(
    account: Pubkey,
    authority_type: AuthorityType,
    current_authority: Pubkey,
    new_authority: Pubkey | None,
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    data = bytes([SET_AUTHORITY, int(authority_type)]) + _coption(new_authority)
    return Instruction(
        program_id,
        data,
        [
            AccountMeta(account, is_signer=False, is_writable=True),
            AccountMeta(current_authority, is_signer=True, is_writable=False),
        ],
    )


def _freeze_or_thaw(
    tag: int, account: Pubkey, mint: Pubkey, authority: Pubkey, program_id: Pubkey
) -> Instruction:
    return Instruction(
        program_id,
        bytes([tag]),
        [
            AccountMeta(account, is_signer=False, is_writable=True),
            AccountMeta(mint, is_signer=False, is_writable=False),
            AccountMeta(authority, is_signer=True, is_writable=False),
        ],
    )


def freeze_account(
    account: Pubkey, mint: Pubkey, authority: Pubkey, program_id: Pubkey = TOKEN_2022_PROGRAM_ID
) -> Instruction:
    return _freeze_or_thaw(FREEZE_ACCOUNT, account, mint, authority, program_id)


def thaw_account(
    account: Pubkey, mint: Pubkey, authority: Pubkey, program_id: Pubkey = TOKEN_2022_PROGRAM_ID
) -> Instruction:
    return _freeze_or_thaw(THAW_ACCOUNT, account, mint, authority, program_id)


def pause(mint: Pubkey, authority: Pubkey, program_id: Pubkey = TOKEN_2022_PROGRAM_ID) -> Instruction:
    return Instruction(
        program_id,
        bytes([PAUSABLE_EXTENSION, PAUSE]),
        [
            AccountMeta(mint, is_signer=False, is_writable=True),
            AccountMeta(authority, is_signer=True, is_writable=False),
        ],
    )


def resume(mint: Pubkey, authority: Pubkey, program_id: Pubkey = TOKEN_2022_PROGRAM_ID) -> Instruction:
    return Instruction(
        program_id,
        bytes([PAUSABLE_EXTENSION, RESUME]),
        [
            AccountMeta(mint, is_signer=False, is_writable=True),
            AccountMeta(authority, is_signer=True, is_writable=False),
        ],
    )


def mint_to_checked(
    mint: Pubkey,
    destination: Pubkey,
    authority: Pubkey,
    amount: int,
    decimals: int,
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    return Instruction(
        program_id,
        struct.pack("<BQB", MINT_TO_CHECKED, amount, decimals),
        [
            AccountMeta(mint, is_signer=False, is_writable=True),
            AccountMeta(destination, is_signer=False, is_writable=True),
            AccountMeta(authority, is_signer=True, is_writable=False),
        ],
    )


def transfer_checked(
    source: Pubkey,
    mint: Pubkey,
    destination: Pubkey,
    authority: Pubkey,
    amount: int,
    decimals: int,
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    return Instruction(
        program_id,
        struct.pack("<BQB", TRANSFER_CHECKED, amount, decimals),
        [
            AccountMeta(source, is_signer=False, is_writable=True),
            AccountMeta(mint, is_signer=False, is_writable=False),
            AccountMeta(destination, is_signer=False, is_writable=True),
            AccountMeta(authority, is_signer=True, is_writable=False),
        ],
    )


def burn_checked(
    account: Pubkey,
    mint: Pubkey,
    authority: Pubkey,
    amount: int,
    decimals: int,
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    return Instruction(
        program_id,
        struct.pack("<BQB", BURN_CHECKED, amount, decimals),
        [
            AccountMeta(account, is_signer=False, is_writable=True),
            AccountMeta(mint, is_signer=False, is_writable=True),
            AccountMeta(authority, is_signer=True, is_writable=False),
        ],
    )


def reallocate(
    account: Pubkey,
    payer: Pubkey,
    owner: Pubkey,
    extension_types: list[int],
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    """Grow a token account for account-side extensions."""
    data = bytes([REALLOCATE]) + b"".join(struct.pack("<H", int(k)) for k in extension_types)
    return Instruction(
        program_id,
        data,
        [
            AccountMeta(account, is_signer=False, is_writable=True),
            AccountMeta(payer, is_signer=True, is_writable=True),
            AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(owner, is_signer=True, is_writable=False),
        ],
    )