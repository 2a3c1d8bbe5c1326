"""Binary layouts for Token-2022 mints, token accounts and mint extensions.

Extended mint layout:
  [0:82]     base mint (see constants.MINT_SIZE)
  [82:165]   zero padding up to the token-account length
  [165]      AccountType (1 = Mint, 2 = Account)
  [166:]     TLV entries: u16 type + u16 length + data, zero type terminates

Pubkeys inside extensions are ``OptionalNonZeroPubkey``: 32 bytes, all-zero
meaning "none". Base-mint authorities use ``COption<Pubkey>`` (u32 tag + 32 bytes).
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Callable, Iterable

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.constants import (
    MINT_SIZE,
    MULTISIG_SIZE,
    TLV_HEADER_SIZE,
    TOKEN_ACCOUNT_SIZE,
)
from mint_composer.errors import ValidationError
from mint_composer.extensions.catalog import (
    AccountState,
    ConfidentialTransferMint,
    DecodedExtension,
    DefaultAccountState,
    ExtensionDescriptor,
    ExtensionKind,
    InterestBearingConfig,
    MetadataPointer,
    MintCloseAuthority,
    NonTransferable,
    PausableConfig,
    PermanentDelegate,
    ScaledUiAmountConfig,
    TokenMetadata,
    TransferFeeConfig,
    TransferHook,
    UnknownExtension,
)

ACCOUNT_TYPE_MINT = 1
ACCOUNT_TYPE_ACCOUNT = 2

_ZERO_KEY = bytes(32)

# Fixed TLV payload sizes; TokenMetadata is variable-length
FIXED_DATA_SIZES: dict[ExtensionKind, int] = {
    ExtensionKind.TRANSFER_FEE_CONFIG: 108,
    ExtensionKind.MINT_CLOSE_AUTHORITY: 32,
    ExtensionKind.CONFIDENTIAL_TRANSFER_MINT: 65,
    ExtensionKind.DEFAULT_ACCOUNT_STATE: 1,
    ExtensionKind.NON_TRANSFERABLE: 0,
    ExtensionKind.INTEREST_BEARING_CONFIG: 52,
    ExtensionKind.PERMANENT_DELEGATE: 32,
    ExtensionKind.TRANSFER_HOOK: 64,
    ExtensionKind.METADATA_POINTER: 64,
    ExtensionKind.SCALED_UI_AMOUNT_CONFIG: 56,
    ExtensionKind.PAUSABLE_CONFIG: 33,
}


# ─── Primitive helpers ────────────────────────────────────────────


def key_bytes(key: Pubkey | None) -> bytes:
    return _ZERO_KEY if key is None else bytes(key)


def optional_key(raw: bytes) -> Pubkey | None:
    return None if raw == _ZERO_KEY else Pubkey.from_bytes(raw)


def encode_string(value: str) -> bytes:
    raw = value.encode("utf-8")
    return struct.pack("<I", len(raw)) + raw


def _read_string(data: bytes, offset: int) -> tuple[str, int]:
    (length,) = struct.unpack_from("<I", data, offset)
    start = offset + 4
    end = start + length
    if end > len(data):
        raise ValueError("String runs past end of buffer")
    return data[start:end].decode("utf-8"), end


def _coption_key(key: Pubkey | None) -> bytes:
    if key is None:
        return struct.pack("<I", 0) + _ZERO_KEY
    return struct.pack("<I", 1) + bytes(key)


def _read_coption_key(data: bytes, offset: int) -> Pubkey | None:
    (tag,) = struct.unpack_from("<I", data, offset)
    if tag != 1:
        return None
    return Pubkey.from_bytes(data[offset + 4:offset + 36])


# ─── Sizes ────────────────────────────────────────────────────────


def metadata_data_size(metadata: TokenMetadata) -> int:
    size = 32 + 32
    size += len(encode_string(metadata.name))
    size += len(encode_string(metadata.symbol))
    size += len(encode_string(metadata.uri))
    size += 4
    for key, value in metadata.additional_metadata:
        size += len(encode_string(key)) + len(encode_string(value))
    return size


def extension_data_size(descriptor: ExtensionDescriptor) -> int:
    if isinstance(descriptor, TokenMetadata):
        return metadata_data_size(descriptor)
    return FIXED_DATA_SIZES[descriptor.kind]


def get_mint_size(descriptors: Iterable[ExtensionDescriptor] = ()) -> int:
    """Account length for a mint carrying ``descriptors`` (order independent)."""
    entries = [TLV_HEADER_SIZE + extension_data_size(d) for d in descriptors]
    if not entries:
        return MINT_SIZE
    size = TOKEN_ACCOUNT_SIZE + 1 + sum(entries)
    if size == MULTISIG_SIZE:
        # Never allocate a length that could be mistaken for a multisig
        size += 2
    return size


# ─── Extension payload encoders ───────────────────────────────────


def _encode_transfer_fee(ext: TransferFeeConfig) -> bytes:
    # older and newer TransferFee are identical at initialization (epoch 0)
    fee = struct.pack("<QQH", 0, ext.maximum_fee, ext.fee_basis_points)
    return (
        key_bytes(ext.transfer_fee_config_authority)
        + key_bytes(ext.withdraw_withheld_authority)
        + struct.pack("<Q", ext.withheld_amount)
        + fee
        + fee
    )


def _encode_confidential(ext: ConfidentialTransferMint) -> bytes:
    return (
        key_bytes(ext.authority)
        + bytes([1 if ext.auto_approve_new_accounts else 0])
        + (ext.auditor_elgamal_pubkey or _ZERO_KEY)
    )


def _encode_interest(ext: InterestBearingConfig) -> bytes:
    return key_bytes(ext.rate_authority) + struct.pack(
        "<qhqh",
        ext.initialization_timestamp,
        ext.pre_update_average_rate,
        ext.last_update_timestamp,
        ext.rate,
    )


def _encode_metadata(ext: TokenMetadata) -> bytes:
    out = bytearray()
    out += key_bytes(ext.update_authority)
    out += bytes(ext.mint)
    out += encode_string(ext.name)
    out += encode_string(ext.symbol)
    out += encode_string(ext.uri)
    out += struct.pack("<I", len(ext.additional_metadata))
    for key, value in ext.additional_metadata:
        out += encode_string(key) + encode_string(value)
    return bytes(out)


def _encode_scaled(ext: ScaledUiAmountConfig) -> bytes:
    return key_bytes(ext.authority) + struct.pack(
        "<dqd",
        float(ext.multiplier),
        ext.new_multiplier_effective_timestamp,
        float(ext.new_multiplier),
    )


_ENCODERS: dict[ExtensionKind, Callable[..., bytes]] = {
    ExtensionKind.TRANSFER_FEE_CONFIG: _encode_transfer_fee,
    ExtensionKind.MINT_CLOSE_AUTHORITY: lambda e: key_bytes(e.close_authority),
    ExtensionKind.CONFIDENTIAL_TRANSFER_MINT: _encode_confidential,
    ExtensionKind.DEFAULT_ACCOUNT_STATE: lambda e: bytes([int(e.state)]),
    ExtensionKind.NON_TRANSFERABLE: lambda e: b"",
    ExtensionKind.INTEREST_BEARING_CONFIG: _encode_interest,
    ExtensionKind.PERMANENT_DELEGATE: lambda e: key_bytes(e.delegate),
    ExtensionKind.TRANSFER_HOOK: lambda e: key_bytes(e.authority) + key_bytes(e.program_id),
    ExtensionKind.METADATA_POINTER: lambda e: key_bytes(e.authority) + key_bytes(e.metadata_address),
    ExtensionKind.TOKEN_METADATA: _encode_metadata,
    ExtensionKind.SCALED_UI_AMOUNT_CONFIG: _encode_scaled,
    ExtensionKind.PAUSABLE_CONFIG: lambda e: key_bytes(e.authority) + bytes([1 if e.paused else 0]),
}


def encode_extension(descriptor: ExtensionDescriptor) -> bytes:
    """TLV entry (header + payload) for one extension."""
    payload = _ENCODERS[descriptor.kind](descriptor)
    return struct.pack("<HH", int(descriptor.kind), len(payload)) + payload


# ─── Extension payload decoders ───────────────────────────────────


def _decode_transfer_fee(data: bytes) -> TransferFeeConfig:
    (withheld,) = struct.unpack_from("<Q", data, 64)
    # newer_transfer_fee sits after withheld amount + older fee (18 bytes)
    _epoch, maximum_fee, bps = struct.unpack_from("<QQH", data, 90)
    return TransferFeeConfig(
        transfer_fee_config_authority=optional_key(data[0:32]),
        withdraw_withheld_authority=optional_key(data[32:64]),
        fee_basis_points=bps,
        maximum_fee=maximum_fee,
        withheld_amount=withheld,
    )


def _decode_confidential(data: bytes) -> ConfidentialTransferMint:
    auditor = data[33:65]
    return ConfidentialTransferMint(
        authority=optional_key(data[0:32]),
        auto_approve_new_accounts=data[32] != 0,
        auditor_elgamal_pubkey=None if auditor == _ZERO_KEY else bytes(auditor),
    )


def _decode_interest(data: bytes) -> InterestBearingConfig:
    init_ts, pre_avg, last_ts, rate = struct.unpack_from("<qhqh", data, 32)
    return InterestBearingConfig(
        rate_authority=optional_key(data[0:32]),
        rate=max(rate, 0),
        initialization_timestamp=init_ts,
        pre_update_average_rate=pre_avg,
        last_update_timestamp=last_ts,
    )


def _decode_metadata(data: bytes) -> TokenMetadata:
    offset = 64
    name, offset = _read_string(data, offset)
    symbol, offset = _read_string(data, offset)
    uri, offset = _read_string(data, offset)
    (count,) = struct.unpack_from("<I", data, offset)
    offset += 4
    pairs: list[tuple[str, str]] = []
    for _ in range(count):
        key, offset = _read_string(data, offset)
        value, offset = _read_string(data, offset)
        pairs.append((key, value))
    return TokenMetadata(
        update_authority=optional_key(data[0:32]),
        mint=Pubkey.from_bytes(data[32:64]),
        name=name,
        symbol=symbol,
        uri=uri,
        additional_metadata=tuple(pairs),
    )


def _decode_scaled(data: bytes) -> ScaledUiAmountConfig:
    multiplier, ts, new_multiplier = struct.unpack_from("<dqd", data, 32)
    return ScaledUiAmountConfig(
        authority=optional_key(data[0:32]),
        multiplier=multiplier,
        new_multiplier_effective_timestamp=max(ts, 0),
        new_multiplier=new_multiplier,
    )


_DECODERS: dict[ExtensionKind, Callable[[bytes], ExtensionDescriptor]] = {
    ExtensionKind.TRANSFER_FEE_CONFIG: _decode_transfer_fee,
    ExtensionKind.MINT_CLOSE_AUTHORITY: lambda d: MintCloseAuthority(optional_key(d[0:32])),
    ExtensionKind.CONFIDENTIAL_TRANSFER_MINT: _decode_confidential,
    ExtensionKind.DEFAULT_ACCOUNT_STATE: lambda d: DefaultAccountState(AccountState(d[0])),
    ExtensionKind.NON_TRANSFERABLE: lambda d: NonTransferable(),
    ExtensionKind.INTEREST_BEARING_CONFIG: _decode_interest,
    ExtensionKind.PERMANENT_DELEGATE: lambda d: PermanentDelegate(optional_key(d[0:32])),
    ExtensionKind.TRANSFER_HOOK: lambda d: TransferHook(optional_key(d[0:32]), optional_key(d[32:64])),
    ExtensionKind.METADATA_POINTER: lambda d: MetadataPointer(optional_key(d[0:32]), optional_key(d[32:64])),
    ExtensionKind.TOKEN_METADATA: _decode_metadata,
    ExtensionKind.SCALED_UI_AMOUNT_CONFIG: _decode_scaled,
    ExtensionKind.PAUSABLE_CONFIG: lambda d: PausableConfig(optional_key(d[0:32]), d[32] != 0),
}


def decode_extension(type_id: int, data: bytes) -> DecodedExtension:
    try:
        kind = ExtensionKind(type_id)
    except ValueError:
        return UnknownExtension(type_id=type_id, data=bytes(data))
    expected = FIXED_DATA_SIZES.get(kind)
    if expected is not None and len(data) < expected:
        raise ValueError(f"{kind.label} payload too short: {len(data)} < {expected}")
    return _DECODERS[kind](data)


def parse_tlv(data: bytes, offset: int) -> list[tuple[int, bytes]]:
    """Walk TLV entries starting at ``offset``; stops on zero type or truncation."""
    entries: list[tuple[int, bytes]] = []
    while offset + TLV_HEADER_SIZE <= len(data):
        ext_type, ext_len = struct.unpack_from("<HH", data, offset)
        if ext_type == 0:
            break  # Uninitialized: end of extensions
        start = offset + TLV_HEADER_SIZE
        if start + ext_len > len(data):
            break
        entries.append((ext_type, data[start:start + ext_len]))
        offset = start + ext_len
    return entries


# ─── Mint account ─────────────────────────────────────────────────


@dataclass(frozen=True)
class DecodedMint:
    mint_authority: Pubkey | None
    supply: int
    decimals: int
    is_initialized: bool
    freeze_authority: Pubkey | None
    extensions: tuple[DecodedExtension, ...] = field(default_factory=tuple)


def encode_base_mint(
    *,
    mint_authority: Pubkey | None,
    freeze_authority: Pubkey | None,
    decimals: int,
    supply: int = 0,
    is_initialized: bool = True,
) -> bytes:
    data = bytearray(MINT_SIZE)
    data[0:36] = _coption_key(mint_authority)
    struct.pack_into("<Q", data, 36, supply)
    data[44] = decimals
    data[45] = 1 if is_initialized else 0
    data[46:82] = _coption_key(freeze_authority)
    return bytes(data)


def encode_mint_account(
    *,
    mint_authority: Pubkey | None,
    freeze_authority: Pubkey | None,
    decimals: int,
    extensions: Iterable[ExtensionDescriptor] = (),
    supply: int = 0,
) -> bytes:
    """Full account bytes for an initialized mint with ``extensions``."""
    base = encode_base_mint(
        mint_authority=mint_authority,
        freeze_authority=freeze_authority,
        decimals=decimals,
        supply=supply,
    )
    extensions = tuple(extensions)
    if not extensions:
        return base
    data = bytearray(base)
    data += bytes(TOKEN_ACCOUNT_SIZE - MINT_SIZE)
    data.append(ACCOUNT_TYPE_MINT)
    for ext in extensions:
        data += encode_extension(ext)
    return bytes(data)


def decode_mint_account(raw: bytes) -> DecodedMint:
    if len(raw) < MINT_SIZE:
        raise ValueError(f"Mint data too short: {len(raw)} bytes")

    extensions: tuple[DecodedExtension, ...] = ()
    if len(raw) > TOKEN_ACCOUNT_SIZE:
        if raw[TOKEN_ACCOUNT_SIZE] != ACCOUNT_TYPE_MINT:
            raise ValueError(f"Account type {raw[TOKEN_ACCOUNT_SIZE]} is not a mint")
        extensions = tuple(
            decode_extension(ext_type, payload)
            for ext_type, payload in parse_tlv(raw, TOKEN_ACCOUNT_SIZE + 1)
        )

    return DecodedMint(
        mint_authority=_read_coption_key(raw, 0),
        supply=struct.unpack_from("<Q", raw, 36)[0],
        decimals=raw[44],
        is_initialized=raw[45] != 0,
        freeze_authority=_read_coption_key(raw, 46),
        extensions=extensions,
    )


# ─── Token account ────────────────────────────────────────────────
# [0:32]    mint
# [32:64]   owner
# [64:72]   amount (u64)
# [72:108]  delegate COption<Pubkey>
# [108]     state (AccountState)
# [109:121] is_native COption<u64>
# [121:129] delegated_amount (u64)
# [129:165] close_authority COption<Pubkey>


@dataclass(frozen=True)
class DecodedTokenAccount:
    mint: Pubkey
    owner: Pubkey
    amount: int
    state: AccountState

    @property
    def is_frozen(self) -> bool:
        return self.state == AccountState.FROZEN


def encode_token_account(
    *,
    mint: Pubkey,
    owner: Pubkey,
    state: AccountState,
    amount: int = 0,
) -> bytes:
    data = bytearray(TOKEN_ACCOUNT_SIZE)
    data[0:32] = bytes(mint)
    data[32:64] = bytes(owner)
    struct.pack_into("<Q", data, 64, amount)
    data[72:108] = _coption_key(None)
    data[108] = int(state)
    struct.pack_into("<I", data, 109, 0)
    data[129:165] = _coption_key(None)
    return bytes(data)


def decode_token_account(raw: bytes) -> DecodedTokenAccount:
    if len(raw) < TOKEN_ACCOUNT_SIZE:
        raise ValueError(f"Token account data too short: {len(raw)} bytes")
    if len(raw) > TOKEN_ACCOUNT_SIZE and raw[TOKEN_ACCOUNT_SIZE] != ACCOUNT_TYPE_ACCOUNT:
        raise ValueError("Extended account is not a token account")
    try:
        state = AccountState(raw[108])
    except ValueError as e:
        raise ValueError(f"Invalid token account state {raw[108]}") from e
    return DecodedTokenAccount(
        mint=Pubkey.from_bytes(raw[0:32]),
        owner=Pubkey.from_bytes(raw[32:64]),
        amount=struct.unpack_from("<Q", raw, 64)[0],
        state=state,
    )


def require_u8(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 255:
        raise ValidationError(f"{name} must be an integer in [0, 255], got {value!r}")
    return value
