"""Token-2022 mint extension catalog — typed descriptors and ordering classes.

Extension type IDs follow spl-token-2022 ``ExtensionType``:
https://github.com/solana-program/token-2022/blob/main/program/src/extension/mod.rs

Every descriptor is a frozen dataclass validated on construction. The set of
descriptor classes is closed: ``DESCRIPTOR_TYPES`` maps each ``ExtensionKind``
to exactly one class, and the codec dispatches on the same keys.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import ClassVar, Union

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.errors import ValidationError

MAX_FEE_BASIS_POINTS = 10_000
MAX_INTEREST_RATE = 32_767  # i16
U64_MAX = 2**64 - 1
I64_MIN, I64_MAX = -(2**63), 2**63 - 1
I16_MIN = -(2**15)


class ExtensionKind(IntEnum):
    """Mint extensions this toolkit can compose and decode."""

    TRANSFER_FEE_CONFIG = 1
    MINT_CLOSE_AUTHORITY = 3
    CONFIDENTIAL_TRANSFER_MINT = 4
    DEFAULT_ACCOUNT_STATE = 6
    NON_TRANSFERABLE = 9
    INTEREST_BEARING_CONFIG = 10
    PERMANENT_DELEGATE = 12
    TRANSFER_HOOK = 14
    METADATA_POINTER = 18
    TOKEN_METADATA = 19
    SCALED_UI_AMOUNT_CONFIG = 25
    PAUSABLE_CONFIG = 26

    @property
    def label(self) -> str:
        """Canonical Token-2022 name (``TokenMetadata``, ``PausableConfig``...)."""
        return _LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> ExtensionKind:
        for kind, name in _LABELS.items():
            if name == label:
                return kind
        raise ValueError(f"Unknown extension kind: {label}")


_LABELS: dict[ExtensionKind, str] = {
    ExtensionKind.TRANSFER_FEE_CONFIG: "TransferFeeConfig",
    ExtensionKind.MINT_CLOSE_AUTHORITY: "MintCloseAuthority",
    ExtensionKind.CONFIDENTIAL_TRANSFER_MINT: "ConfidentialTransferMint",
    ExtensionKind.DEFAULT_ACCOUNT_STATE: "DefaultAccountState",
    ExtensionKind.NON_TRANSFERABLE: "NonTransferable",
    ExtensionKind.INTEREST_BEARING_CONFIG: "InterestBearingConfig",
    ExtensionKind.PERMANENT_DELEGATE: "PermanentDelegate",
    ExtensionKind.TRANSFER_HOOK: "TransferHook",
    ExtensionKind.METADATA_POINTER: "MetadataPointer",
    ExtensionKind.TOKEN_METADATA: "TokenMetadata",
    ExtensionKind.SCALED_UI_AMOUNT_CONFIG: "ScaledUiAmountConfig",
    ExtensionKind.PAUSABLE_CONFIG: "PausableConfig",
}


class OrderingClass(Enum):
    PRE_INIT = "pre_init"  # written before InitializeMint
    INIT_TIME = "init_time"  # parameters of InitializeMint itself
    POST_INIT = "post_init"  # needs an initialized mint (realloc'd on-chain)


# Closed mapping; only TokenMetadata is written after the mint is initialized.
_ORDERING: dict[ExtensionKind, OrderingClass] = {
    kind: OrderingClass.PRE_INIT for kind in ExtensionKind
} | {ExtensionKind.TOKEN_METADATA: OrderingClass.POST_INIT}


def ordering_class(kind: ExtensionKind) -> OrderingClass:
    return _ORDERING[kind]


class AccountState(IntEnum):
    UNINITIALIZED = 0
    INITIALIZED = 1
    FROZEN = 2


class AuthorityType(IntEnum):
    """spl-token-2022 ``AuthorityType`` used by SetAuthority."""

    MINT_TOKENS = 0
    FREEZE_ACCOUNT = 1
    ACCOUNT_OWNER = 2
    CLOSE_ACCOUNT = 3
    TRANSFER_FEE_CONFIG = 4
    WITHHELD_WITHDRAW = 5
    CLOSE_MINT = 6
    INTEREST_RATE = 7
    PERMANENT_DELEGATE = 8
    CONFIDENTIAL_TRANSFER_MINT = 9
    TRANSFER_HOOK_PROGRAM_ID = 10
    CONFIDENTIAL_TRANSFER_FEE_CONFIG = 11
    METADATA_POINTER = 12
    GROUP_POINTER = 13
    GROUP_MEMBER_POINTER = 14
    SCALED_UI_AMOUNT = 15
    PAUSE = 16


def _require_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    return value


def _require_range(name: str, value: object, low: int, high: int) -> int:
    number = _require_int(name, value)
    if not low <= number <= high:
        raise ValidationError(f"{name} must be within [{low}, {high}], got {number}")
    return number


# ─── Descriptors ──────────────────────────────────────────────────


@dataclass(frozen=True)
class _Descriptor:
    kind: ClassVar[ExtensionKind]

    @property
    def label(self) -> str:
        return self.kind.label

    @property
    def ordering(self) -> OrderingClass:
        return ordering_class(self.kind)

    def fields(self) -> dict[str, object]:
        return {f.name: getattr(self, f.name) for f in dataclasses.fields(self)}


@dataclass(frozen=True)
class TransferFeeConfig(_Descriptor):
    kind: ClassVar[ExtensionKind] = ExtensionKind.TRANSFER_FEE_CONFIG

    transfer_fee_config_authority: Pubkey | None
    withdraw_withheld_authority: Pubkey | None
    fee_basis_points: int
    maximum_fee: int
    withheld_amount: int = 0

    def __post_init__(self) -> None:
        bps = _require_int("fee_basis_points", self.fee_basis_points)
        if not 0 <= bps <= MAX_FEE_BASIS_POINTS:
            raise ValidationError(
                f"fee_basis_points must be within [0, {MAX_FEE_BASIS_POINTS}], got {bps}"
            )
        _require_range("maximum_fee", self.maximum_fee, 0, U64_MAX)
        _require_range("withheld_amount", self.withheld_amount, 0, U64_MAX)


@dataclass(frozen=True)
class MintCloseAuthority(_Descriptor):
    kind: ClassVar[ExtensionKind] = ExtensionKind.MINT_CLOSE_AUTHORITY

    close_authority: Pubkey | None


@dataclass(frozen=True)
class ConfidentialTransferMint(_Descriptor):
    kind: ClassVar[ExtensionKind] = ExtensionKind.CONFIDENTIAL_TRANSFER_MINT

    authority: Pubkey | None
    auto_approve_new_accounts: bool = False
    auditor_elgamal_pubkey: bytes | None = None

    def __post_init__(self) -> None:
        if self.auditor_elgamal_pubkey is not None and len(self.auditor_elgamal_pubkey) != 32:
            raise ValidationError("auditor_elgamal_pubkey must be 32 bytes")


@dataclass(frozen=True)
class DefaultAccountState(_Descriptor):
    kind: ClassVar[ExtensionKind] = ExtensionKind.DEFAULT_ACCOUNT_STATE

    state: AccountState

    def __post_init__(self) -> None:
        if self.state not in (AccountState.INITIALIZED, AccountState.FROZEN):
            raise ValidationError(f"Default account state must be Initialized or Frozen, got {self.state!r}")


@dataclass(frozen=True)
class NonTransferable(_Descriptor):
    kind: ClassVar[ExtensionKind] = ExtensionKind.NON_TRANSFERABLE


@dataclass(frozen=True)
class InterestBearingConfig(_Descriptor):
    kind: ClassVar[ExtensionKind] = ExtensionKind.INTEREST_BEARING_CONFIG

    rate_authority: Pubkey | None
    rate: int
    initialization_timestamp: int = 0
    pre_update_average_rate: int = 0
    last_update_timestamp: int = 0

    def __post_init__(self) -> None:
        rate = _require_int("rate", self.rate)
        if rate < 0:
            raise ValidationError(f"Interest rate must be non-negative, got {rate}")
        if rate > MAX_INTEREST_RATE:
            raise ValidationError(f"Interest rate must be <= {MAX_INTEREST_RATE} bps, got {rate}")
        _require_range("pre_update_average_rate", self.pre_update_average_rate, I16_MIN, MAX_INTEREST_RATE)
        _require_range("initialization_timestamp", self.initialization_timestamp, I64_MIN, I64_MAX)
        _require_range("last_update_timestamp", self.last_update_timestamp, I64_MIN, I64_MAX)


@dataclass(frozen=True)
class PermanentDelegate(_Descriptor):
    kind: ClassVar[ExtensionKind] = ExtensionKind.PERMANENT_DELEGATE

    delegate: Pubkey | None


@dataclass(frozen=True)
class TransferHook(_Descriptor):
    kind: ClassVar[ExtensionKind] = ExtensionKind.TRANSFER_HOOK

    authority: Pubkey | None
    program_id: Pubkey | None

    def __post_init__(self) -> None:
        if self.program_id is None:
            raise ValidationError("Transfer hook extension requires a hook program address")


@dataclass(frozen=True)
class MetadataPointer(_Descriptor):
    kind: ClassVar[ExtensionKind] = ExtensionKind.METADATA_POINTER

    authority: Pubkey | None
    metadata_address: Pubkey | None


@dataclass(frozen=True)
class TokenMetadata(_Descriptor):
    """Token metadata stored inside the mint (token-metadata interface).

    ``additional_metadata`` keeps insertion order; each pair beyond the three
    core fields becomes one update-field instruction at creation time.
    """

    kind: ClassVar[ExtensionKind] = ExtensionKind.TOKEN_METADATA

    update_authority: Pubkey | None
    mint: Pubkey
    name: str
    symbol: str
    uri: str
    additional_metadata: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        for label in ("name", "symbol", "uri"):
            if not isinstance(getattr(self, label), str):
                raise ValidationError(f"Metadata {label} must be a string")
        keys = [key for key, _ in self.additional_metadata]
        if len(keys) != len(set(keys)):
            raise ValidationError("Additional metadata keys must be unique")


@dataclass(frozen=True)
class ScaledUiAmountConfig(_Descriptor):
    kind: ClassVar[ExtensionKind] = ExtensionKind.SCALED_UI_AMOUNT_CONFIG

    authority: Pubkey | None
    multiplier: float = 1.0
    new_multiplier_effective_timestamp: int = 0
    new_multiplier: float = 1.0

    def __post_init__(self) -> None:
        for label in ("multiplier", "new_multiplier"):
            value = getattr(self, label)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValidationError(f"{label} must be a number, got {value!r}")
            if not (math.isfinite(value) and value > 0):
                raise ValidationError(f"{label} must be a finite positive number, got {value!r}")
        _require_range(
            "new_multiplier_effective_timestamp", self.new_multiplier_effective_timestamp, 0, I64_MAX
        )


@dataclass(frozen=True)
class PausableConfig(_Descriptor):
    kind: ClassVar[ExtensionKind] = ExtensionKind.PAUSABLE_CONFIG

    authority: Pubkey | None
    paused: bool = False


@dataclass(frozen=True)
class UnknownExtension:
    """TLV entry with a type id outside the catalog; kept verbatim."""

    type_id: int
    data: bytes

    @property
    def label(self) -> str:
        return f"Unknown({self.type_id})"


ExtensionDescriptor = Union[
    TransferFeeConfig,
    MintCloseAuthority,
    ConfidentialTransferMint,
    DefaultAccountState,
    NonTransferable,
    InterestBearingConfig,
    PermanentDelegate,
    TransferHook,
    MetadataPointer,
    TokenMetadata,
    ScaledUiAmountConfig,
    PausableConfig,
]

DecodedExtension = Union[ExtensionDescriptor, UnknownExtension]

DESCRIPTOR_TYPES: dict[ExtensionKind, type] = {
    cls.kind: cls
    for cls in (
        TransferFeeConfig,
        MintCloseAuthority,
        ConfidentialTransferMint,
        DefaultAccountState,
        NonTransferable,
        InterestBearingConfig,
        PermanentDelegate,
        TransferHook,
        MetadataPointer,
        TokenMetadata,
        ScaledUiAmountConfig,
        PausableConfig,
    )
}


def ensure_unique_kinds(descriptors: tuple[ExtensionDescriptor, ...]) -> None:
    seen: set[ExtensionKind] = set()
    for descriptor in descriptors:
        if descriptor.kind in seen:
            raise ValidationError(f"Duplicate extension kind: {descriptor.kind.label}")
        seen.add(descriptor.kind)
