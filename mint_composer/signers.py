"""Authority capabilities: a bare address or a signer able to authorize.

Callers may hand in a ``Pubkey``, a base58 string, a solders ``Keypair`` (or
any object exposing ``pubkey()``), or an already-built capability. Everything
is resolved once at the API boundary with :func:`as_capability`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union, runtime_checkable

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.errors import ValidationError


@runtime_checkable
class Signer(Protocol):
    def pubkey(self) -> Pubkey: ...


@dataclass(frozen=True)
class AddressCapability:
    """Authority known only by address; cannot co-sign this transaction."""

    address: Pubkey

    @property
    def can_sign(self) -> bool:
        return False


@dataclass(frozen=True)
class SignerCapability:
    """Authority that will sign the transaction (keypair, wallet adapter, noop)."""

    signer: Signer

    @property
    def address(self) -> Pubkey:
        return self.signer.pubkey()

    @property
    def can_sign(self) -> bool:
        return True


Capability = Union[AddressCapability, SignerCapability]
AuthorityInput = Union[Capability, Pubkey, str, Signer]


def as_capability(value: AuthorityInput) -> Capability:
    if isinstance(value, (AddressCapability, SignerCapability)):
        return value
    if isinstance(value, Pubkey):
        return AddressCapability(value)
    if isinstance(value, str):
        try:
            return AddressCapability(Pubkey.from_string(value))
        except ValueError as e:
            raise ValidationError(f"Invalid address {value!r}: {e}") from e
    if isinstance(value, Signer):
        return SignerCapability(value)
    raise ValidationError(f"Unsupported authority type: {type(value).__name__}")


def as_address(value: AuthorityInput) -> Pubkey:
    return as_capability(value).address


def optional_address(value: AuthorityInput | None) -> Pubkey | None:
    return None if value is None else as_address(value)
