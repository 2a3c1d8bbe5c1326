"""Archetype classification over the set of extension kinds on a mint.

Archetypes are overlapping descriptive tags, not a partition: a mint may be
both scaled-security and closed-loop. Input order never matters.
"""

from __future__ import annotations

from typing import Iterable

SCALED_SECURITY = "scaled-security"
RESTRICTED_TRANSFER = "restricted-transfer"
CLOSED_LOOP = "closed-loop"
UNKNOWN = "unknown"

_CORE = frozenset({"TokenMetadata", "PermanentDelegate", "DefaultAccountState"})

RESTRICTED_TRANSFER_EXTENSIONS = _CORE | {"ConfidentialTransferMint"}
CLOSED_LOOP_EXTENSIONS = _CORE
SCALED_SECURITY_EXTENSIONS = _CORE | {"ScaledUiAmountConfig"}


def satisfies_restricted_transfer(kinds: Iterable[str]) -> bool:
    return RESTRICTED_TRANSFER_EXTENSIONS <= set(kinds)


def satisfies_closed_loop(kinds: Iterable[str]) -> bool:
    names = set(kinds)
    return CLOSED_LOOP_EXTENSIONS <= names and "ConfidentialTransferMint" not in names


def satisfies_scaled_security(kinds: Iterable[str]) -> bool:
    return SCALED_SECURITY_EXTENSIONS <= set(kinds)


def detect_token_patterns(kinds: Iterable[str]) -> tuple[str, ...]:
    """All matching archetypes in fixed order, or ``("unknown",)``."""
    names = frozenset(kinds)
    matches: list[str] = []
    if satisfies_scaled_security(names):
        matches.append(SCALED_SECURITY)
    if satisfies_restricted_transfer(names):
        matches.append(RESTRICTED_TRANSFER)
    if satisfies_closed_loop(names):
        matches.append(CLOSED_LOOP)
    return tuple(matches) if matches else (UNKNOWN,)
