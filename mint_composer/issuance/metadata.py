"""Token-metadata interface instructions (metadata stored inside the mint).

Discriminators are the first 8 bytes of
``sha256("spl_token_metadata_interface:<instruction>")``; strings are Borsh
(u32 length + UTF-8).
"""

from __future__ import annotations

import hashlib
from enum import IntEnum

from solders.instruction import AccountMeta, Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.constants import TOKEN_2022_PROGRAM_ID
from mint_composer.extensions.codec import encode_string, key_bytes


def _discriminator(name: str) -> bytes:
    return hashlib.sha256(f"spl_token_metadata_interface:{name}".encode()).digest()[:8]


INITIALIZE_DISCRIMINATOR = _discriminator("initialize_account")
UPDATE_FIELD_DISCRIMINATOR = _discriminator("updating_field")
REMOVE_KEY_DISCRIMINATOR = _discriminator("remove_key_ix")
UPDATE_AUTHORITY_DISCRIMINATOR = _discriminator("update_the_authority")


class MetadataField(IntEnum):
    NAME = 0
    SYMBOL = 1
    URI = 2
    KEY = 3  # custom key, followed by the key string


_CORE_FIELDS = {"name": MetadataField.NAME, "symbol": MetadataField.SYMBOL, "uri": MetadataField.URI}


def core_field(key: str) -> MetadataField | None:
    """Core field a plain key string addresses ('name' or 'Name'), if any."""
    if key.lower() in _CORE_FIELDS and key in (key.lower(), key.capitalize()):
        return _CORE_FIELDS[key.lower()]
    return None


def _field_bytes(field: MetadataField | str) -> bytes:
    if isinstance(field, MetadataField):
        if field == MetadataField.KEY:
            raise ValueError("Custom metadata fields are passed as plain key strings")
        return bytes([int(field)])
    core = core_field(field)
    if core is not None:
        return bytes([int(core)])
    return bytes([int(MetadataField.KEY)]) + encode_string(field)


def initialize(
    *,
    mint: Pubkey,
    update_authority: Pubkey,
    mint_authority: Pubkey,
    name: str,
    symbol: str,
    uri: str,
    metadata: Pubkey | None = None,
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    """Write name/symbol/uri into ``metadata`` (the mint itself by default)."""
    data = INITIALIZE_DISCRIMINATOR + encode_string(name) + encode_string(symbol) + encode_string(uri)
    return Instruction(
        program_id,
        data,
        [
            AccountMeta(metadata or mint, is_signer=False, is_writable=True),
            AccountMeta(update_authority, is_signer=False, is_writable=False),
            AccountMeta(mint, is_signer=False, is_writable=False),
            AccountMeta(mint_authority, is_signer=True, is_writable=False),
        ],
    )


def update_field(
    *,
    metadata: Pubkey,
    update_authority: Pubkey,
    field: MetadataField | str,
    value: str,
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    """Set a core field or an additional key. ``field`` strings other than
    name/symbol/uri are treated as additional-metadata keys."""
    data = UPDATE_FIELD_DISCRIMINATOR + _field_bytes(field) + encode_string(value)
    return Instruction(
        program_id,
        data,
        [
            AccountMeta(metadata, is_signer=False, is_writable=True),
            AccountMeta(update_authority, is_signer=True, is_writable=False),
        ],
    )


def remove_key(
    *,
    metadata: Pubkey,
    update_authority: Pubkey,
    key: str,
    idempotent: bool = True,
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    data = REMOVE_KEY_DISCRIMINATOR + bytes([1 if idempotent else 0]) + encode_string(key)
    return Instruction(
        program_id,
        data,
        [
            AccountMeta(metadata, is_signer=False, is_writable=True),
            AccountMeta(update_authority, is_signer=True, is_writable=False),
        ],
    )


def update_authority(
    *,
    metadata: Pubkey,
    current_authority: Pubkey,
    new_authority: Pubkey | None,
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    """Rotate the update authority; ``None`` makes the metadata immutable."""
    data = UPDATE_AUTHORITY_DISCRIMINATOR + key_bytes(new_authority)
    return Instruction(
        program_id,
        data,
        [
            AccountMeta(metadata, is_signer=False, is_writable=True),
            AccountMeta(current_authority, is_signer=True, is_writable=False),
        ],
    )
