"""Authority transitions: rotate or revoke one authority role on a mint.

The ``"Metadata"`` role targets the token-metadata update authority; every
other role is a Token-2022 ``AuthorityType`` handled by SetAuthority. Each call
yields exactly one instruction.
"""

from __future__ import annotations

from typing import Literal, Union

from loguru import logger
from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.constants import TOKEN_2022_PROGRAM_ID
from mint_composer.errors import AuthorityMismatchError, ValidationError
from mint_composer.extensions.catalog import AuthorityType
from mint_composer.inspection.inspector import TokenInspection, inspect_token
from mint_composer.issuance import metadata as metadata_ix
from mint_composer.programs import token_2022
from mint_composer.rpc.client import AccountReader
from mint_composer.signers import AuthorityInput, as_address
from mint_composer.transaction import UnsignedTransaction, build_unsigned_transaction

METADATA_ROLE = "Metadata"

AuthorityRole = Union[Literal["Metadata"], AuthorityType]

# Role -> TokenAuthorities field holding its current value
_ROLE_FIELDS: dict[object, str] = {
    METADATA_ROLE: "metadata_authority",
    AuthorityType.MINT_TOKENS: "mint_authority",
    AuthorityType.FREEZE_ACCOUNT: "freeze_authority",
    AuthorityType.TRANSFER_FEE_CONFIG: "transfer_fee_config_authority",
    AuthorityType.WITHHELD_WITHDRAW: "withdraw_withheld_authority",
    AuthorityType.CLOSE_MINT: "close_authority",
    AuthorityType.INTEREST_RATE: "interest_rate_authority",
    AuthorityType.PERMANENT_DELEGATE: "permanent_delegate",
    AuthorityType.CONFIDENTIAL_TRANSFER_MINT: "confidential_balances_authority",
    AuthorityType.TRANSFER_HOOK_PROGRAM_ID: "transfer_hook_authority",
    AuthorityType.METADATA_POINTER: "metadata_pointer_authority",
    AuthorityType.SCALED_UI_AMOUNT: "scaled_ui_amount_authority",
    AuthorityType.PAUSE: "pausable_authority",
}


def _normalize_role(role: AuthorityRole | int | str) -> AuthorityRole:
    if role == METADATA_ROLE:
        return METADATA_ROLE
    if isinstance(role, str):
        raise ValidationError(f"Unknown authority role {role!r}")
    try:
        return AuthorityType(role)
    except ValueError as e:
        raise ValidationError(f"Unknown authority type {role!r}") from e


def _role_name(role: AuthorityRole) -> str:
    return role if isinstance(role, str) else role.name


def _transition(
    mint: Pubkey,
    role: AuthorityRole | int | str,
    current: Pubkey,
    new: Pubkey | None,
    program_id: Pubkey,
) -> list[Instruction]:
    role = _normalize_role(role)
    if role == METADATA_ROLE:
        ix = metadata_ix.update_authority(
            metadata=mint, current_authority=current, new_authority=new, program_id=program_id
        )
    else:
        ix = token_2022.set_authority(mint, role, current, new, program_id)
    logger.info(
        f"[AUTH] {_role_name(role)} on {str(mint)[:12]}: "
        f"{str(current)[:12]} -> {str(new)[:12] if new else 'None'}"
    )
    return [ix]


def get_update_authority_instructions(
    mint: Pubkey,
    role: AuthorityRole | int | str,
    current_authority: AuthorityInput,
    new_authority: AuthorityInput,
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> list[Instruction]:
    return _transition(mint, role, as_address(current_authority), as_address(new_authority), program_id)


def get_remove_authority_instructions(
    mint: Pubkey,
    role: AuthorityRole | int | str,
    current_authority: AuthorityInput,
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> list[Instruction]:
    """Revoke a role; the new authority is encoded as absent."""
    return _transition(mint, role, as_address(current_authority), None, program_id)


def verify_current_authority(
    inspection: TokenInspection, role: AuthorityRole | int | str, current: AuthorityInput
) -> None:
    role = _normalize_role(role)
    field = _ROLE_FIELDS.get(role)
    if field is None:
        raise ValidationError(f"{_role_name(role)} is not a mint-level authority")
    expected = getattr(inspection.authorities, field)
    actual = as_address(current)
    if expected != actual:
        logger.warning(f"[AUTH] {_role_name(role)} mismatch on {str(inspection.address)[:12]}")
        raise AuthorityMismatchError(
            f"{_role_name(role)} authority of {inspection.address} is {expected}, not {actual}"
        )


async def get_update_authority_transaction(
    reader: AccountReader,
    *,
    payer: AuthorityInput,
    mint: Pubkey,
    role: AuthorityRole | int | str,
    current_authority: AuthorityInput,
    new_authority: AuthorityInput,
    verify: bool = True,
) -> UnsignedTransaction:
    if verify:
        verify_current_authority(await inspect_token(reader, mint), role, current_authority)
    ixs = get_update_authority_instructions(mint, role, current_authority, new_authority)
    return await build_unsigned_transaction(reader, as_address(payer), ixs)


async def get_remove_authority_transaction(
    reader: AccountReader,
    *,
    payer: AuthorityInput,
    mint: Pubkey,
    role: AuthorityRole | int | str,
    current_authority: AuthorityInput,
    verify: bool = True,
) -> UnsignedTransaction:
    if verify:
        verify_current_authority(await inspect_token(reader, mint), role, current_authority)
    ixs = get_remove_authority_instructions(mint, role, current_authority)
    return await build_unsigned_transaction(reader, as_address(payer), ixs)
