"""Shared template assembly: base mint instructions plus optional gating setup.

Gating setup appends, in order:
  1. token_acl create_config      (freeze authority -> mint config)
  2. token_acl set_gating_program (list program decides permissionless thaw)
  3. token_acl enable permissionless thaw
  4. list program init list config (seed = mint)
  5. list program set extra metas for thaw

It only runs when the fee payer is also the mint authority: the same signer
must authorize the freeze-authority hand-off in this transaction.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from mint_composer.access_control import gating, lists
from mint_composer.access_control.lists import ListMode
from mint_composer.access_control.state import AclMode
from mint_composer.constants import ProgramConfig, default_programs
from mint_composer.errors import GatingSetupError, ValidationError
from mint_composer.issuance.mint_builder import MintBuilder
from mint_composer.rpc.client import AccountReader
from mint_composer.signers import AuthorityInput, as_address
from mint_composer.transaction import UnsignedTransaction, build_unsigned_transaction


@dataclass(frozen=True)
class TemplateResult:
    fee_payer: Pubkey
    instructions: tuple[Instruction, ...]
    list_config: Pubkey | None = None
    gating_configured: bool = False

    async def to_transaction(self, reader: AccountReader) -> UnsignedTransaction:
        return await build_unsigned_transaction(reader, self.fee_payer, self.instructions)


def resolve_list_mode(acl_mode: AclMode | str) -> ListMode:
    try:
        mode = AclMode(acl_mode)
    except ValueError as e:
        raise ValidationError(f"Unknown ACL mode {acl_mode!r}") from e
    if mode == AclMode.NONE:
        raise ValidationError("Gating needs an allowlist or blocklist mode")
    return ListMode.ALLOW if mode == AclMode.ALLOW else ListMode.BLOCK


def gating_setup_instructions(
    *,
    authority: Pubkey,
    mint: Pubkey,
    mode: ListMode,
    programs: ProgramConfig | None = None,
) -> tuple[list[Instruction], Pubkey]:
    programs = programs or default_programs()
    init_list, list_config = lists.initialize_list_config(
        authority=authority, seed=mint, mode=mode, programs=programs
    )
    instructions = [
        gating.create_config(
            payer=authority,
            authority=authority,
            mint=mint,
            gating_program=programs.list_program,
            programs=programs,
        ),
        gating.set_gating_program(
            authority=authority, mint=mint, gating_program=programs.list_program, programs=programs
        ),
        gating.enable_permissionless_thaw(authority=authority, mint=mint, programs=programs),
        init_list,
        lists.set_extra_metas_thaw(
            authority=authority, list_config=list_config, mint=mint, programs=programs
        ),
    ]
    return instructions, list_config


async def assemble_template(
    reader: AccountReader,
    builder: MintBuilder,
    *,
    template: str,
    decimals: int,
    mint: AuthorityInput,
    fee_payer: AuthorityInput,
    mint_authority: AuthorityInput,
    freeze_authority: AuthorityInput | None,
    enable_gating: bool,
    acl_mode: AclMode | str,
    require_gating: bool = False,
    programs: ProgramConfig | None = None,
) -> TemplateResult:
    payer = as_address(fee_payer)
    authority = as_address(mint_authority)
    mint_address = as_address(mint)

    # Rejected before any read
    same_signer = payer == authority
    if enable_gating and not same_signer and require_gating:
        raise GatingSetupError(
            f"Gating setup in the creation transaction needs fee payer == mint authority "
            f"(payer {payer}, authority {authority})"
        )
    list_mode = resolve_list_mode(acl_mode) if enable_gating else None

    instructions = await builder.build_instructions(
        reader,
        decimals=decimals,
        mint=mint,
        fee_payer=fee_payer,
        mint_authority=mint_authority,
        freeze_authority=freeze_authority,
    )

    if not enable_gating:
        logger.info(f"[TEMPLATE] {template} {str(mint_address)[:12]}: {len(instructions)} instructions")
        return TemplateResult(fee_payer=payer, instructions=tuple(instructions))

    if not same_signer:
        logger.info(
            f"[TEMPLATE] {template} {str(mint_address)[:12]}: gating skipped, "
            f"fee payer {str(payer)[:12]} is not mint authority {str(authority)[:12]}"
        )
        return TemplateResult(fee_payer=payer, instructions=tuple(instructions))

    setup, list_config = gating_setup_instructions(
        authority=payer, mint=mint_address, mode=list_mode, programs=programs
    )
    instructions.extend(setup)
    logger.info(
        f"[TEMPLATE] {template} {str(mint_address)[:12]}: {len(instructions)} instructions, "
        f"gating list {str(list_config)[:12]} ({list_mode.name})"
    )
    return TemplateResult(
        fee_payer=payer,
        instructions=tuple(instructions),
        list_config=list_config,
        gating_configured=True,
    )
