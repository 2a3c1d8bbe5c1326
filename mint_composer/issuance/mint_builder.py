"""Mint composition — accumulate extensions, emit ordered creation instructions.

Instruction order for a new mint:
  1. System create_account, sized WITHOUT post-init extensions
  2. One initializer per pre-init extension, in the order added
  3. InitializeMint2 (decimals, mint authority, freeze authority)
  4. Post-init: token-metadata initialize + one update_field per extra pair

The builder is an immutable value: every ``with_*`` call returns a new builder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from loguru import logger
from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.system_program import CreateAccountParams, create_account  # type: ignore[import-untyped]

from mint_composer.constants import TOKEN_2022_PROGRAM_ID
from mint_composer.errors import ValidationError
from mint_composer.extensions.catalog import (
    AccountState,
    ConfidentialTransferMint,
    DefaultAccountState,
    ExtensionDescriptor,
    ExtensionKind,
    InterestBearingConfig,
    MetadataPointer,
    MintCloseAuthority,
    NonTransferable,
    OrderingClass,
    PausableConfig,
    PermanentDelegate,
    ScaledUiAmountConfig,
    TokenMetadata,
    TransferFeeConfig,
    TransferHook,
    ensure_unique_kinds,
)
from mint_composer.extensions.codec import get_mint_size, require_u8
from mint_composer.issuance import metadata as metadata_ix
from mint_composer.programs import token_2022
from mint_composer.rpc.client import AccountReader
from mint_composer.signers import (
    AddressCapability,
    AuthorityInput,
    as_address,
    as_capability,
    optional_address,
)
from mint_composer.transaction import UnsignedTransaction, build_unsigned_transaction


@dataclass(frozen=True)
class MintBuilder:
    extensions: tuple[ExtensionDescriptor, ...] = field(default_factory=tuple)

    def with_extension(self, descriptor: ExtensionDescriptor) -> MintBuilder:
        extensions = self.extensions + (descriptor,)
        ensure_unique_kinds(extensions)
        return MintBuilder(extensions)

    def with_extensions(self, descriptors: Iterable[ExtensionDescriptor]) -> MintBuilder:
        builder = self
        for descriptor in descriptors:
            builder = builder.with_extension(descriptor)
        return builder

    def has(self, kind: ExtensionKind) -> bool:
        return any(ext.kind == kind for ext in self.extensions)

    # ─── Extension helpers ────────────────────────────────────────

    def with_metadata(
        self,
        *,
        mint: AuthorityInput,
        authority: AuthorityInput,
        name: str,
        symbol: str,
        uri: str,
        additional_metadata: Mapping[str, str] | Iterable[tuple[str, str]] = (),
    ) -> MintBuilder:
        """Metadata pointer (at the mint itself) plus in-mint token metadata.

        Additional-metadata keys ``name``, ``symbol`` and ``uri`` (and their
        capitalized forms) are reserved: the update-field instruction would
        address the core field instead of adding a pair, so they are rejected.
        """
        mint_address = as_address(mint)
        authority_address = as_address(authority)
        if isinstance(additional_metadata, Mapping):
            pairs = tuple(additional_metadata.items())
        else:
            pairs = tuple(additional_metadata)
        reserved = [key for key, _ in pairs if metadata_ix.core_field(key) is not None]
        if reserved:
            raise ValidationError(f"Additional metadata keys {reserved} are reserved for core metadata fields")
        return self.with_extensions(
            [
                MetadataPointer(authority=authority_address, metadata_address=mint_address),
                TokenMetadata(
                    update_authority=authority_address,
                    mint=mint_address,
                    name=name,
                    symbol=symbol,
                    uri=uri,
                    additional_metadata=pairs,
                ),
            ]
        )

    def with_permanent_delegate(self, delegate: AuthorityInput) -> MintBuilder:
        return self.with_extension(PermanentDelegate(as_address(delegate)))

    def with_pausable(self, authority: AuthorityInput) -> MintBuilder:
        return self.with_extension(PausableConfig(as_address(authority), paused=False))

    def with_default_account_state(self, initialized: bool) -> MintBuilder:
        state = AccountState.INITIALIZED if initialized else AccountState.FROZEN
        return self.with_extension(DefaultAccountState(state))

    def with_confidential_balances(self, authority: AuthorityInput) -> MintBuilder:
        return self.with_extension(
            ConfidentialTransferMint(
                authority=as_address(authority),
                auto_approve_new_accounts=False,
                auditor_elgamal_pubkey=None,
            )
        )

    def with_scaled_ui_amount(
        self,
        authority: AuthorityInput,
        multiplier: float = 1.0,
        new_multiplier_effective_timestamp: int = 0,
        new_multiplier: float = 1.0,
    ) -> MintBuilder:
        return self.with_extension(
            ScaledUiAmountConfig(
                authority=as_address(authority),
                multiplier=multiplier,
                new_multiplier_effective_timestamp=new_multiplier_effective_timestamp,
                new_multiplier=new_multiplier,
            )
        )

    def with_transfer_fee(
        self,
        authority: AuthorityInput,
        fee_basis_points: int,
        maximum_fee: int,
        withdraw_withheld_authority: AuthorityInput | None = None,
    ) -> MintBuilder:
        authority_address = as_address(authority)
        return self.with_extension(
            TransferFeeConfig(
                transfer_fee_config_authority=authority_address,
                withdraw_withheld_authority=optional_address(withdraw_withheld_authority)
                or authority_address,
                fee_basis_points=fee_basis_points,
                maximum_fee=maximum_fee,
            )
        )

    def with_interest_bearing(self, authority: AuthorityInput, rate: int) -> MintBuilder:
        return self.with_extension(InterestBearingConfig(rate_authority=as_address(authority), rate=rate))

    def with_non_transferable(self) -> MintBuilder:
        return self.with_extension(NonTransferable())

    def with_transfer_hook(
        self, authority: AuthorityInput, program_id: AuthorityInput | None
    ) -> MintBuilder:
        return self.with_extension(
            TransferHook(authority=as_address(authority), program_id=optional_address(program_id))
        )

    def with_close_authority(self, authority: AuthorityInput) -> MintBuilder:
        return self.with_extension(MintCloseAuthority(as_address(authority)))

    # ─── Terminal operations ──────────────────────────────────────

    def creation_size(self) -> int:
        """Bytes allocated by create_account (post-init extensions excluded)."""
        return get_mint_size(e for e in self.extensions if e.ordering != OrderingClass.POST_INIT)

    def full_size(self) -> int:
        return get_mint_size(self.extensions)

    async def build_instructions(
        self,
        reader: AccountReader,
        *,
        decimals: int,
        mint: AuthorityInput,
        fee_payer: AuthorityInput,
        mint_authority: AuthorityInput | None = None,
        freeze_authority: AuthorityInput | None = None,
        program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
    ) -> list[Instruction]:
        require_u8("decimals", decimals)
        mint_address = as_address(mint)
        payer_address = as_address(fee_payer)
        authority_cap = as_capability(mint_authority) if mint_authority is not None else None
        authority_address = authority_cap.address if authority_cap else payer_address
        freeze_address = optional_address(freeze_authority) or payer_address

        token_metadata = next(
            (e for e in self.extensions if isinstance(e, TokenMetadata)), None
        )
        if token_metadata is not None and isinstance(authority_cap, AddressCapability):
            raise ValidationError(
                "Mint authority must be a signer (or omitted) when TokenMetadata is present"
            )

        space = self.creation_size()
        # Lamports must already cover the metadata realloc done by the token program
        lamports = await reader.get_minimum_balance_for_rent_exemption(self.full_size())

        instructions: list[Instruction] = [
            create_account(
                CreateAccountParams(
                    from_pubkey=payer_address,
                    to_pubkey=mint_address,
                    lamports=lamports,
                    space=space,
                    owner=program_id,
                )
            )
        ]
        for ext in self.extensions:
            if ext.ordering == OrderingClass.PRE_INIT:
                instructions.append(token_2022.pre_init_instruction(mint_address, ext, program_id))

        instructions.append(
            token_2022.initialize_mint2(
                mint_address, decimals, authority_address, freeze_address, program_id
            )
        )

        if token_metadata is not None:
            instructions.extend(
                _metadata_instructions(token_metadata, mint_address, authority_address, program_id)
            )

        logger.info(
            f"[MINT] Built {len(instructions)} instructions for {str(mint_address)[:12]}: "
            f"extensions={[e.label for e in self.extensions]}, space={space}, rent={lamports}"
        )
        return instructions

    async def build_transaction(
        self,
        reader: AccountReader,
        *,
        decimals: int,
        mint: AuthorityInput,
        fee_payer: AuthorityInput,
        mint_authority: AuthorityInput | None = None,
        freeze_authority: AuthorityInput | None = None,
        program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
    ) -> UnsignedTransaction:
        instructions = await self.build_instructions(
            reader,
            decimals=decimals,
            mint=mint,
            fee_payer=fee_payer,
            mint_authority=mint_authority,
            freeze_authority=freeze_authority,
            program_id=program_id,
        )
        return await build_unsigned_transaction(reader, as_address(fee_payer), instructions)


def _metadata_instructions(
    ext: TokenMetadata, mint: Pubkey, mint_authority: Pubkey, program_id: Pubkey
) -> list[Instruction]:
    update_authority = ext.update_authority or mint_authority
    instructions = [
        metadata_ix.initialize(
            mint=mint,
            update_authority=update_authority,
            mint_authority=mint_authority,
            name=ext.name,
            symbol=ext.symbol,
            uri=ext.uri,
            program_id=program_id,
        )
    ]
    for key, value in ext.additional_metadata:
        logger.debug(f"[MINT] update_field {key!r}")
        instructions.append(
            metadata_ix.update_field(
                metadata=mint,
                update_authority=update_authority,
                field=key,
                value=value,
                program_id=program_id,
            )
        )
    return instructions
