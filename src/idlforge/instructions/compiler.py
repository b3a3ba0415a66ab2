"""Compiles a normalized IDL into what the code renderers consume.

Each account gets its discriminator and body; each instruction gets its
discriminator, flattened account keys and account metadata plan.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from idlforge.casing import upper_first
from idlforge.config import IDL_GENERATOR_SHANK, CompilerConfig
from idlforge.discriminator import account_discriminator, instruction_discriminator
from idlforge.errors import IdlFormatError
from idlforge.idl.model import (
    Idl,
    InstructionArg,
    InstructionDescriptor,
    StructBody,
    TypeDefinition,
)
from idlforge.instructions.accounts import ProcessedAccountKey, process_ix_accounts
from idlforge.instructions.metas import (
    AccountMetasPlan,
    OptionalAccountsStrategy,
    compile_account_metas,
)
from idlforge.normalize import normalize_idl

logger = logging.getLogger(__name__)


@dataclass
class CompiledAccount:
    name: str
    # None for Shank accounts, which carry no discriminator
    discriminator: bytes | None
    body: StructBody


@dataclass
class CompiledInstruction:
    name: str
    discriminator: bytes
    args: list[InstructionArg]
    account_keys: list[ProcessedAccountKey]
    account_metas: AccountMetasPlan

    @property
    def upper_camel_name(self) -> str:
        return upper_first(self.name)

    @property
    def args_typename(self) -> str:
        return f"{self.upper_camel_name}InstructionArgs"

    @property
    def accounts_typename(self) -> str:
        return f"{self.upper_camel_name}InstructionAccounts"

    @property
    def has_optional_accounts(self) -> bool:
        return any(k.optional for k in self.account_keys)

    def to_instruction(
        self,
        accounts: Mapping[str, Pubkey | None],
        program_id: Pubkey,
        data: bytes = b"",
        remaining_accounts: Sequence[AccountMeta] = (),
    ) -> Instruction:
        """Assemble an instruction; `data` is the already-serialized args."""
        metas = self.account_metas.build(accounts, program_id, remaining_accounts)
        return Instruction(program_id, self.discriminator + data, metas)


@dataclass
class CompiledProgram:
    name: str | None
    program_id: Pubkey | None
    accounts: list[CompiledAccount] = field(default_factory=list)
    instructions: list[CompiledInstruction] = field(default_factory=list)
    types: list[TypeDefinition] = field(default_factory=list)

    def instruction(self, name: str) -> CompiledInstruction:
        for ix in self.instructions:
            if ix.name == name:
                return ix
        raise KeyError(f"Unknown instruction '{name}'")

    def account(self, name: str) -> CompiledAccount:
        for account in self.accounts:
            if account.name == name:
                return account
        raise KeyError(f"Unknown account '{name}'")


def _instruction_discriminator(ix: InstructionDescriptor) -> bytes:
    if ix.discriminator is not None:
        return ix.discriminator
    # shank: {"discriminant": {"type": "u8", "value": 3}}
    discriminant = ix.extra.get("discriminant")
    if isinstance(discriminant, dict) and "value" in discriminant:
        return bytes([discriminant["value"]])
    return instruction_discriminator(ix.name)


def compile_instruction(
    ix: InstructionDescriptor, config: CompilerConfig | None = None
) -> CompiledInstruction:
    config = config if config is not None else CompilerConfig()
    strategy = (
        OptionalAccountsStrategy.OMIT_IF_ABSENT
        if ix.legacy_optional_accounts_strategy
        else OptionalAccountsStrategy.DEFAULT_TO_PROGRAM_ID
    )
    remaining = (
        config.anchor_remaining_accounts
        if ix.remaining_accounts is None
        else ix.remaining_accounts
    )
    keys = process_ix_accounts(ix.accounts)
    return CompiledInstruction(
        name=ix.name,
        discriminator=_instruction_discriminator(ix),
        args=list(ix.args),
        account_keys=keys,
        account_metas=compile_account_metas(ix.name, keys, strategy, remaining),
    )


def _program_id(idl: Idl, config: CompilerConfig) -> Pubkey | None:
    address = config.program_id or idl.address
    if address is None:
        return None
    try:
        return Pubkey.from_string(address)
    except ValueError as e:
        raise IdlFormatError(f"Invalid program id '{address}'") from e


def compile_idl(idl: Idl, config: CompilerConfig | None = None) -> CompiledProgram:
    """Compile an already normalized IDL."""
    config = config if config is not None else CompilerConfig()

    shank = idl.origin == IDL_GENERATOR_SHANK
    accounts: list[CompiledAccount] = []
    for account in idl.accounts:
        if account.body is None:
            raise IdlFormatError(f"Account '{account.name}' has no body; normalize the IDL first")
        discriminator = account.discriminator
        if discriminator is None and not shank:
            discriminator = account_discriminator(account.name)
        accounts.append(
            CompiledAccount(
                name=account.name,
                discriminator=discriminator,
                body=account.body,
            )
        )

    program = CompiledProgram(
        name=idl.program_name,
        program_id=_program_id(idl, config),
        accounts=accounts,
        instructions=[compile_instruction(ix, config) for ix in idl.instructions],
        types=list(idl.types),
    )
    logger.info(
        "Program compiled",
        extra={
            "program": program.name,
            "accounts": len(program.accounts),
            "instructions": len(program.instructions),
        },
    )
    return program


def compile_program(idl: Idl | dict[str, Any], config: CompilerConfig | None = None) -> CompiledProgram:
    """Normalize then compile, in one fresh run."""
    config = config if config is not None else CompilerConfig()
    return compile_idl(normalize_idl(idl, config), config)
