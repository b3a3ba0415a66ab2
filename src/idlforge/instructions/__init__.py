from __future__ import annotations

from idlforge.instructions.accounts import (
    ProcessedAccountKey,
    derive_collection_account_name,
    process_ix_accounts,
)
from idlforge.instructions.compiler import (
    CompiledAccount,
    CompiledInstruction,
    CompiledProgram,
    compile_idl,
    compile_instruction,
    compile_program,
)
from idlforge.instructions.metas import (
    AccountMetasPlan,
    FixedSlot,
    OptionalAccountsStrategy,
    PushStep,
    RemainingAccountsStep,
    compile_account_metas,
)

__all__ = [
    "AccountMetasPlan",
    "CompiledAccount",
    "CompiledInstruction",
    "CompiledProgram",
    "FixedSlot",
    "OptionalAccountsStrategy",
    "ProcessedAccountKey",
    "PushStep",
    "RemainingAccountsStep",
    "compile_account_metas",
    "compile_idl",
    "compile_instruction",
    "compile_program",
    "derive_collection_account_name",
    "process_ix_accounts",
]
