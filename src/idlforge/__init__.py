"""Normalizes Solana program IDLs and compiles instruction account metadata."""
from __future__ import annotations

from idlforge.config import CompilerConfig
from idlforge.discriminator import (
    account_discriminator,
    event_discriminator,
    instruction_discriminator,
)
from idlforge.errors import (
    ConfigShapeError,
    IdlForgeError,
    IdlFormatError,
    MissingAccountError,
    OptionalAccountsOrderError,
    UnknownGeneratorError,
)
from idlforge.idl.model import Idl
from idlforge.instructions.compiler import compile_idl, compile_instruction, compile_program
from idlforge.normalize import IdlNormalizer, normalize_idl
from idlforge.resolution.resolver import TypeResolver

__all__ = [
    "CompilerConfig",
    "ConfigShapeError",
    "Idl",
    "IdlForgeError",
    "IdlFormatError",
    "IdlNormalizer",
    "MissingAccountError",
    "OptionalAccountsOrderError",
    "TypeResolver",
    "UnknownGeneratorError",
    "account_discriminator",
    "compile_idl",
    "compile_instruction",
    "compile_program",
    "event_discriminator",
    "instruction_discriminator",
    "normalize_idl",
]
