from __future__ import annotations


class IdlForgeError(Exception):
    """Base class for all idlforge errors."""


class ConfigShapeError(IdlForgeError):
    """Raised when a caller-supplied hook or matcher has the wrong shape."""


class UnknownGeneratorError(IdlForgeError):
    """Raised when an IDL generator/provenance tag is not recognized."""

    def __init__(self, generator: str, available: list[str]) -> None:
        self.generator = generator
        self.available = available
        super().__init__(
            f"Unknown IDL generator '{generator}'. Available: {available}"
        )


class IdlFormatError(IdlForgeError):
    """Raised when the IDL JSON is structurally unusable."""


class MissingAccountError(IdlForgeError):
    """Raised when a required account is not supplied to an account plan."""

    def __init__(self, instruction: str, account: str) -> None:
        self.instruction = instruction
        self.account = account
        super().__init__(
            f"Instruction '{instruction}' requires account '{account}'"
        )


class OptionalAccountsOrderError(IdlForgeError):
    """Raised when an optional account is set after an unset optional account.

    Only the legacy optional accounts strategy can raise this, since there
    the positions of optional accounts shift when one of them is omitted.
    """

    def __init__(self, account: str, missing: list[str]) -> None:
        self.account = account
        self.missing = missing
        needed = ", ".join(f"'accounts.{name}'" for name in missing)
        super().__init__(
            f"When providing '{account}' then {needed} need(s) to be provided as well."
        )
