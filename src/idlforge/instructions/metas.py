"""Account metadata plans for instructions.

A plan is the ordered list of steps that turns the accounts a caller
supplies into the `AccountMeta` list of an instruction. Two strategies exist
for optional accounts:

a) default to program id: every account keeps a fixed slot; an optional
   account that is not supplied is replaced by the program id with
   writable/signer cleared.

b) omit if absent (legacy): accounts are fixed slots up to the first optional
   one; from there on each account is pushed, optional ones only when
   supplied. An optional account that is set cannot follow an optional
   account that is unset, which `PushStep` guards at build time.
"""
from __future__ import annotations

import enum
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from solders.instruction import AccountMeta
from solders.pubkey import Pubkey

from idlforge.errors import MissingAccountError, OptionalAccountsOrderError
from idlforge.instructions.accounts import ProcessedAccountKey

logger = logging.getLogger(__name__)


class OptionalAccountsStrategy(str, enum.Enum):
    DEFAULT_TO_PROGRAM_ID = "default_to_program_id"
    OMIT_IF_ABSENT = "omit_if_absent"


@dataclass(frozen=True)
class FixedSlot:
    key: ProcessedAccountKey
    default_to_program_id: bool = False


@dataclass(frozen=True)
class PushStep:
    key: ProcessedAccountKey
    # earlier optional accounts that must be supplied if this one is
    requires: tuple[str, ...] = ()

    @property
    def conditional(self) -> bool:
        return self.key.optional


@dataclass(frozen=True)
class RemainingAccountsStep:
    """Appends caller-supplied trailing accounts verbatim."""


AccountMetaStep = FixedSlot | PushStep | RemainingAccountsStep


def _meta(pubkey: Pubkey, key: ProcessedAccountKey) -> AccountMeta:
    return AccountMeta(pubkey, is_signer=key.signer, is_writable=key.writable)


@dataclass(frozen=True)
class AccountMetasPlan:
    instruction: str
    strategy: OptionalAccountsStrategy
    steps: tuple[AccountMetaStep, ...] = ()

    @property
    def fixed_slots(self) -> list[FixedSlot]:
        return [s for s in self.steps if isinstance(s, FixedSlot)]

    @property
    def push_steps(self) -> list[PushStep]:
        return [s for s in self.steps if isinstance(s, PushStep)]

    @property
    def has_remaining_accounts(self) -> bool:
        return any(isinstance(s, RemainingAccountsStep) for s in self.steps)

    def build(
        self,
        accounts: Mapping[str, Pubkey | None],
        program_id: Pubkey,
        remaining_accounts: Sequence[AccountMeta] = (),
    ) -> list[AccountMeta]:
        """Run the plan against the accounts a caller supplied.

        Raises MissingAccountError for a required account without a default,
        and OptionalAccountsOrderError when the legacy ordering guard fails.
        """
        metas: list[AccountMeta] = []
        for step in self.steps:
            if isinstance(step, FixedSlot):
                metas.append(self._fixed(step, accounts, program_id))
            elif isinstance(step, PushStep):
                meta = self._push(step, accounts, program_id)
                if meta is not None:
                    metas.append(meta)
            else:
                metas.extend(remaining_accounts)
        return metas

    def _required(
        self, key: ProcessedAccountKey, accounts: Mapping[str, Pubkey | None], program_id: Pubkey
    ) -> AccountMeta:
        supplied = accounts.get(key.name)
        if supplied is not None:
            return _meta(supplied, key)
        if key.known_pubkey is not None:
            return _meta(key.known_pubkey.resolve(program_id), key)
        raise MissingAccountError(self.instruction, key.name)

    def _fixed(
        self, step: FixedSlot, accounts: Mapping[str, Pubkey | None], program_id: Pubkey
    ) -> AccountMeta:
        key = step.key
        if (
            step.default_to_program_id
            and accounts.get(key.name) is None
            and key.known_pubkey is None
        ):
            return AccountMeta(program_id, is_signer=False, is_writable=False)
        return self._required(key, accounts, program_id)

    def _push(
        self, step: PushStep, accounts: Mapping[str, Pubkey | None], program_id: Pubkey
    ) -> AccountMeta | None:
        key = step.key
        if not key.optional:
            return self._required(key, accounts, program_id)

        supplied = accounts.get(key.name)
        if supplied is None:
            return None
        missing = [name for name in step.requires if accounts.get(name) is None]
        if missing:
            raise OptionalAccountsOrderError(key.name, missing)
        return _meta(supplied, key)

    def to_dict(self) -> dict[str, Any]:
        """Plain description of the steps for template renderers."""
        steps: list[dict[str, Any]] = []
        for step in self.steps:
            if isinstance(step, RemainingAccountsStep):
                steps.append({"kind": "remainingAccounts"})
                continue
            key = step.key
            entry: dict[str, Any] = {
                "name": key.name,
                "writable": key.writable,
                "signer": key.signer,
                "optional": key.optional,
            }
            if key.known_pubkey is not None:
                address = key.known_pubkey.address
                entry["default"] = "programId" if address is None else str(address)
            if isinstance(step, FixedSlot):
                entry["kind"] = "fixed"
                entry["defaultToProgramId"] = step.default_to_program_id
            else:
                entry["kind"] = "push"
                entry["requires"] = list(step.requires)
            steps.append(entry)
        return {"instruction": self.instruction, "strategy": self.strategy.value, "steps": steps}


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def _default_to_program_id_steps(keys: list[ProcessedAccountKey]) -> list[AccountMetaStep]:
    return [FixedSlot(key, default_to_program_id=key.optional) for key in keys]


def _omit_if_absent_steps(keys: list[ProcessedAccountKey]) -> list[AccountMetaStep]:
    first_optional = next((i for i, key in enumerate(keys) if key.optional), None)
    if first_optional is None:
        return [FixedSlot(key) for key in keys]

    steps: list[AccountMetaStep] = [FixedSlot(key) for key in keys[:first_optional]]
    earlier_optionals: list[str] = []
    for key in keys[first_optional:]:
        if key.optional:
            steps.append(PushStep(key, requires=tuple(earlier_optionals)))
            earlier_optionals.append(key.name)
        else:
            steps.append(PushStep(key))
    return steps


def compile_account_metas(
    instruction: str,
    keys: list[ProcessedAccountKey],
    strategy: OptionalAccountsStrategy = OptionalAccountsStrategy.DEFAULT_TO_PROGRAM_ID,
    remaining_accounts: bool = False,
) -> AccountMetasPlan:
    if strategy is OptionalAccountsStrategy.OMIT_IF_ABSENT:
        steps = _omit_if_absent_steps(keys)
    else:
        steps = _default_to_program_id_steps(keys)

    # Only instructions that take accounts at all accept trailing ones.
    if remaining_accounts and keys:
        steps.append(RemainingAccountsStep())

    logger.debug(
        "Account metas compiled",
        extra={"instruction": instruction, "strategy": strategy.value, "steps": len(steps)},
    )
    return AccountMetasPlan(instruction=instruction, strategy=strategy, steps=tuple(steps))
