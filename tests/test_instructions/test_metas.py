"""Tests for account metadata plans under both optional-accounts strategies."""
from __future__ import annotations

import pytest
from solders.instruction import AccountMeta
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID

from idlforge.errors import MissingAccountError, OptionalAccountsOrderError
from idlforge.instructions import (
    FixedSlot,
    OptionalAccountsStrategy,
    ProcessedAccountKey,
    PushStep,
    RemainingAccountsStep,
    compile_account_metas,
)
from idlforge.known_pubkeys import resolve_known_pubkey

PROGRAM = Pubkey.new_unique()
A = Pubkey.new_unique()
B = Pubkey.new_unique()
C = Pubkey.new_unique()

KEYS = [
    ProcessedAccountKey("a", writable=True, signer=True),
    ProcessedAccountKey("b", writable=True, optional=True),
    ProcessedAccountKey("c", optional=True),
]


def _legacy(keys=KEYS, **kwargs):
    return compile_account_metas("ix", keys, OptionalAccountsStrategy.OMIT_IF_ABSENT, **kwargs)


class TestDefaultToProgramId:
    def test_every_account_has_a_fixed_slot(self):
        plan = compile_account_metas("ix", KEYS)
        assert len(plan.fixed_slots) == 3
        assert not plan.push_steps
        assert [s.default_to_program_id for s in plan.fixed_slots] == [False, True, True]

    def test_missing_optional_becomes_program_id(self):
        metas = compile_account_metas("ix", KEYS).build({"a": A, "c": C}, PROGRAM)
        assert metas == [
            AccountMeta(A, is_signer=True, is_writable=True),
            AccountMeta(PROGRAM, is_signer=False, is_writable=False),
            AccountMeta(C, is_signer=False, is_writable=False),
        ]

    def test_supplied_optional_keeps_flags(self):
        metas = compile_account_metas("ix", KEYS).build({"a": A, "b": B}, PROGRAM)
        assert metas[1] == AccountMeta(B, is_signer=False, is_writable=True)
        assert metas[2].pubkey == PROGRAM

    def test_missing_required_account(self):
        with pytest.raises(MissingAccountError, match="requires account 'a'"):
            compile_account_metas("ix", KEYS).build({}, PROGRAM)

    def test_known_pubkey_default_keeps_declared_flags(self):
        keys = [
            ProcessedAccountKey("payer", writable=True, signer=True),
            ProcessedAccountKey(
                "systemProgram", known_pubkey=resolve_known_pubkey("systemProgram")
            ),
        ]
        metas = compile_account_metas("ix", keys).build({"payer": A}, PROGRAM)
        assert metas[1] == AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False)

    def test_program_id_known_pubkey(self):
        keys = [ProcessedAccountKey("programId", known_pubkey=resolve_known_pubkey("programId"))]
        metas = compile_account_metas("ix", keys).build({}, PROGRAM)
        assert metas == [AccountMeta(PROGRAM, is_signer=False, is_writable=False)]

    def test_caller_overrides_known_pubkey(self):
        keys = [
            ProcessedAccountKey("systemProgram", known_pubkey=resolve_known_pubkey("systemProgram"))
        ]
        metas = compile_account_metas("ix", keys).build({"systemProgram": A}, PROGRAM)
        assert metas[0].pubkey == A


class TestOmitIfAbsent:
    def test_fixed_slots_stop_at_first_optional(self):
        plan = _legacy()
        assert [type(s) for s in plan.steps] == [FixedSlot, PushStep, PushStep]
        assert plan.steps[1].requires == ()
        assert plan.steps[2].requires == ("b",)
        assert plan.steps[2].conditional

    def test_required_after_optional_is_pushed_unconditionally(self):
        keys = [*KEYS, ProcessedAccountKey("d", writable=True)]
        plan = _legacy(keys)
        last = plan.steps[-1]
        assert isinstance(last, PushStep)
        assert not last.conditional
        assert last.requires == ()

    def test_absent_optionals_are_omitted(self):
        metas = _legacy().build({"a": A}, PROGRAM)
        assert metas == [AccountMeta(A, is_signer=True, is_writable=True)]

    def test_all_supplied(self):
        metas = _legacy().build({"a": A, "b": B, "c": C}, PROGRAM)
        assert [m.pubkey for m in metas] == [A, B, C]

    def test_leading_optional_supplied_alone(self):
        metas = _legacy().build({"a": A, "b": B}, PROGRAM)
        assert [m.pubkey for m in metas] == [A, B]

    def test_later_optional_without_earlier_one(self):
        with pytest.raises(OptionalAccountsOrderError) as exc_info:
            _legacy().build({"a": A, "c": C}, PROGRAM)
        assert exc_info.value.account == "c"
        assert exc_info.value.missing == ["b"]
        assert "'accounts.b'" in str(exc_info.value)

    def test_guard_lists_only_missing_optionals(self):
        keys = [
            ProcessedAccountKey("a", optional=True),
            ProcessedAccountKey("b", optional=True),
            ProcessedAccountKey("c", optional=True),
        ]
        with pytest.raises(OptionalAccountsOrderError) as exc_info:
            _legacy(keys).build({"a": A, "c": C}, PROGRAM)
        assert exc_info.value.missing == ["b"]

    def test_without_optionals_same_as_fixed(self):
        keys = [ProcessedAccountKey("a"), ProcessedAccountKey("b")]
        plan = _legacy(keys)
        assert all(isinstance(s, FixedSlot) for s in plan.steps)
        assert not any(s.default_to_program_id for s in plan.fixed_slots)


class TestRemainingAccounts:
    def test_appended_after_declared_accounts(self):
        extra = AccountMeta(Pubkey.new_unique(), is_signer=False, is_writable=True)
        plan = compile_account_metas("ix", KEYS, remaining_accounts=True)
        assert isinstance(plan.steps[-1], RemainingAccountsStep)
        metas = plan.build({"a": A}, PROGRAM, remaining_accounts=[extra])
        assert metas[-1] == extra
        assert len(metas) == 4

    def test_not_emitted_without_accounts(self):
        assert not compile_account_metas("ix", [], remaining_accounts=True).has_remaining_accounts

    def test_off_by_default(self):
        assert not compile_account_metas("ix", KEYS).has_remaining_accounts


class TestToDict:
    def test_describes_steps(self):
        keys = [*KEYS, ProcessedAccountKey("rent", known_pubkey=resolve_known_pubkey("rent"))]
        out = _legacy(keys, remaining_accounts=True).to_dict()
        assert out["strategy"] == "omit_if_absent"
        kinds = [s["kind"] for s in out["steps"]]
        assert kinds == ["fixed", "push", "push", "push", "remainingAccounts"]
        assert out["steps"][2]["requires"] == ["b"]
        assert out["steps"][3]["default"] == "SysvarRent111111111111111111111111111111111"
