from __future__ import annotations

import hashlib

import pytest
from solders.instruction import AccountMeta
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID

from idlforge.config import CompilerConfig
from idlforge.discriminator import account_discriminator
from idlforge.errors import IdlFormatError
from idlforge.idl import Idl, InstructionDescriptor, Primitive
from idlforge.instructions import (
    OptionalAccountsStrategy,
    RemainingAccountsStep,
    compile_idl,
    compile_instruction,
    compile_program,
)

PROGRAM_ID = "AQCBqFfB3hH6CMRNk745NputeXnK7L8nvj15zkAZpd7K"


class TestCompileProgram:
    def test_anchor_030_program(self, anchor_030_idl):
        program = compile_program(anchor_030_idl)
        assert program.name == "rawl"
        assert program.program_id == Pubkey.from_string(PROGRAM_ID)

        pool = program.account("MatchPool")
        assert list(pool.discriminator) == anchor_030_idl["accounts"][0]["discriminator"]
        assert [f.name for f in pool.body.fields] == ["fighterA", "sideATotal", "status"]

    def test_instruction_names_and_typenames(self, anchor_030_idl):
        ix = compile_program(anchor_030_idl).instruction("placeBet")
        assert ix.upper_camel_name == "PlaceBet"
        assert ix.args_typename == "PlaceBetInstructionArgs"
        assert ix.accounts_typename == "PlaceBetInstructionAccounts"
        assert not ix.has_optional_accounts
        assert [a.type for a in ix.args][1] == Primitive("u64")

    def test_to_instruction(self, anchor_030_idl):
        program = compile_program(anchor_030_idl)
        ix = program.instruction("placeBet")
        pool, bettor = Pubkey.new_unique(), Pubkey.new_unique()
        data = (1000).to_bytes(8, "little")

        built = ix.to_instruction({"matchPool": pool, "bettor": bettor}, program.program_id, data)

        assert built.program_id == program.program_id
        assert bytes(built.data) == hashlib.sha256(b"global:place_bet").digest()[:8] + data
        assert built.accounts == [
            AccountMeta(pool, is_signer=False, is_writable=True),
            AccountMeta(bettor, is_signer=True, is_writable=True),
            AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        ]

    def test_legacy_program_computes_discriminators(self, legacy_anchor_idl):
        program = compile_program(legacy_anchor_idl)
        assert program.program_id is None
        assert program.account("DataAccount").discriminator == account_discriminator("DataAccount")
        assert program.instruction("closeStore").discriminator == (
            hashlib.sha256(b"global:close_store").digest()[:8]
        )

    def test_collection_members_in_account_keys(self, legacy_anchor_idl):
        ix = compile_program(legacy_anchor_idl).instruction("closeStore")
        assert [k.name for k in ix.account_keys] == [
            "dataAccount",
            "signersItemFirst",
            "signersItemSecond",
        ]

    def test_config_program_id_wins(self, anchor_030_idl):
        other = str(Pubkey.new_unique())
        program = compile_program(anchor_030_idl, CompilerConfig(program_id=other))
        assert str(program.program_id) == other

    def test_invalid_program_id(self, anchor_030_idl):
        anchor_030_idl["address"] = "zzz"
        with pytest.raises(IdlFormatError, match="Invalid program id"):
            compile_program(anchor_030_idl)

    def test_shank_discriminant(self, shank_idl):
        program = compile_program(shank_idl)
        assert program.instruction("Increment").discriminator == b"\x01"
        assert program.account("Counter").discriminator is None

    def test_shank_only_shapes_compile(self, shank_vault_idl):
        program = compile_program(shank_vault_idl)
        ix = program.instruction("SetAuthority")
        assert ix.discriminator == b"\x03"
        assert [k.optional for k in ix.account_keys] == [False, False, True]
        assert ix.has_optional_accounts

    def test_unknown_lookups(self, anchor_030_idl):
        program = compile_program(anchor_030_idl)
        with pytest.raises(KeyError):
            program.instruction("nope")
        with pytest.raises(KeyError):
            program.account("Nope")

    def test_unnormalized_account_rejected(self, anchor_030_idl):
        with pytest.raises(IdlFormatError, match="normalize"):
            compile_idl(Idl.from_dict(anchor_030_idl))


class TestCompileInstruction:
    def _ix(self, **flags):
        return InstructionDescriptor.from_dict(
            {
                "name": "swap",
                "accounts": [
                    {"name": "user", "signer": True},
                    {"name": "referrer", "optional": True},
                ],
                "args": [],
                **flags,
            }
        )

    def test_default_strategy(self):
        compiled = compile_instruction(self._ix())
        assert compiled.account_metas.strategy is OptionalAccountsStrategy.DEFAULT_TO_PROGRAM_ID
        assert compiled.has_optional_accounts

    def test_legacy_strategy_flag(self):
        compiled = compile_instruction(self._ix(legacyOptionalAccountsStrategy=True))
        assert compiled.account_metas.strategy is OptionalAccountsStrategy.OMIT_IF_ABSENT

    def test_remaining_accounts_from_config(self):
        compiled = compile_instruction(self._ix(), CompilerConfig(anchor_remaining_accounts=True))
        assert isinstance(compiled.account_metas.steps[-1], RemainingAccountsStep)

    def test_instruction_flag_overrides_config(self):
        compiled = compile_instruction(
            self._ix(remainingAccounts=False), CompilerConfig(anchor_remaining_accounts=True)
        )
        assert not compiled.account_metas.has_remaining_accounts
