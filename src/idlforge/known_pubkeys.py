"""Well-known accounts whose address can be filled in without caller input."""
from __future__ import annotations

from dataclasses import dataclass

from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID

from idlforge.errors import IdlFormatError

TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")
SYSVAR_RENT_PUBKEY = Pubkey.from_string("SysvarRent111111111111111111111111111111111")
SYSVAR_CLOCK_PUBKEY = Pubkey.from_string("SysvarC1ock11111111111111111111111111111111")
SYSVAR_INSTRUCTIONS_PUBKEY = Pubkey.from_string("Sysvar1nstructions1111111111111111111111111")

# Keyed by the camelCase account name used in normalized IDLs.
# None stands for the address of the program the instruction targets.
KNOWN_PUBKEYS: dict[str, Pubkey | None] = {
    "systemProgram": SYSTEM_PROGRAM_ID,
    "tokenProgram": TOKEN_PROGRAM_ID,
    "ataProgram": ASSOCIATED_TOKEN_PROGRAM_ID,
    "associatedTokenProgram": ASSOCIATED_TOKEN_PROGRAM_ID,
    "rent": SYSVAR_RENT_PUBKEY,
    "clock": SYSVAR_CLOCK_PUBKEY,
    "instructions": SYSVAR_INSTRUCTIONS_PUBKEY,
    "programId": None,
}


@dataclass(frozen=True)
class ResolvedKnownPubkey:
    name: str
    address: Pubkey | None = None

    @property
    def is_program_id(self) -> bool:
        return self.address is None

    def resolve(self, program_id: Pubkey) -> Pubkey:
        return program_id if self.address is None else self.address


def is_known_pubkey(name: str) -> bool:
    return name in KNOWN_PUBKEYS


def resolve_known_pubkey(name: str, address: str | None = None) -> ResolvedKnownPubkey | None:
    """Default address for an account, from an explicit IDL address or by name."""
    if address is not None:
        try:
            return ResolvedKnownPubkey(name, Pubkey.from_string(address))
        except ValueError as e:
            raise IdlFormatError(f"Account '{name}' has invalid address '{address}'") from e
    if name in KNOWN_PUBKEYS:
        return ResolvedKnownPubkey(name, KNOWN_PUBKEYS[name])
    return None
