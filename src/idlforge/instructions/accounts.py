from __future__ import annotations

from dataclasses import dataclass

from idlforge.casing import upper_first
from idlforge.idl.model import AccountCollection, AccountReference
from idlforge.known_pubkeys import ResolvedKnownPubkey, resolve_known_pubkey


@dataclass(frozen=True)
class ProcessedAccountKey:
    """An instruction account after collection expansion and default lookup."""

    name: str
    writable: bool = False
    signer: bool = False
    optional: bool = False
    known_pubkey: ResolvedKnownPubkey | None = None
    desc: str | None = None

    @property
    def has_default(self) -> bool:
        return self.known_pubkey is not None

    @property
    def caller_may_omit(self) -> bool:
        return self.optional or self.known_pubkey is not None


def derive_collection_account_name(account_name: str, collection_name: str) -> str:
    """`signers` + `first` -> `signersItemFirst`."""
    return f"{collection_name}Item{upper_first(account_name)}"


def _process_reference(ref: AccountReference, name: str) -> ProcessedAccountKey:
    return ProcessedAccountKey(
        name=name,
        writable=ref.writable,
        signer=ref.signer,
        optional=ref.optional,
        known_pubkey=resolve_known_pubkey(name, ref.address),
        desc=ref.desc,
    )


def _expand(
    items: list[AccountReference | AccountCollection], prefix: str | None
) -> list[ProcessedAccountKey]:
    keys: list[ProcessedAccountKey] = []
    for item in items:
        name = item.name if prefix is None else derive_collection_account_name(item.name, prefix)
        if isinstance(item, AccountCollection):
            keys.extend(_expand(item.accounts, name))
        else:
            keys.append(_process_reference(item, name))
    return keys


def process_ix_accounts(
    accounts: list[AccountReference | AccountCollection],
) -> list[ProcessedAccountKey]:
    """Flatten an instruction's accounts, expanding collections in place.

    Members of a collection are renamed `<collection>Item<Member>` so they
    cannot clash with other accounts of the instruction.
    """
    return _expand(accounts, None)
