"""Anchor-compatible discriminators.

Accounts:     SHA256("account:<UpperCamelName>")[:8]
Instructions: SHA256("global:<lower_snake_name>")[:8]
Events:       SHA256("event:<UpperCamelName>")[:8]

The canonicalization and preimage format must match what deployed programs
compute on-chain, byte for byte.
"""
from __future__ import annotations

import hashlib

from idlforge.casing import pascal_case, snake_case

ACCOUNT_DISCRIMINATOR_SIZE = 8
SIGHASH_GLOBAL_NAMESPACE = "global"
ACCOUNT_NAMESPACE = "account"
EVENT_NAMESPACE = "event"


def _digest(preimage: str) -> bytes:
    return hashlib.sha256(preimage.encode()).digest()[:ACCOUNT_DISCRIMINATOR_SIZE]


def sighash(namespace: str, name: str) -> bytes:
    """Discriminator for a function `name` in `namespace`."""
    return _digest(f"{namespace}:{snake_case(name)}")


def account_discriminator(name: str) -> bytes:
    """8-byte discriminator prepended to all account data of type `name`."""
    return _digest(f"{ACCOUNT_NAMESPACE}:{pascal_case(name)}")


def instruction_discriminator(name: str) -> bytes:
    """8-byte discriminator prepended to all instruction data for `name`."""
    return sighash(SIGHASH_GLOBAL_NAMESPACE, name)


def event_discriminator(name: str) -> bytes:
    return _digest(f"{EVENT_NAMESPACE}:{pascal_case(name)}")
