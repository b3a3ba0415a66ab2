"""Shared IDL fixtures.

Each fixture returns a fresh dict so tests may mutate freely.
"""
from __future__ import annotations

import hashlib

import pytest

PROGRAM_ID = "AQCBqFfB3hH6CMRNk745NputeXnK7L8nvj15zkAZpd7K"


def sha_disc(preimage: str) -> list[int]:
    return list(hashlib.sha256(preimage.encode()).digest()[:8])


@pytest.fixture
def legacy_anchor_idl() -> dict:
    """Pre-0.30 Anchor IDL with the kinds of broken types anchor emits."""
    return {
        "version": "0.1.0",
        "name": "data_store",
        "instructions": [
            {
                "name": "store_item",
                "accounts": [
                    {"name": "data_account", "isMut": True, "isSigner": False},
                    {"name": "authority", "isMut": True, "isSigner": True},
                    {"name": "system_program", "isMut": False, "isSigner": False},
                ],
                "args": [
                    {"name": "item_key", "type": "String"},
                    {"name": "item_values", "type": {"defined": "BTreeMap<String,DataItem>"}},
                    {"name": "maybe_pairs", "type": {"defined": "Vec<Option<(u8, Pubkey)>>"}},
                ],
            },
            {
                "name": "close_store",
                "accounts": [
                    {"name": "data_account", "isMut": True, "isSigner": False},
                    {
                        "name": "signers",
                        "accounts": [
                            {"name": "first", "isMut": False, "isSigner": True},
                            {"name": "second", "isMut": False, "isSigner": True},
                        ],
                    },
                ],
                "args": [],
            },
        ],
        "accounts": [
            {
                "name": "DataAccount",
                "type": {
                    "kind": "struct",
                    "fields": [
                        {"name": "owner_key", "type": "publicKey"},
                        {"name": "items", "type": {"defined": "HashMap<String,DataItem>"}},
                    ],
                },
            }
        ],
        "types": [
            {
                "name": "DataItem",
                "type": {
                    "kind": "struct",
                    "fields": [
                        {"name": "created_at", "type": "i64"},
                        {"name": "tags", "type": {"vec": {"defined": "Option<String>"}}},
                    ],
                },
            },
            {
                "name": "ItemState",
                "type": {
                    "kind": "enum",
                    "variants": [
                        {"name": "Empty"},
                        {"name": "Filled", "fields": [{"name": "fill_level", "type": "u8"}]},
                        {"name": "Linked", "fields": [{"defined": "Node"}, "U64"]},
                    ],
                },
            },
        ],
    }


@pytest.fixture
def anchor_030_idl() -> dict:
    """0.30-style IDL: account bodies live in `types`, flags spelled writable/signer."""
    return {
        "address": PROGRAM_ID,
        "metadata": {"name": "rawl", "version": "0.1.0", "spec": "0.1.0"},
        "instructions": [
            {
                "name": "place_bet",
                "discriminator": sha_disc("global:place_bet"),
                "accounts": [
                    {"name": "match_pool", "writable": True},
                    {"name": "bettor", "writable": True, "signer": True},
                    {"name": "system_program", "address": "11111111111111111111111111111111"},
                ],
                "args": [
                    {"name": "match_id", "type": {"array": ["u8", 32]}},
                    {"name": "amount", "type": "u64"},
                ],
            }
        ],
        "accounts": [
            {"name": "MatchPool", "discriminator": sha_disc("account:MatchPool")},
        ],
        "types": [
            {
                "name": "MatchPool",
                "type": {
                    "kind": "struct",
                    "fields": [
                        {"name": "fighter_a", "type": "pubkey"},
                        {"name": "side_a_total", "type": "u64"},
                        {"name": "status", "type": {"defined": {"name": "MatchStatus"}}},
                    ],
                },
            },
            {
                "name": "MatchStatus",
                "type": {"kind": "enum", "variants": [{"name": "Open"}, {"name": "Locked"}]},
            },
        ],
        "events": [{"name": "BetPlaced", "discriminator": sha_disc("event:BetPlaced")}],
    }


@pytest.fixture
def shank_idl() -> dict:
    return {
        "version": "0.1.0",
        "name": "counter",
        "instructions": [
            {
                "name": "Increment",
                "accounts": [{"name": "counter", "isMut": True, "isSigner": False}],
                "args": [{"name": "by", "type": "u64"}],
                "discriminant": {"type": "u8", "value": 1},
            }
        ],
        "accounts": [
            {
                "name": "Counter",
                "type": {"kind": "struct", "fields": [{"name": "count", "type": "u64"}]},
            }
        ],
        "metadata": {"origin": "shank"},
    }


@pytest.fixture
def shank_vault_idl() -> dict:
    """Shank IDL using shapes only Shank emits: coption, sets, isOptional."""
    return {
        "version": "0.2.0",
        "name": "vault",
        "instructions": [
            {
                "name": "SetAuthority",
                "accounts": [
                    {"name": "vault", "isMut": True, "isSigner": False},
                    {"name": "authority", "isMut": False, "isSigner": True},
                    {"name": "newAuthority", "isMut": False, "isSigner": False, "isOptional": True},
                ],
                "args": [
                    {"name": "authority", "type": {"coption": "publicKey"}},
                    {"name": "tags", "type": {"hashSet": "u8"}},
                ],
                "discriminant": {"type": "u8", "value": 3},
            }
        ],
        "accounts": [],
        "types": [
            {
                "name": "Allowlist",
                "type": {
                    "kind": "struct",
                    "fields": [{"name": "members", "type": {"bTreeSet": "publicKey"}}],
                },
            }
        ],
        "errors": [{"code": 0, "name": "Locked", "msg": "Vault is locked"}],
        "metadata": {"origin": "shank"},
    }
