"""Discriminators must match what Anchor programs compute on-chain."""
from __future__ import annotations

import hashlib

from idlforge.discriminator import (
    ACCOUNT_DISCRIMINATOR_SIZE,
    account_discriminator,
    event_discriminator,
    instruction_discriminator,
    sighash,
)


def _sha8(preimage: str) -> bytes:
    return hashlib.sha256(preimage.encode()).digest()[:8]


class TestAccountDiscriminator:
    def test_matches_anchor_preimage(self):
        assert account_discriminator("MatchPool") == _sha8("account:MatchPool")

    def test_name_is_pascal_cased(self):
        assert account_discriminator("match_pool") == account_discriminator("MatchPool")
        assert account_discriminator("matchPool") == account_discriminator("MatchPool")

    def test_size(self):
        assert len(account_discriminator("Bet")) == ACCOUNT_DISCRIMINATOR_SIZE


class TestInstructionDiscriminator:
    def test_matches_anchor_preimage(self):
        assert instruction_discriminator("place_bet") == _sha8("global:place_bet")

    def test_name_is_snake_cased(self):
        assert instruction_discriminator("placeBet") == _sha8("global:place_bet")

    def test_custom_namespace(self):
        assert sighash("state", "initialize") == _sha8("state:initialize")


def test_event_discriminator():
    assert event_discriminator("bet_placed") == _sha8("event:BetPlaced")
