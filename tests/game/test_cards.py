"""Tests for cards, decks and card parsing."""

import random

import pytest

from pokerstate.game.cards import Card, Deck, coerce_cards, parse_cards
from pokerstate.game.errors import CardSupplyExhaustedError


class TestCard:
    """Tests for Card class."""

    def test_create_card(self):
        card = Card.new("As")
        assert card.rank == "A"
        assert card.suit == "s"

    def test_cards_are_cached(self):
        assert Card.new("Kh") is Card.new("Kh")

    def test_card_equality_and_hash(self):
        assert Card.new("2c") == Card.new("2c")
        assert Card.new("2c") != Card.new("2d")
        assert hash(Card.new("Td")) == hash(Card.new("Td"))

    def test_card_repr(self):
        assert repr(Card.new("Qd")) == "Qd"

    def test_rank_and_suit_indices(self):
        assert Card.new("2c").rank_index == 0
        assert Card.new("As").rank_index == 12
        assert Card.new("2c").suit_index == 0
        assert Card.new("2s").suit_index == 3

    def test_ordering_is_rank_then_suit(self):
        assert Card.new("2s") < Card.new("3c")
        assert Card.new("5c") < Card.new("5d")
        assert sorted(parse_cards("Ah 2d 2c")) == parse_cards("2c 2d Ah")

    @pytest.mark.parametrize("raw", ["", "A", "1s", "Ax", "AsK"])
    def test_invalid_card_string(self, raw):
        with pytest.raises(ValueError):
            Card.new(raw)


class TestParsing:
    """Tests for parse_cards and coerce_cards."""

    def test_parse_concatenated(self):
        assert [repr(card) for card in parse_cards("AsKh2d")] == ["As", "Kh", "2d"]

    def test_parse_separated_and_tens(self):
        assert [repr(card) for card in parse_cards("10s, Jc  9h")] == ["Ts", "Jc", "9h"]

    def test_parse_odd_length(self):
        with pytest.raises(ValueError, match="multiple of 2"):
            parse_cards("AsK")

    def test_coerce_mixed(self):
        cards = coerce_cards([Card.new("As"), "KhQh"])
        assert [repr(card) for card in cards] == ["As", "Kh", "Qh"]

    def test_coerce_single_card(self):
        assert coerce_cards(Card.new("7c")) == [Card.new("7c")]


class TestDeck:
    """Tests for the default card supply."""

    def test_standard_deck_has_52_unique_cards(self):
        deck = Deck.standard(random.Random(1))
        cards = [deck.next_card() for _ in range(52)]
        assert len(set(cards)) == 52

    def test_unshuffled_order(self):
        deck = Deck.standard()
        assert [deck.next_card() for _ in range(3)] == parse_cards("2c2d2h")

    def test_seeded_shuffle_is_reproducible(self):
        first = Deck.standard(random.Random(42))
        second = Deck.standard(random.Random(42))
        assert [first.next_card() for _ in range(10)] == [second.next_card() for _ in range(10)]

    def test_stacked_deck(self):
        deck = Deck.stacked("AsKs")
        assert deck.next_card() == Card.new("As")
        assert deck.next_card() == Card.new("Ks")
        assert len(deck) == 0

    def test_exhaustion(self):
        deck = Deck.stacked("As")
        deck.next_card()
        with pytest.raises(CardSupplyExhaustedError):
            deck.next_card()
