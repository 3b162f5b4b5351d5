"""Tests for the state factory and its value cleaning."""

import random

import pytest

from pokerstate.game.cards import Deck, parse_cards
from pokerstate.game.errors import MalformedConfigurationError
from pokerstate.game.games import clean_automations, clean_mode, clean_values, create_state
from pokerstate.game.state import Automation, HandStatus, Mode
from pokerstate.game.variants import NO_LIMIT_TEXAS_HOLDEM
from tests.test_helpers import ALL_AUTOMATIONS


def holdem(**overrides):
    arguments = dict(
        variant="no-limit-texas-holdem",
        automations=ALL_AUTOMATIONS,
        uniform_antes=False,
        antes=0,
        blinds_or_straddles=(1, 2),
        min_bet=2,
        starting_stacks=200,
        player_count=3,
        mode=Mode.CASH_GAME,
    )
    arguments.update(overrides)
    return create_state(**arguments)


class TestCleanValues:
    """Tests for per-seat value expansion."""

    def test_int_applies_to_every_player(self):
        assert clean_values(5, 3) == [5, 5, 5]

    def test_sequence_is_padded(self):
        assert clean_values([1, 2], 4) == [1, 2, 0, 0]

    def test_mapping(self):
        assert clean_values({1: 2, 0: 1}, 3) == [1, 2, 0]

    def test_none_is_zero(self):
        assert clean_values(None, 2) == [0, 0]

    def test_sequence_too_long(self):
        with pytest.raises(MalformedConfigurationError, match="3 entries"):
            clean_values([1, 2, 3], 2, "antes")

    def test_mapping_outside_table(self):
        with pytest.raises(MalformedConfigurationError, match="player 5"):
            clean_values({5: 1}, 3, "blinds")

    def test_negative(self):
        with pytest.raises(MalformedConfigurationError, match="negative"):
            clean_values([1, -2], 2)


class TestCleanAutomationsAndMode:
    def test_names_and_members(self):
        assert clean_automations(["ante_posting", Automation.HAND_KILLING]) == frozenset(
            {Automation.ANTE_POSTING, Automation.HAND_KILLING}
        )

    def test_unknown_automation(self):
        with pytest.raises(MalformedConfigurationError, match="Unknown automation"):
            clean_automations(["shuffling"])

    def test_mode_names(self):
        assert clean_mode("cash_game") == Mode.CASH_GAME
        assert clean_mode("Tournament") == Mode.TOURNAMENT
        with pytest.raises(MalformedConfigurationError):
            clean_mode("sit-and-go")


class TestCreateState:
    """Tests for create_state validation."""

    def test_creates_hand_in_progress(self):
        state = holdem()

        assert state.variant is NO_LIMIT_TEXAS_HOLDEM
        assert state.status() == HandStatus.IN_PROGRESS
        assert state.player_count == 3

    def test_seeded_hands_are_reproducible(self):
        first = holdem(rng=random.Random(7))
        second = holdem(rng=random.Random(7))

        assert [first.hole_cards(i) for i in range(3)] == [second.hole_cards(i) for i in range(3)]

    def test_custom_card_supply(self):
        state = holdem(player_count=2, card_supply=Deck.stacked("As Kd Ah Kc"))

        assert [hole.card for hole in state.hole_cards(0)] == parse_cards("As Ah")

    def test_too_few_players(self):
        with pytest.raises(MalformedConfigurationError, match="at least 2"):
            holdem(player_count=1)

    def test_non_positive_min_bet(self):
        with pytest.raises(MalformedConfigurationError, match="minimum bet"):
            holdem(min_bet=0)

    def test_non_positive_stack(self):
        with pytest.raises(MalformedConfigurationError, match="stacks"):
            holdem(starting_stacks=[200, 0, 200])

    def test_bring_in_required_for_stud(self):
        with pytest.raises(MalformedConfigurationError, match="positive bring-in"):
            holdem(variant="fixed-limit-seven-card-stud", min_bet=5)

    def test_bring_in_must_be_below_min_bet(self):
        with pytest.raises(MalformedConfigurationError, match="smaller"):
            holdem(variant="fixed-limit-seven-card-stud", min_bet=5, bring_in=5)

    def test_bring_in_rejected_for_blind_games(self):
        with pytest.raises(MalformedConfigurationError, match="does not use"):
            holdem(bring_in=1)

    def test_unknown_variant(self):
        with pytest.raises(MalformedConfigurationError, match="Unknown variant"):
            holdem(variant="badugi")

    def test_automation_names(self):
        state = holdem(automations=["ante_posting", "bet_collection"])

        assert state.automations == frozenset({Automation.ANTE_POSTING, Automation.BET_COLLECTION})
        assert state.phase.name == "BLIND_OR_STRADDLE_POSTING"
