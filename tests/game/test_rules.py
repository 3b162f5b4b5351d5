"""Tests for the per-street betting rules."""

import pytest

from pokerstate.game.actions import ActionType, check_or_call, complete_bet_or_raise_to, fold
from pokerstate.game.cards import parse_cards
from pokerstate.game.errors import IllegalActionError, InsufficientChipsError, OutOfTurnError
from pokerstate.game.rules import BettingRound, find_opener, rotation
from pokerstate.game.state import HoleCard, Player, Visibility
from pokerstate.game.variants import BettingStructure, Opening, Street


def make_players(*stacks):
    return [Player(index, stack) for index, stack in enumerate(stacks)]


def postflop_street(min_bet=2, cap=None):
    return Street(True, (), 1, False, Opening.POSITION, min_bet, cap)


def give_up_cards(player, cards):
    for card in parse_cards(cards):
        player.hole_cards.append(HoleCard(card, Visibility.REVEALED))


class TestRotation:
    def test_rotation(self):
        assert rotation(4, 2) == [2, 3, 0, 1]


class TestFindOpener:
    """Tests for opener selection."""

    def test_first_live_seat_without_bets(self):
        players = make_players(100, 100, 100)
        players[0].folded = True

        assert find_opener(players, postflop_street()) == 1

    def test_player_after_highest_bettor(self):
        players = make_players(100, 100, 100, 100)
        players[0].commit(1)
        players[1].commit(2)

        assert find_opener(players, postflop_street()) == 2

    def test_highest_bettor_ties_go_to_highest_seat(self):
        players = make_players(100, 100, 100, 100)
        players[0].commit(2)
        players[1].commit(2)

        assert find_opener(players, postflop_street()) == 2

    def test_low_card_opens(self):
        players = make_players(100, 100, 100)
        give_up_cards(players[0], "Kh")
        give_up_cards(players[1], "2d")
        give_up_cards(players[2], "2c")
        street = Street(False, (False, False, True), 0, False, Opening.LOW_CARD, 5)

        assert find_opener(players, street) == 2

    def test_high_card_opens_with_aces_low(self):
        players = make_players(100, 100, 100)
        give_up_cards(players[0], "Ac")
        give_up_cards(players[1], "7d")
        give_up_cards(players[2], "6s")
        street = Street(False, (False, False, True), 0, False, Opening.HIGH_CARD, 5)

        assert find_opener(players, street) == 1

    def test_high_hand_ties_go_to_first_seat(self):
        players = make_players(100, 100, 100)
        give_up_cards(players[0], "9c8d")
        give_up_cards(players[1], "QcQd")
        give_up_cards(players[2], "QhQs")
        street = Street(True, (True,), 0, False, Opening.HIGH_HAND, 10)

        assert find_opener(players, street) == 1

    def test_low_hand(self):
        players = make_players(100, 100)
        give_up_cards(players[0], "Kc2d")
        give_up_cards(players[1], "3c4d")
        street = Street(True, (True,), 0, False, Opening.LOW_HAND, 10)

        assert find_opener(players, street) == 1


class TestBettingRound:
    """Tests for legal actions and transitions on one street."""

    def test_unopened_street(self):
        players = make_players(100, 100, 100)
        round_ = BettingRound(players, postflop_street(), BettingStructure.NO_LIMIT)

        assert round_.actor_index == 0
        assert round_.legal_actions() == [check_or_call(0), complete_bet_or_raise_to(2, 100)]

    def test_fold_illegal_when_check_is_available(self):
        round_ = BettingRound(make_players(100, 100), postflop_street(), BettingStructure.NO_LIMIT)

        with pytest.raises(IllegalActionError, match="checking"):
            round_.verify_fold()

    def test_checks_around_close_the_round(self):
        players = make_players(100, 100, 100)
        round_ = BettingRound(players, postflop_street(), BettingStructure.NO_LIMIT)

        for _ in range(3):
            round_.check_or_call()

        assert round_.closed
        assert round_.legal_actions() == []
        with pytest.raises(OutOfTurnError):
            round_.verify_check_or_call()

    def test_bet_and_calls(self):
        players = make_players(100, 100, 100)
        round_ = BettingRound(players, postflop_street(), BettingStructure.NO_LIMIT)

        round_.complete_bet_or_raise_to(10)
        assert round_.actor_index == 1
        assert round_.legal_actions() == [
            fold(),
            check_or_call(10),
            complete_bet_or_raise_to(20, 100),
        ]
        round_.check_or_call()
        round_.check_or_call()

        assert round_.closed
        assert [player.street_bet for player in players] == [10, 10, 10]
        assert round_.aggressor_index == 0

    def test_raise_reopens_action_for_bettor(self):
        players = make_players(100, 100, 100)
        round_ = BettingRound(players, postflop_street(), BettingStructure.NO_LIMIT)

        round_.complete_bet_or_raise_to(10)
        round_.complete_bet_or_raise_to(30)

        assert list(round_.actor_queue) == [2, 0]
        assert round_.min_raise_to(players[2]) == 50

    def test_short_all_in_does_not_reopen(self):
        players = make_players(100, 100, 25)
        round_ = BettingRound(players, postflop_street(), BettingStructure.NO_LIMIT)

        round_.complete_bet_or_raise_to(20)
        round_.check_or_call()
        round_.complete_bet_or_raise_to(25)  # all-in, less than a full raise

        assert round_.actor_index == 0
        assert ActionType.COMPLETE_BET_OR_RAISE_TO not in [a.type for a in round_.legal_actions()]
        with pytest.raises(IllegalActionError, match="may not"):
            round_.verify_raise_to(60)

        round_.check_or_call()
        round_.check_or_call()
        assert round_.closed

    def test_short_all_in_keeps_raise_open_for_players_yet_to_act(self):
        players = make_players(100, 25, 100)
        round_ = BettingRound(players, postflop_street(), BettingStructure.NO_LIMIT)

        round_.complete_bet_or_raise_to(20)
        round_.complete_bet_or_raise_to(25)

        assert round_.actor_index == 2
        assert round_.min_raise_to(players[2]) == 45
        round_.verify_raise_to(45)

    def test_all_in_below_minimum_is_allowed(self):
        players = make_players(100, 15)
        round_ = BettingRound(players, postflop_street(), BettingStructure.NO_LIMIT)
        round_.complete_bet_or_raise_to(10)

        assert round_.legal_actions()[-1] == complete_bet_or_raise_to(15, 15)

    def test_amount_errors(self):
        players = make_players(100, 100)
        round_ = BettingRound(players, postflop_street(), BettingStructure.NO_LIMIT)
        round_.complete_bet_or_raise_to(10)

        with pytest.raises(IllegalActionError, match="below the minimum"):
            round_.verify_raise_to(15)
        with pytest.raises(InsufficientChipsError, match="available"):
            round_.verify_raise_to(101)

    def test_pot_limit_maximum(self):
        players = make_players(100, 100, 100)
        players[0].total_committed = players[1].total_committed = 10  # collected earlier
        round_ = BettingRound(players, postflop_street(), BettingStructure.POT_LIMIT)

        assert round_.max_raise_to(players[0]) == 20
        round_.complete_bet_or_raise_to(20)
        # Pot 20 + bet 20 + call 20 on top of the 20 bet
        assert round_.max_raise_to(players[1]) == 80
        with pytest.raises(InsufficientChipsError, match="pot-limit"):
            round_.verify_raise_to(81)

    def test_fixed_limit_cap(self):
        players = make_players(100, 100)
        round_ = BettingRound(players, postflop_street(4, cap=2), BettingStructure.FIXED_LIMIT)

        assert round_.legal_actions()[-1] == complete_bet_or_raise_to(4, 4)
        round_.complete_bet_or_raise_to(4)
        assert round_.legal_actions()[-1] == complete_bet_or_raise_to(8, 8)
        round_.complete_bet_or_raise_to(8)

        assert round_.legal_actions() == [fold(), check_or_call(4)]

    def test_short_all_in_does_not_count_toward_cap(self):
        players = make_players(100, 6, 100)
        round_ = BettingRound(players, postflop_street(4, cap=2), BettingStructure.FIXED_LIMIT)

        round_.complete_bet_or_raise_to(4)
        round_.complete_bet_or_raise_to(6)  # all-in, short of 8

        assert round_.raise_count == 1
        assert round_.actor_index == 2
        assert round_.legal_actions()[-1] == complete_bet_or_raise_to(10, 10)

    def test_no_raise_when_everyone_else_is_all_in(self):
        players = make_players(100, 100)
        players[1].commit(100)
        players[1].street_bet = 0
        round_ = BettingRound(players, postflop_street(), BettingStructure.NO_LIMIT)

        assert round_.closed

    def test_single_actor_facing_bet_must_act(self):
        players = make_players(100, 5)
        players[0].commit(2)
        players[1].commit(5)
        round_ = BettingRound(players, postflop_street(), BettingStructure.NO_LIMIT)

        assert round_.actor_index == 0
        assert round_.legal_actions() == [fold(), check_or_call(3)]

    def test_fold_to_one_player_closes(self):
        players = make_players(100, 100)
        round_ = BettingRound(players, postflop_street(), BettingStructure.NO_LIMIT)
        round_.complete_bet_or_raise_to(10)
        round_.fold()

        assert round_.closed
        assert players[1].folded


class TestBringIn:
    """Tests for bring-in streets."""

    def make_round(self):
        players = make_players(100, 100, 100)
        give_up_cards(players[0], "Kh")
        give_up_cards(players[1], "2c")
        give_up_cards(players[2], "9d")
        street = Street(False, (False, False, True), 0, False, Opening.LOW_CARD, 5, 4)
        return players, BettingRound(players, street, BettingStructure.FIXED_LIMIT, bring_in=2)

    def test_opener_must_bring_in_or_complete(self):
        players, round_ = self.make_round()

        assert round_.actor_index == 1
        assert [a.type for a in round_.legal_actions()] == [
            ActionType.POST_BRING_IN,
            ActionType.COMPLETE_BET_OR_RAISE_TO,
        ]
        assert round_.legal_actions()[-1] == complete_bet_or_raise_to(5, 5)
        with pytest.raises(IllegalActionError):
            round_.verify_fold()
        with pytest.raises(IllegalActionError):
            round_.verify_check_or_call()

    def test_after_bring_in(self):
        players, round_ = self.make_round()
        assert round_.post_bring_in() == 2

        assert round_.actor_index == 2
        assert round_.legal_actions() == [
            fold(),
            check_or_call(2),
            complete_bet_or_raise_to(5, 5),
        ]

    def test_completion_then_raise(self):
        players, round_ = self.make_round()
        round_.post_bring_in()
        round_.complete_bet_or_raise_to(5)

        assert round_.actor_index == 0
        assert round_.legal_actions()[-1] == complete_bet_or_raise_to(10, 10)

    def test_bring_in_does_not_act_again_without_completion(self):
        players, round_ = self.make_round()
        round_.post_bring_in()
        round_.check_or_call()
        round_.check_or_call()

        assert round_.closed
        assert [player.street_bet for player in players] == [2, 2, 2]

    def test_all_in_opener_skips_bring_in(self):
        players = make_players(100, 0, 100)
        give_up_cards(players[0], "Kh")
        give_up_cards(players[1], "2c")
        give_up_cards(players[2], "9d")
        street = Street(False, (False, False, True), 0, False, Opening.LOW_CARD, 5, 4)
        round_ = BettingRound(players, street, BettingStructure.FIXED_LIMIT, bring_in=2)

        assert round_.opener_index == 1
        assert round_.actor_index == 2
        assert not round_.bring_in_pending
        assert round_.legal_actions() == [check_or_call(0), complete_bet_or_raise_to(5, 5)]
        with pytest.raises(IllegalActionError, match="no bring-in"):
            round_.verify_bring_in()
