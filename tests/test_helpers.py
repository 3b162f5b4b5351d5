"""Test helpers for hand state tests."""

import random

from pokerstate.game.actions import ActionType
from pokerstate.game.cards import Deck
from pokerstate.game.games import create_state
from pokerstate.game.state import Automation, HandStatus, Mode, Phase

ALL_AUTOMATIONS = tuple(Automation)

# Everything except burning and board dealing, so a hand stops between streets
SCENARIO_AUTOMATIONS = (
    Automation.ANTE_POSTING,
    Automation.BET_COLLECTION,
    Automation.BLIND_OR_STRADDLE_POSTING,
    Automation.HOLE_DEALING,
    Automation.HOLE_CARDS_SHOWING_OR_MUCKING,
    Automation.HAND_KILLING,
    Automation.CHIPS_PUSHING,
    Automation.CHIPS_PULLING,
)


def make_holdem(
    stacks=200,
    player_count=3,
    blinds=None,
    antes=0,
    min_bet=2,
    variant="no-limit-texas-holdem",
    automations=ALL_AUTOMATIONS,
    deck=None,
    mode=Mode.CASH_GAME,
    seed=0,
):
    """Create a blinds game with sensible test defaults."""
    return create_state(
        variant,
        automations,
        False,
        antes,
        {0: 1, 1: 2} if blinds is None else blinds,
        min_bet,
        stacks,
        player_count,
        mode,
        card_supply=Deck.stacked(deck) if deck is not None else None,
        rng=random.Random(seed),
    )


def starting_total(state) -> int:
    return sum(player.starting_stack for player in state.players)


def assert_invariants(state):
    """Conservation, pot eligibility and idempotent queries."""
    pots = state.pots()
    assert sum(pot.amount for pot in pots) + sum(state.stacks()) + sum(state.bets()) == (
        starting_total(state)
    )
    for pot in pots:
        for index in pot.player_indices:
            assert not state.players[index].folded
        if state.status() == HandStatus.IN_PROGRESS:
            assert pot.player_indices
    assert state.pots() == pots
    assert state.legal_actions() == state.legal_actions()


def play_randomly(state, rng: random.Random, discard=False, max_steps=500):
    """
    Drive a fully automated hand with random legal decisions.

    Checks the invariants before every decision and returns the final state.
    """
    for _ in range(max_steps):
        assert_invariants(state)
        if state.status() != HandStatus.IN_PROGRESS:
            return state

        if state.phase == Phase.DEALING and state.can_stand_pat_or_discard():
            index = state.actor_index()
            cards = []
            if discard:
                held = [hole.card for hole in state.hole_cards(index)]
                cards = rng.sample(held, rng.randint(0, 2))
            state.stand_pat_or_discard(cards)
            continue

        actions = state.legal_actions()
        assert actions, f"No decision available in {state}"
        action = rng.choice(actions)
        if action.type == ActionType.FOLD:
            state.fold()
        elif action.type == ActionType.CHECK_OR_CALL:
            state.check_or_call()
        elif action.type == ActionType.POST_BRING_IN:
            state.post_bring_in()
        else:
            state.complete_bet_or_raise_to(rng.randint(action.min_amount, action.max_amount))

    raise AssertionError(f"Hand did not finish in {max_steps} steps: {state}")
