"""
Showdown resolution.

Decides who reveals in which order, who is obliged to show, who wins each
pot, and how a pot is split between hand types, tied hands and odd chips.
"""

import logging
from collections import deque
from typing import TYPE_CHECKING, List, Optional, Sequence

from pokerstate.game.cards import Card
from pokerstate.game.evaluator import Hand, HandRanker
from pokerstate.game.pots import Pot
from pokerstate.game.rules import rotation

if TYPE_CHECKING:
    from pokerstate.game.state import Player

logger = logging.getLogger(__name__)


def showdown_order(players: Sequence["Player"], aggressor_index: Optional[int]) -> List[int]:
    """
    Order in which live players reveal or muck.

    The last aggressor of the final street goes first; otherwise the first
    live player after the dealer (the dealer sits in the last seat).
    """
    start = 0
    if aggressor_index is not None and players[aggressor_index].live:
        start = aggressor_index
    return [index for index in rotation(len(players), start) if players[index].live]


def player_hands(
    player: "Player", board_cards: Sequence[Card], hand_types: Sequence[HandRanker]
) -> List[Optional[Hand]]:
    """Best hand per hand type from the player's unmucked cards."""
    cards = player.showdown_cards
    if not cards:
        return [None] * len(hand_types)
    return [ranker.strength(cards, board_cards) for ranker in hand_types]


def split_amount(amount: int, winners: Sequence[int]) -> List[int]:
    """
    Split chips evenly; odd chips go one at a time in seat order from seat 0.

    Args:
        amount: Chips to split
        winners: Winning seat indices

    Returns:
        Amount per winner, aligned with ``sorted(winners)``
    """
    share, remainder = divmod(amount, len(winners))
    return [share + (1 if position < remainder else 0) for position in range(len(winners))]


class ShowdownRound:
    """
    Reveal queue and show/muck obligations.

    Args:
        players: All players
        aggressor_index: Last aggressor of the final street, if any
        board_cards: Community cards
        hand_types: Rankers used to split pots
        show_all: Every player must show (tournament all-in showdown)
    """

    def __init__(
        self,
        players: Sequence["Player"],
        aggressor_index: Optional[int],
        board_cards: Sequence[Card],
        hand_types: Sequence[HandRanker],
        show_all: bool = False,
    ):
        self.players = players
        self.board_cards = board_cards
        self.hand_types = hand_types
        self.show_all = show_all
        self.queue = deque(showdown_order(players, aggressor_index))
        self.shown = set()

        logger.debug(f"Showdown order: {list(self.queue)} (show_all={show_all})")

    @property
    def showdown_index(self) -> Optional[int]:
        return self.queue[0] if self.queue else None

    @property
    def done(self) -> bool:
        return not self.queue

    def must_show(self, player_index: int, pots: Sequence[Pot]) -> bool:
        """
        Whether the player is obliged to reveal.

        A player must show if a contested pot they can win has no revealed
        hand yet, or if for some hand type their hand ties or beats every
        hand revealed for that pot.
        """
        if self.show_all:
            return True

        hands = player_hands(self.players[player_index], self.board_cards, self.hand_types)
        for pot in pots:
            if player_index not in pot.player_indices or not pot.contested:
                continue
            shown = [
                index
                for index in pot.player_indices
                if index != player_index and index in self.shown
            ]
            if not shown:
                return True
            shown_hands = [
                player_hands(self.players[index], self.board_cards, self.hand_types)
                for index in shown
            ]
            for type_index, hand in enumerate(hands):
                if hand is None:
                    continue
                best = max(
                    (other[type_index] for other in shown_hands if other[type_index] is not None),
                    default=None,
                )
                if best is None or hand >= best:
                    return True
        return False

    def record(self, player_index: int, shown: bool):
        self.queue.popleft()
        if shown:
            self.shown.add(player_index)


def distribute_pot(
    pot: Pot,
    players: Sequence["Player"],
    board_cards: Sequence[Card],
    hand_types: Sequence[HandRanker],
) -> List[int]:
    """
    Chips each player receives from one pot.

    An uncontested pot goes to its only eligible player. Otherwise the pot is
    split evenly between the hand types that have a qualifying hand (the
    remainder goes to the first), and each share between the tied best hands.

    Returns:
        Amount per player (indexed by seat)
    """
    amounts = [0] * len(players)
    if len(pot.player_indices) == 1:
        amounts[pot.player_indices[0]] = pot.amount
        return amounts

    contenders = [index for index in pot.player_indices if players[index].showdown_cards]
    if not contenders:
        contenders = list(pot.player_indices)
    hands = {index: player_hands(players[index], board_cards, hand_types) for index in contenders}

    qualifying = [
        type_index
        for type_index in range(len(hand_types))
        if any(hands[index][type_index] is not None for index in contenders)
    ]
    if not qualifying:
        for index, share in zip(sorted(contenders), split_amount(pot.amount, contenders)):
            amounts[index] += share
        return amounts

    type_shares = split_amount(pot.amount, qualifying)
    for type_index, share in zip(qualifying, type_shares):
        best = max(hands[index][type_index] for index in contenders if hands[index][type_index] is not None)
        winners = sorted(index for index in contenders if hands[index][type_index] == best)
        for index, chips in zip(winners, split_amount(share, winners)):
            amounts[index] += chips
        logger.debug(
            f"{hand_types[type_index].name}: {best} wins {share} for players {winners}"
        )
    return amounts


def distribute_pots(
    pots: Sequence[Pot],
    players: Sequence["Player"],
    board_cards: Sequence[Card],
    hand_types: Sequence[HandRanker],
) -> List[int]:
    """Total winnings per player over several pots."""
    totals = [0] * len(players)
    for pot in pots:
        for index, amount in enumerate(distribute_pot(pot, players, board_cards, hand_types)):
            totals[index] += amount
    return totals
