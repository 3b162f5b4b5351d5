"""
Operation log records.

Every successful mutation of a ``State`` appends one ``Operation``. The log is
enough to replay or audit a hand.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple

from pokerstate.game.cards import Card


class OperationType(Enum):
    """Kinds of state mutations."""

    ANTE_POSTING = auto()
    BET_COLLECTION = auto()
    BLIND_OR_STRADDLE_POSTING = auto()
    CARD_BURNING = auto()
    HOLE_DEALING = auto()
    BOARD_DEALING = auto()
    STANDING_PAT_OR_DISCARDING = auto()
    FOLDING = auto()
    CHECKING_OR_CALLING = auto()
    BRING_IN_POSTING = auto()
    COMPLETION_BETTING_OR_RAISING_TO = auto()
    HOLE_CARDS_SHOWING_OR_MUCKING = auto()
    HAND_KILLING = auto()
    CHIPS_PUSHING = auto()
    CHIPS_PULLING = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class Operation:
    """
    One applied operation.

    Attributes:
        type: Kind of operation
        player_index: Acting or receiving player, if any
        amount: Chips moved (raise-to total for completions/raises)
        cards: Cards dealt, burnt, discarded or shown
        amounts: Per-player amounts (bet collection, chips pushing)
        pot_index: Pot pushed (chips pushing only)
        shown: True if cards were shown, False if mucked (showdown only)
    """

    type: OperationType
    player_index: Optional[int] = None
    amount: int = 0
    cards: Tuple[Card, ...] = ()
    amounts: Tuple[int, ...] = ()
    pot_index: Optional[int] = None
    shown: Optional[bool] = None

    def __str__(self) -> str:
        parts = [self.type.name]
        if self.player_index is not None:
            parts.append(f"p{self.player_index}")
        if self.amount:
            parts.append(str(self.amount))
        if self.cards:
            parts.append("".join(repr(card) for card in self.cards))
        return " ".join(parts)
