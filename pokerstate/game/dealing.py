"""
Dealing for one street.

``DealingRound`` tracks what the current street still has to deal: the burn
card, the draw decisions, the hole cards owed to each player and the board
cards. The work is done strictly in that order.
"""

import logging
from collections import deque
from enum import Enum, auto
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from pokerstate.game.cards import Card, CardSupply
from pokerstate.game.errors import IllegalActionError, OutOfTurnError
from pokerstate.game.variants import Street

if TYPE_CHECKING:
    from pokerstate.game.state import Player

logger = logging.getLogger(__name__)


class DealingStep(Enum):
    """What the dealer has to do next on a street."""

    CARD_BURNING = auto()
    STANDING_PAT_OR_DISCARDING = auto()
    HOLE_DEALING = auto()
    BOARD_DEALING = auto()


class DealingRound:
    """
    Pending dealing work for one street.

    Args:
        street: Street being dealt
        players: All players; folded players receive nothing
    """

    def __init__(self, street: Street, players: Sequence["Player"]):
        self.street = street
        live = [player.index for player in players if player.live]
        self.burn_pending = street.card_burning
        self.draw_queue = deque(live if street.draw else ())
        # Face-up flags still owed to each player
        self.hole_pending: Dict[int, List[bool]] = {
            index: list(street.hole_dealing_statuses) for index in live
        }
        self.board_pending = street.board_dealing_count

    @property
    def step(self) -> Optional[DealingStep]:
        """Next dealing step, or None when the street is fully dealt."""
        if self.burn_pending:
            return DealingStep.CARD_BURNING
        if self.draw_queue:
            return DealingStep.STANDING_PAT_OR_DISCARDING
        if self.hole_dealee_index is not None:
            return DealingStep.HOLE_DEALING
        if self.board_pending > 0:
            return DealingStep.BOARD_DEALING
        return None

    @property
    def done(self) -> bool:
        return self.step is None

    @property
    def hole_dealee_index(self) -> Optional[int]:
        """Player owed the most hole cards (lowest seat on ties)."""
        best = None
        for index, pending in self.hole_pending.items():
            if pending and (best is None or len(pending) > len(self.hole_pending[best])):
                best = index
        return best

    @property
    def stander_pat_or_discarder_index(self) -> Optional[int]:
        return self.draw_queue[0] if self.draw_queue else None

    def verify_step(self, step: DealingStep):
        current = self.step
        if current != step:
            expected = current.name.lower() if current else "nothing"
            raise OutOfTurnError(f"Cannot do {step.name.lower()} now; expecting {expected}")

    def verify_hole_cards(self, player_index: int, count: int):
        pending = self.hole_pending.get(player_index, [])
        if count < 1 or count > len(pending):
            raise IllegalActionError(
                f"Player {player_index} is owed {len(pending)} hole cards, cannot deal {count}"
            )

    def verify_board_cards(self, count: int):
        if count != self.board_pending:
            raise IllegalActionError(f"Expected {self.board_pending} board cards, got {count}")

    def verify_discards(self, player: "Player", cards: Sequence[Card]):
        held = [hole_card.card for hole_card in player.hole_cards if not hole_card.mucked]
        if len(set(cards)) != len(cards):
            raise IllegalActionError(f"Duplicate discards: {list(cards)}")
        missing = [card for card in cards if card not in held]
        if missing:
            raise IllegalActionError(f"Player {player.index} does not hold {missing}")

    # Transitions

    def burn(self):
        self.burn_pending = False

    def stand_pat_or_discard(self, player_index: int, count: int):
        self.draw_queue.popleft()
        # Each discard is replaced by a concealed card
        if count:
            self.hole_pending[player_index].extend([False] * count)

    def take_hole_statuses(self, player_index: int, count: int) -> List[bool]:
        pending = self.hole_pending[player_index]
        statuses, self.hole_pending[player_index] = pending[:count], pending[count:]
        return statuses

    def take_board(self):
        self.board_pending = 0


def draw_cards(supply: CardSupply, count: int, cards: Optional[Sequence[Card]] = None) -> List[Card]:
    """
    Take ``count`` cards from the supply, or use the explicitly given cards.

    Explicit cards are used for replaying known hands and do not touch the
    supply. Raises CardSupplyExhaustedError if the supply runs out.
    """
    if cards is not None:
        return list(cards)
    return [supply.next_card() for _ in range(count)]
