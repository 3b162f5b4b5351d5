"""
Betting rules for one street.

``BettingRound`` is the per-street cursor: it picks the opener, keeps the
queue of players due to act, generates the legal action set and applies
folds, checks, calls, bring-ins, completions, bets and raises. It mutates the
players it is given and nothing else.
"""

import logging
from collections import deque
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence

from pokerstate.game.actions import (
    Action,
    check_or_call,
    complete_bet_or_raise_to,
    fold,
    post_bring_in,
)
from pokerstate.game.errors import IllegalActionError, InsufficientChipsError, OutOfTurnError
from pokerstate.game.evaluator import up_card_key, visible_high_key, visible_low_key
from pokerstate.game.variants import BettingStructure, Opening, Street

if TYPE_CHECKING:
    from pokerstate.game.state import Player

logger = logging.getLogger(__name__)


def rotation(player_count: int, start: int) -> List[int]:
    """Seat indices in table order beginning at ``start``."""
    return [(start + offset) % player_count for offset in range(player_count)]


def find_opener(players: Sequence["Player"], street: Street) -> int:
    """
    Choose the first player to act on a street.

    Args:
        players: All players, in seat order
        street: The street being opened

    Returns:
        Index of the opener (a live player)
    """
    live = [player for player in players if player.live]
    if not live:
        raise IllegalActionError("No live player can open the betting")

    opening = street.opening
    if opening == Opening.POSITION:
        high_bet = max(player.street_bet for player in players)
        if high_bet > 0:
            # Highest bettor, ties toward the highest seat
            bettor = max(players, key=lambda player: (player.street_bet, player.index))
            start = bettor.index + 1
        else:
            start = 0
        for index in rotation(len(players), start % len(players)):
            if players[index].live:
                return index

    showing = [player for player in live if player.up_cards] or live
    if opening == Opening.LOW_CARD:
        return min(showing, key=lambda player: _last_up_key(player, aces_low=False)).index
    if opening == Opening.HIGH_CARD:
        return max(showing, key=lambda player: _last_up_key(player, aces_low=True)).index
    if opening == Opening.HIGH_HAND:
        return max(showing, key=lambda player: (visible_high_key(player.up_cards), -player.index)).index
    if opening == Opening.LOW_HAND:
        return max(showing, key=lambda player: (visible_low_key(player.up_cards), -player.index)).index
    raise ValueError(f"Unknown opening: {opening}")


def _last_up_key(player: "Player", aces_low: bool):
    if not player.up_cards:
        return (0, 0)
    return up_card_key(player.up_cards[-1], aces_low=aces_low)


class BettingRound:
    """
    Betting state of the current street.

    Attributes:
        street: Street being bet
        betting_structure: Sizing rule for completions, bets and raises
        bring_in: Forced opening amount on bring-in streets (0 otherwise)
        opener_index: Player the queue started from
        aggressor_index: Last player to complete, bet or raise
        last_full_increment: Size of the last full bet or raise
        raise_count: Full completions, bets and raises made this street
        acted: Players who acted since the last full bet or raise
    """

    def __init__(
        self,
        players: Sequence["Player"],
        street: Street,
        betting_structure: BettingStructure,
        bring_in: int = 0,
    ):
        self.players = players
        self.street = street
        self.betting_structure = betting_structure
        self.bring_in = bring_in if street.opening.has_bring_in() else 0
        self.opener_index = find_opener(players, street)
        self.aggressor_index: Optional[int] = None
        self.last_full_increment = 0
        self.raise_count = 0
        self.bring_in_posted = False
        self.acted = set()
        self.actor_queue = deque(self._eligible_actors(rotation(len(players), self.opener_index)))

        if self._settled():
            self.actor_queue.clear()

        logger.debug(
            f"Betting opened: opener={self.opener_index}, queue={list(self.actor_queue)}, "
            f"high_bet={self.high_bet}"
        )

    # Queries

    @property
    def closed(self) -> bool:
        return not self.actor_queue

    @property
    def actor_index(self) -> Optional[int]:
        return self.actor_queue[0] if self.actor_queue else None

    @property
    def high_bet(self) -> int:
        return max(player.street_bet for player in self.players)

    @property
    def bring_in_pending(self) -> bool:
        return (
            self.bring_in > 0
            and not self.bring_in_posted
            and self.raise_count == 0
            and self.actor_index == self.opener_index
        )

    @property
    def min_bet(self) -> int:
        return self.street.min_completion_betting_or_raising_amount

    def call_amount(self, player: "Player") -> int:
        return min(player.stack, self.high_bet - player.street_bet)

    def can_raise(self, player: "Player") -> bool:
        """Whether the player may complete, bet or raise at all (amount aside)."""
        if player.stack <= self.high_bet - player.street_bet:
            return False
        if player.index in self.acted:
            return False
        cap = self.street.max_completion_betting_or_raising_count
        if cap is not None and self.raise_count >= cap:
            return False
        return any(
            other.live and other.stack > 0 for other in self.players if other.index != player.index
        )

    def full_raise_to(self) -> int:
        """Smallest raise-to total that reopens the action (unclipped)."""
        high_bet = self.high_bet
        if self.bring_in > 0 and self.raise_count == 0:
            # Completion of the bring-in
            return self.min_bet if high_bet < self.min_bet else high_bet + self.min_bet
        return high_bet + max(self.last_full_increment, self.min_bet)

    def min_raise_to(self, player: "Player") -> int:
        return min(self.full_raise_to(), player.stack + player.street_bet)

    def max_raise_to(self, player: "Player") -> int:
        reach = player.stack + player.street_bet
        if self.betting_structure == BettingStructure.FIXED_LIMIT:
            limit = self.full_raise_to()
        elif self.betting_structure == BettingStructure.POT_LIMIT:
            # Pot after calling, on top of the current high bet
            pot = sum(other.total_committed for other in self.players) + self.call_amount(player)
            limit = self.high_bet + pot
        else:
            limit = reach
        return min(limit, reach)

    def legal_actions(self) -> List[Action]:
        """
        Get all legal actions for the player due to act.

        Returns:
            Legal actions (empty when the round is closed)
        """
        if self.closed:
            return []

        player = self.players[self.actor_index]
        actions = []
        if self.bring_in_pending:
            actions.append(post_bring_in(min(self.bring_in, player.stack)))
        else:
            call = self.call_amount(player)
            if call > 0:
                actions.append(fold())
            actions.append(check_or_call(call))
        if self.can_raise(player):
            actions.append(
                complete_bet_or_raise_to(self.min_raise_to(player), self.max_raise_to(player))
            )
        return actions

    # Verification (raises, never mutates)

    def _actor(self) -> "Player":
        if self.closed:
            raise OutOfTurnError("The betting round is closed")
        return self.players[self.actor_index]

    def verify_fold(self) -> "Player":
        player = self._actor()
        if self.bring_in_pending:
            raise IllegalActionError("Cannot fold before the bring-in is posted")
        if self.call_amount(player) == 0:
            raise IllegalActionError("Cannot fold when checking is possible")
        return player

    def verify_check_or_call(self) -> "Player":
        player = self._actor()
        if self.bring_in_pending:
            raise IllegalActionError("The bring-in must be posted, completed or nothing else")
        return player

    def verify_bring_in(self) -> "Player":
        player = self._actor()
        if not self.bring_in_pending:
            raise IllegalActionError("There is no bring-in to post")
        return player

    def verify_raise_to(self, amount: int) -> "Player":
        player = self._actor()
        if not self.can_raise(player):
            raise IllegalActionError(f"Player {player.index} may not complete, bet or raise")
        if amount > player.stack + player.street_bet:
            raise InsufficientChipsError(
                f"Raise to {amount} exceeds player {player.index}'s "
                f"{player.stack + player.street_bet} available chips"
            )
        minimum = self.min_raise_to(player)
        if amount < minimum:
            raise IllegalActionError(f"Raise to {amount} is below the minimum of {minimum}")
        maximum = self.max_raise_to(player)
        if amount > maximum:
            raise InsufficientChipsError(
                f"Raise to {amount} exceeds the {self.betting_structure} maximum of {maximum}"
            )
        return player

    # Transitions (callers verify first)

    def fold(self) -> int:
        player = self.verify_fold()
        player.folded = True
        self.actor_queue.popleft()
        self._after_action()
        return player.index

    def check_or_call(self) -> int:
        player = self.verify_check_or_call()
        amount = self.call_amount(player)
        player.commit(amount)
        self.acted.add(player.index)
        self.actor_queue.popleft()
        self._after_action()
        return amount

    def post_bring_in(self) -> int:
        player = self.verify_bring_in()
        amount = min(self.bring_in, player.stack)
        player.commit(amount)
        self.bring_in_posted = True
        self.acted.add(player.index)
        self.actor_queue.popleft()
        self._after_action()
        return amount

    def complete_bet_or_raise_to(self, amount: int) -> int:
        player = self.verify_raise_to(amount)
        previous_high = self.high_bet
        full = amount >= self.full_raise_to()

        player.commit(amount - player.street_bet)
        self.aggressor_index = player.index
        if full:
            self.raise_count += 1
            self.last_full_increment = max(amount - previous_high, self.min_bet)
            self.acted = {player.index}
        else:
            # Short all-in: players who already acted may only call or fold
            self.acted.add(player.index)
            logger.debug(f"Player {player.index} raised all-in short to {amount}")

        after = rotation(len(self.players), (player.index + 1) % len(self.players))
        self.actor_queue = deque(
            index for index in self._eligible_actors(after) if index != player.index
        )
        self._after_action()
        return amount

    def _eligible_actors(self, order: Iterable[int]) -> List[int]:
        return [index for index in order if self.players[index].live and self.players[index].stack > 0]

    def _settled(self) -> bool:
        """True when nobody can meaningfully act on this street."""
        if sum(player.live for player in self.players) <= 1:
            return True
        if len(self.actor_queue) > 1:
            return False
        high_bet = self.high_bet
        return all(self.players[index].street_bet >= high_bet for index in self.actor_queue)

    def _after_action(self):
        if sum(player.live for player in self.players) <= 1:
            self.actor_queue.clear()
