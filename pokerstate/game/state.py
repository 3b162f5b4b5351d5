"""
Hand state.

``State`` is the aggregate root for one hand: it owns the players, the board,
the card supply and the per-street controllers, exposes the public operation
and query surface, and runs the enabled automations after every transition.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from pokerstate.game.actions import Action
from pokerstate.game.cards import Card, CardSupply, coerce_cards
from pokerstate.game.dealing import DealingRound, DealingStep, draw_cards
from pokerstate.game.errors import (
    CardSupplyExhaustedError,
    IllegalActionError,
    InvalidPlayerIndexError,
    OutOfTurnError,
    PokerStateError,
)
from pokerstate.game.operations import Operation, OperationType
from pokerstate.game.pots import Pot, compute_pots
from pokerstate.game.rules import BettingRound
from pokerstate.game.showdown import ShowdownRound, distribute_pot, distribute_pots
from pokerstate.game.variants import Street, Variant
from pokerstate.shared.config import StrictFrozenModel

logger = logging.getLogger(__name__)


class Visibility(Enum):
    """Who can see a hole card."""

    CONCEALED = auto()
    REVEALED = auto()
    MUCKED = auto()

    def __str__(self) -> str:
        return self.name.lower()


_VISIBILITY_TRANSITIONS = {
    Visibility.CONCEALED: frozenset({Visibility.REVEALED, Visibility.MUCKED}),
    Visibility.REVEALED: frozenset({Visibility.MUCKED}),
    Visibility.MUCKED: frozenset(),
}


@dataclass
class HoleCard:
    """A card owned by one player, with its visibility."""

    card: Card
    visibility: Visibility = Visibility.CONCEALED

    @property
    def mucked(self) -> bool:
        return self.visibility == Visibility.MUCKED

    def transition(self, visibility: Visibility):
        """Move to a new visibility, rejecting illegal transitions."""
        if visibility not in _VISIBILITY_TRANSITIONS[self.visibility]:
            raise IllegalActionError(
                f"Cannot change {self.card!r} from {self.visibility} to {visibility}"
            )
        self.visibility = visibility


class PlayerStatus(Enum):
    ACTIVE = auto()
    FOLDED = auto()
    ALL_IN = auto()


@dataclass
class Player:
    """
    Per-hand player entity.

    ``street_bet`` holds the chips in front of the player: bets until they are
    collected, then pushed winnings until they are pulled.
    """

    index: int
    starting_stack: int
    stack: int = field(init=False)
    street_bet: int = 0
    total_committed: int = 0
    folded: bool = False
    hole_cards: List[HoleCard] = field(default_factory=list)
    discarded_cards: List[Card] = field(default_factory=list)

    def __post_init__(self):
        self.stack = self.starting_stack

    @property
    def status(self) -> PlayerStatus:
        if self.folded:
            return PlayerStatus.FOLDED
        if self.stack == 0:
            return PlayerStatus.ALL_IN
        return PlayerStatus.ACTIVE

    @property
    def live(self) -> bool:
        return not self.folded

    @property
    def up_cards(self) -> List[Card]:
        return [hole.card for hole in self.hole_cards if hole.visibility == Visibility.REVEALED]

    @property
    def showdown_cards(self) -> List[Card]:
        return [hole.card for hole in self.hole_cards if not hole.mucked]

    def commit(self, amount: int):
        """Move chips from the stack into the current bet."""
        if amount < 0 or amount > self.stack:
            raise IllegalActionError(f"Player {self.index} cannot commit {amount} of {self.stack}")
        self.stack -= amount
        self.street_bet += amount
        self.total_committed += amount

    def muck(self):
        for hole in self.hole_cards:
            if not hole.mucked:
                hole.transition(Visibility.MUCKED)


class Automation(Enum):
    """Housekeeping steps the state can run without a caller."""

    ANTE_POSTING = auto()
    BET_COLLECTION = auto()
    BLIND_OR_STRADDLE_POSTING = auto()
    CARD_BURNING = auto()
    HOLE_DEALING = auto()
    BOARD_DEALING = auto()
    HOLE_CARDS_SHOWING_OR_MUCKING = auto()
    HAND_KILLING = auto()
    CHIPS_PUSHING = auto()
    CHIPS_PULLING = auto()


class Mode(Enum):
    TOURNAMENT = auto()
    CASH_GAME = auto()


class HandStatus(Enum):
    IN_PROGRESS = auto()
    COMPLETE = auto()
    ABORTED = auto()


class Phase(Enum):
    """Stage of the hand; betting stages repeat once per street."""

    ANTE_POSTING = auto()
    BET_COLLECTION = auto()
    BLIND_OR_STRADDLE_POSTING = auto()
    DEALING = auto()
    BETTING = auto()
    SHOWDOWN = auto()
    HAND_KILLING = auto()
    CHIPS_PUSHING = auto()
    CHIPS_PULLING = auto()
    TERMINAL = auto()

    def __str__(self) -> str:
        return self.name.lower()


class PotSummary(StrictFrozenModel):
    amount: int
    player_indices: Tuple[int, ...]


class HoleCardSummary(StrictFrozenModel):
    card: str
    visibility: str


class HandSummary(StrictFrozenModel):
    """Consumer-facing snapshot of a hand."""

    variant: str
    phase: str
    status: str
    street_index: Optional[int]
    stacks: Tuple[int, ...]
    bets: Tuple[int, ...]
    pots: Tuple[PotSummary, ...]
    board: Tuple[str, ...]
    hole_cards: Tuple[Tuple[HoleCardSummary, ...], ...]
    actor_index: Optional[int]


class State:
    """
    One poker hand, from ante posting to chips pulling.

    Every public operation verifies first and only then mutates, so a failed
    call leaves the state untouched. Each operation accepts an optional
    ``player_index``; when given it must be the player the operation applies
    to. Use ``pokerstate.game.games.create_state`` to build one.

    Args:
        variant: Game being played
        automations: Steps run without a caller
        antes: Raw ante per seat
        blinds_or_straddles: Raw blind or straddle per seat
        bring_in: Bring-in amount (bring-in variants only)
        min_bet: Minimum bet unit
        starting_stacks: Stack per seat
        mode: Tournament or cash game
        uniform_antes: Cap antes at the smallest starting stack
        card_supply: Source of cards
    """

    def __init__(
        self,
        variant: Variant,
        automations: Iterable[Automation],
        antes: Sequence[int],
        blinds_or_straddles: Sequence[int],
        bring_in: int,
        min_bet: int,
        starting_stacks: Sequence[int],
        mode: Mode,
        uniform_antes: bool,
        card_supply: CardSupply,
    ):
        self.variant = variant
        self.streets: Tuple[Street, ...] = variant.build_streets(min_bet)
        self.automations: FrozenSet[Automation] = frozenset(automations)
        self.antes = tuple(antes)
        self.blinds_or_straddles = tuple(blinds_or_straddles)
        self.bring_in = bring_in
        self.min_bet = min_bet
        self.mode = mode
        self.uniform_antes = uniform_antes
        self.card_supply = card_supply

        self.players = [Player(index, stack) for index, stack in enumerate(starting_stacks)]
        self.board_cards: List[Card] = []
        self.burned_cards: List[Card] = []
        self.operations: List[Operation] = []

        self.phase = Phase.ANTE_POSTING
        self.street_index: Optional[int] = None
        self.betting: Optional[BettingRound] = None
        self.dealing: Optional[DealingRound] = None
        self.showdown: Optional[ShowdownRound] = None

        self._status = HandStatus.IN_PROGRESS
        self._collecting_antes = True
        self._ante_pending = [i for i in range(self.player_count) if self.effective_ante(i) > 0]
        self._blind_pending: List[int] = []
        self._final_pots: Optional[List[Pot]] = None
        self._pushed_count = 0
        self._updating = False

        self._automation_table: Dict[Phase, List[Tuple[Automation, Callable, Callable]]] = {
            Phase.ANTE_POSTING: [(Automation.ANTE_POSTING, self.can_post_ante, self.post_ante)],
            Phase.BET_COLLECTION: [
                (Automation.BET_COLLECTION, self.can_collect_bets, self.collect_bets)
            ],
            Phase.BLIND_OR_STRADDLE_POSTING: [
                (
                    Automation.BLIND_OR_STRADDLE_POSTING,
                    self.can_post_blind_or_straddle,
                    self.post_blind_or_straddle,
                )
            ],
            Phase.DEALING: [
                (Automation.CARD_BURNING, self.can_burn_card, self.burn_card),
                (Automation.HOLE_DEALING, self.can_deal_hole, self.deal_hole),
                (Automation.BOARD_DEALING, self.can_deal_board, self.deal_board),
            ],
            Phase.SHOWDOWN: [
                (
                    Automation.HOLE_CARDS_SHOWING_OR_MUCKING,
                    self.can_show_or_muck_hole_cards,
                    self.show_or_muck_hole_cards,
                )
            ],
            Phase.HAND_KILLING: [(Automation.HAND_KILLING, self.can_kill_hand, self.kill_hand)],
            Phase.CHIPS_PUSHING: [(Automation.CHIPS_PUSHING, self.can_push_chips, self.push_chips)],
            Phase.CHIPS_PULLING: [(Automation.CHIPS_PULLING, self.can_pull_chips, self.pull_chips)],
        }

        logger.debug(
            f"New {variant} hand: {self.player_count} players, stacks={self.stacks()}, "
            f"automations={sorted(a.name for a in self.automations)}"
        )
        self._update()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def street(self) -> Optional[Street]:
        return None if self.street_index is None else self.streets[self.street_index]

    def status(self) -> HandStatus:
        return self._status

    def stacks(self) -> List[int]:
        return [player.stack for player in self.players]

    def bets(self) -> List[int]:
        return [player.street_bet for player in self.players]

    def pots(self) -> List[Pot]:
        """
        Current pots, main pot first.

        Uncollected bets are not part of any pot. Once chips pushing begins
        the pots are fixed, and pots already pushed are left out.
        """
        if self._final_pots is not None:
            return list(self._final_pots[self._pushed_count :])
        return compute_pots(
            [player.total_committed - player.street_bet for player in self.players],
            [player.live for player in self.players],
        )

    def total_pot_amount(self) -> int:
        """Chips in the middle: pots plus bets not yet collected."""
        amount = sum(pot.amount for pot in self.pots())
        if self._final_pots is None:
            amount += sum(self.bets())
        return amount

    def hole_cards(self, player_index: int) -> List[HoleCard]:
        self._verify_player_index(player_index)
        return list(self.players[player_index].hole_cards)

    def actor_index(self) -> Optional[int]:
        """Player whose decision the hand is waiting on, if any."""
        if self._status != HandStatus.IN_PROGRESS:
            return None
        if self.phase == Phase.BETTING:
            return self.betting.actor_index
        if self.phase == Phase.DEALING:
            return self.dealing.stander_pat_or_discarder_index
        if self.phase == Phase.SHOWDOWN:
            return self.showdown.showdown_index
        return None

    def legal_actions(self) -> List[Action]:
        if self._status != HandStatus.IN_PROGRESS or self.phase != Phase.BETTING:
            return []
        return self.betting.legal_actions()

    def effective_ante(self, player_index: int) -> int:
        # Heads-up, the dealer (seat 1) posts what seat 0 would otherwise post
        raw = self.antes[1 - player_index] if self.player_count == 2 else self.antes[player_index]
        amount = min(raw, self.players[player_index].starting_stack)
        if self.uniform_antes:
            amount = min(amount, min(player.starting_stack for player in self.players))
        return amount

    def effective_blind_or_straddle(self, player_index: int) -> int:
        if self.player_count == 2:
            raw = self.blinds_or_straddles[1 - player_index]
        else:
            raw = self.blinds_or_straddles[player_index]
        remaining = self.players[player_index].starting_stack - self.effective_ante(player_index)
        return min(raw, remaining)

    def summary(self) -> HandSummary:
        return HandSummary(
            variant=self.variant.name,
            phase=str(self.phase),
            status=self._status.name.lower(),
            street_index=self.street_index,
            stacks=tuple(self.stacks()),
            bets=tuple(self.bets()),
            pots=tuple(
                PotSummary(amount=pot.amount, player_indices=pot.player_indices)
                for pot in self.pots()
            ),
            board=tuple(repr(card) for card in self.board_cards),
            hole_cards=tuple(
                tuple(
                    HoleCardSummary(card=repr(hole.card), visibility=str(hole.visibility))
                    for hole in player.hole_cards
                )
                for player in self.players
            ),
            actor_index=self.actor_index(),
        )

    # ------------------------------------------------------------------
    # Verification helpers
    # ------------------------------------------------------------------

    def _verify_player_index(self, player_index: Optional[int]):
        if player_index is not None and not 0 <= player_index < self.player_count:
            raise InvalidPlayerIndexError(
                f"Player index {player_index} is outside 0..{self.player_count - 1}"
            )

    def _verify_phase(self, phase: Phase):
        if self._status != HandStatus.IN_PROGRESS:
            raise OutOfTurnError(f"The hand is {self._status.name.lower()}")
        if self.phase != phase:
            raise OutOfTurnError(f"Expected phase {phase}, but the hand is in {self.phase}")

    @staticmethod
    def _verify_actor(player_index: Optional[int], expected: Optional[int]) -> int:
        if expected is None:
            raise OutOfTurnError("No player is due to act")
        if player_index is not None and player_index != expected:
            raise OutOfTurnError(f"Player {player_index} acted, but player {expected} is due")
        return expected

    @staticmethod
    def _pick(player_index: Optional[int], pending: Sequence[int], what: str) -> int:
        if not pending:
            raise OutOfTurnError(f"Nobody is due for {what}")
        if player_index is None:
            return pending[0]
        if player_index not in pending:
            raise OutOfTurnError(f"Player {player_index} is not due for {what}")
        return player_index

    @staticmethod
    def _can(verify: Callable, *args) -> bool:
        try:
            verify(*args)
        except PokerStateError:
            return False
        return True

    # ------------------------------------------------------------------
    # Forced bets and bet collection
    # ------------------------------------------------------------------

    def _verify_ante_posting(self, player_index: Optional[int] = None) -> int:
        self._verify_player_index(player_index)
        self._verify_phase(Phase.ANTE_POSTING)
        return self._pick(player_index, self._ante_pending, "ante posting")

    def can_post_ante(self, player_index: Optional[int] = None) -> bool:
        return self._can(self._verify_ante_posting, player_index)

    def post_ante(self, player_index: Optional[int] = None) -> Operation:
        index = self._verify_ante_posting(player_index)
        amount = self.effective_ante(index)
        self.players[index].commit(amount)
        self._ante_pending.remove(index)
        return self._record(Operation(OperationType.ANTE_POSTING, index, amount))

    def _verify_bet_collection(self):
        self._verify_phase(Phase.BET_COLLECTION)
        if not any(self.bets()):
            raise OutOfTurnError("There are no bets to collect")

    def can_collect_bets(self) -> bool:
        return self._can(self._verify_bet_collection)

    def collect_bets(self) -> Operation:
        self._verify_bet_collection()
        amounts = tuple(self.bets())
        for player in self.players:
            player.street_bet = 0
        return self._record(
            Operation(OperationType.BET_COLLECTION, amount=sum(amounts), amounts=amounts)
        )

    def _verify_blind_or_straddle_posting(self, player_index: Optional[int] = None) -> int:
        self._verify_player_index(player_index)
        self._verify_phase(Phase.BLIND_OR_STRADDLE_POSTING)
        return self._pick(player_index, self._blind_pending, "blind or straddle posting")

    def can_post_blind_or_straddle(self, player_index: Optional[int] = None) -> bool:
        return self._can(self._verify_blind_or_straddle_posting, player_index)

    def post_blind_or_straddle(self, player_index: Optional[int] = None) -> Operation:
        index = self._verify_blind_or_straddle_posting(player_index)
        amount = self.effective_blind_or_straddle(index)
        self.players[index].commit(amount)
        self._blind_pending.remove(index)
        return self._record(Operation(OperationType.BLIND_OR_STRADDLE_POSTING, index, amount))

    # ------------------------------------------------------------------
    # Dealing
    # ------------------------------------------------------------------

    def _draw(self, count: int, cards: Optional[List[Card]]) -> List[Card]:
        try:
            return draw_cards(self.card_supply, count, cards)
        except CardSupplyExhaustedError:
            self._status = HandStatus.ABORTED
            logger.warning(
                f"Card supply exhausted on street {self.street_index}; hand aborted"
            )
            raise

    def _verify_card_burning(self, card=None) -> Optional[List[Card]]:
        self._verify_phase(Phase.DEALING)
        self.dealing.verify_step(DealingStep.CARD_BURNING)
        if card is None:
            return None
        cards = coerce_cards(card)
        if len(cards) != 1:
            raise IllegalActionError(f"Exactly one card is burnt, got {cards}")
        return cards

    def can_burn_card(self, card=None) -> bool:
        return self._can(self._verify_card_burning, card)

    def burn_card(self, card=None) -> Operation:
        cards = self._verify_card_burning(card)
        cards = self._draw(1, cards)
        self.burned_cards.extend(cards)
        self.dealing.burn()
        return self._record(Operation(OperationType.CARD_BURNING, cards=tuple(cards)))

    def _verify_hole_dealing(self, cards=None, player_index: Optional[int] = None):
        self._verify_player_index(player_index)
        self._verify_phase(Phase.DEALING)
        self.dealing.verify_step(DealingStep.HOLE_DEALING)
        index = self._verify_actor(player_index, self.dealing.hole_dealee_index)
        cards = None if cards is None else coerce_cards(cards)
        count = 1 if cards is None else len(cards)
        self.dealing.verify_hole_cards(index, count)
        return index, cards, count

    def can_deal_hole(self, cards=None, player_index: Optional[int] = None) -> bool:
        return self._can(self._verify_hole_dealing, cards, player_index)

    def deal_hole(self, cards=None, player_index: Optional[int] = None) -> Operation:
        """
        Deal hole cards to the player owed the most (one card by default).

        Args:
            cards: Explicit cards to deal instead of drawing from the supply
            player_index: Expected dealee

        Returns:
            The HOLE_DEALING operation
        """
        index, cards, count = self._verify_hole_dealing(cards, player_index)
        cards = self._draw(count, cards)
        statuses = self.dealing.take_hole_statuses(index, count)
        player = self.players[index]
        for card, face_up in zip(cards, statuses):
            visibility = Visibility.REVEALED if face_up else Visibility.CONCEALED
            player.hole_cards.append(HoleCard(card, visibility))
        return self._record(Operation(OperationType.HOLE_DEALING, index, cards=tuple(cards)))

    def _verify_board_dealing(self, cards=None):
        self._verify_phase(Phase.DEALING)
        self.dealing.verify_step(DealingStep.BOARD_DEALING)
        if cards is None:
            return None
        cards = coerce_cards(cards)
        self.dealing.verify_board_cards(len(cards))
        return cards

    def can_deal_board(self, cards=None) -> bool:
        return self._can(self._verify_board_dealing, cards)

    def deal_board(self, cards=None) -> Operation:
        """Deal every board card of the current street."""
        cards = self._verify_board_dealing(cards)
        cards = self._draw(self.dealing.board_pending, cards)
        self.board_cards.extend(cards)
        self.dealing.take_board()
        return self._record(Operation(OperationType.BOARD_DEALING, cards=tuple(cards)))

    def _verify_standing_pat_or_discarding(self, cards=(), player_index: Optional[int] = None):
        self._verify_player_index(player_index)
        self._verify_phase(Phase.DEALING)
        self.dealing.verify_step(DealingStep.STANDING_PAT_OR_DISCARDING)
        index = self._verify_actor(player_index, self.dealing.stander_pat_or_discarder_index)
        cards = coerce_cards(cards)
        self.dealing.verify_discards(self.players[index], cards)
        return index, cards

    def can_stand_pat_or_discard(self, cards=(), player_index: Optional[int] = None) -> bool:
        return self._can(self._verify_standing_pat_or_discarding, cards, player_index)

    def stand_pat_or_discard(self, cards=(), player_index: Optional[int] = None) -> Operation:
        """Discard the given held cards (none to stand pat); each is replaced later."""
        index, cards = self._verify_standing_pat_or_discarding(cards, player_index)
        player = self.players[index]
        player.hole_cards = [hole for hole in player.hole_cards if hole.card not in cards]
        player.discarded_cards.extend(cards)
        self.dealing.stand_pat_or_discard(index, len(cards))
        return self._record(
            Operation(OperationType.STANDING_PAT_OR_DISCARDING, index, cards=tuple(cards))
        )

    # ------------------------------------------------------------------
    # Betting
    # ------------------------------------------------------------------

    def _verify_betting(self, player_index: Optional[int]) -> int:
        self._verify_player_index(player_index)
        self._verify_phase(Phase.BETTING)
        return self._verify_actor(player_index, self.betting.actor_index)

    def can_fold(self, player_index: Optional[int] = None) -> bool:
        return self._can(self._verify_fold, player_index)

    def _verify_fold(self, player_index: Optional[int] = None) -> int:
        index = self._verify_betting(player_index)
        self.betting.verify_fold()
        return index

    def fold(self, player_index: Optional[int] = None) -> Operation:
        index = self._verify_fold(player_index)
        self.betting.fold()
        self.players[index].muck()
        return self._record(Operation(OperationType.FOLDING, index))

    def _verify_check_or_call(self, player_index: Optional[int] = None) -> int:
        index = self._verify_betting(player_index)
        self.betting.verify_check_or_call()
        return index

    def can_check_or_call(self, player_index: Optional[int] = None) -> bool:
        return self._can(self._verify_check_or_call, player_index)

    def check_or_call(self, player_index: Optional[int] = None) -> Operation:
        index = self._verify_check_or_call(player_index)
        amount = self.betting.check_or_call()
        return self._record(Operation(OperationType.CHECKING_OR_CALLING, index, amount))

    def _verify_bring_in_posting(self, player_index: Optional[int] = None) -> int:
        index = self._verify_betting(player_index)
        self.betting.verify_bring_in()
        return index

    def can_post_bring_in(self, player_index: Optional[int] = None) -> bool:
        return self._can(self._verify_bring_in_posting, player_index)

    def post_bring_in(self, player_index: Optional[int] = None) -> Operation:
        index = self._verify_bring_in_posting(player_index)
        amount = self.betting.post_bring_in()
        return self._record(Operation(OperationType.BRING_IN_POSTING, index, amount))

    def _verify_completion_betting_or_raising_to(
        self, amount: int, player_index: Optional[int] = None
    ) -> int:
        index = self._verify_betting(player_index)
        self.betting.verify_raise_to(amount)
        return index

    def can_complete_bet_or_raise_to(self, amount: int, player_index: Optional[int] = None) -> bool:
        return self._can(self._verify_completion_betting_or_raising_to, amount, player_index)

    def complete_bet_or_raise_to(self, amount: int, player_index: Optional[int] = None) -> Operation:
        """
        Complete, bet or raise so that the player's street bet totals ``amount``.

        Raises:
            IllegalActionError: Below the minimum, or raising is not allowed
            InsufficientChipsError: Above the stack or the structure's maximum
        """
        index = self._verify_completion_betting_or_raising_to(amount, player_index)
        self.betting.complete_bet_or_raise_to(amount)
        return self._record(
            Operation(OperationType.COMPLETION_BETTING_OR_RAISING_TO, index, amount)
        )

    # ------------------------------------------------------------------
    # Showdown and chip movement
    # ------------------------------------------------------------------

    def _verify_showing_or_mucking(
        self, status: Optional[bool] = None, player_index: Optional[int] = None
    ) -> Tuple[int, bool]:
        self._verify_player_index(player_index)
        self._verify_phase(Phase.SHOWDOWN)
        index = self._verify_actor(player_index, self.showdown.showdown_index)
        must_show = self.showdown.must_show(index, self.pots())
        if status is None:
            return index, must_show
        if not status and must_show:
            raise IllegalActionError(f"Player {index} must show")
        return index, status

    def can_show_or_muck_hole_cards(
        self, status: Optional[bool] = None, player_index: Optional[int] = None
    ) -> bool:
        return self._can(self._verify_showing_or_mucking, status, player_index)

    def show_or_muck_hole_cards(
        self, status: Optional[bool] = None, player_index: Optional[int] = None
    ) -> Operation:
        """
        Show (True) or muck (False) the next player's hole cards.

        With ``status=None`` the player shows only when obliged to.
        A mucked hand cannot win a contested pot.
        """
        index, status = self._verify_showing_or_mucking(status, player_index)
        player = self.players[index]
        if status:
            for hole in player.hole_cards:
                if hole.visibility == Visibility.CONCEALED:
                    hole.transition(Visibility.REVEALED)
            cards = tuple(player.showdown_cards)
        else:
            cards = ()
            player.muck()
        self.showdown.record(index, status)
        return self._record(
            Operation(OperationType.HOLE_CARDS_SHOWING_OR_MUCKING, index, cards=cards, shown=status)
        )

    def _kill_candidates(self) -> List[int]:
        winnings = distribute_pots(
            self.pots(), self.players, self.board_cards, self.variant.hand_types
        )
        return [player.index for player in self.players if player.live and winnings[player.index] == 0]

    def _verify_hand_killing(self, player_index: Optional[int] = None) -> int:
        self._verify_player_index(player_index)
        self._verify_phase(Phase.HAND_KILLING)
        return self._pick(player_index, self._kill_candidates(), "hand killing")

    def can_kill_hand(self, player_index: Optional[int] = None) -> bool:
        return self._can(self._verify_hand_killing, player_index)

    def kill_hand(self, player_index: Optional[int] = None) -> Operation:
        """Kill a live hand that wins nothing."""
        index = self._verify_hand_killing(player_index)
        player = self.players[index]
        player.muck()
        player.folded = True
        return self._record(Operation(OperationType.HAND_KILLING, index))

    def _verify_chips_pushing(self):
        self._verify_phase(Phase.CHIPS_PUSHING)
        if self._pushed_count >= len(self._final_pots):
            raise OutOfTurnError("Every pot has been pushed")

    def can_push_chips(self) -> bool:
        return self._can(self._verify_chips_pushing)

    def push_chips(self) -> Operation:
        """Push the next pot (main pot first) in front of its winners."""
        self._verify_chips_pushing()
        pot_index = self._pushed_count
        pot = self._final_pots[pot_index]
        amounts = distribute_pot(pot, self.players, self.board_cards, self.variant.hand_types)
        for player, amount in zip(self.players, amounts):
            player.street_bet += amount
        self._pushed_count += 1
        return self._record(
            Operation(
                OperationType.CHIPS_PUSHING,
                amount=pot.amount,
                amounts=tuple(amounts),
                pot_index=pot_index,
            )
        )

    def _verify_chips_pulling(self, player_index: Optional[int] = None) -> int:
        self._verify_player_index(player_index)
        self._verify_phase(Phase.CHIPS_PULLING)
        pending = [player.index for player in self.players if player.street_bet > 0]
        return self._pick(player_index, pending, "chips pulling")

    def can_pull_chips(self, player_index: Optional[int] = None) -> bool:
        return self._can(self._verify_chips_pulling, player_index)

    def pull_chips(self, player_index: Optional[int] = None) -> Operation:
        index = self._verify_chips_pulling(player_index)
        player = self.players[index]
        amount = player.street_bet
        player.stack += amount
        player.street_bet = 0
        return self._record(Operation(OperationType.CHIPS_PULLING, index, amount))

    # ------------------------------------------------------------------
    # Phase machine and automation dispatcher
    # ------------------------------------------------------------------

    def _record(self, operation: Operation) -> Operation:
        self.operations.append(operation)
        logger.debug(f"{self.phase}: {operation}")
        self._update()
        return operation

    def _update(self):
        """Run enabled automations and phase transitions until input is needed."""
        if self._updating:
            return
        self._updating = True
        try:
            while self._status == HandStatus.IN_PROGRESS:
                if self._run_automation():
                    continue
                if self._phase_done():
                    self._advance()
                    continue
                break
        finally:
            self._updating = False

    def _run_automation(self) -> bool:
        for automation, pending, step in self._automation_table.get(self.phase, ()):
            if automation in self.automations and pending():
                step()
                return True
        return False

    def _phase_done(self) -> bool:
        phase = self.phase
        if phase == Phase.ANTE_POSTING:
            return not self._ante_pending
        if phase in (Phase.BET_COLLECTION, Phase.CHIPS_PULLING):
            return not any(self.bets())
        if phase == Phase.BLIND_OR_STRADDLE_POSTING:
            return not self._blind_pending
        if phase == Phase.DEALING:
            return self.dealing.done
        if phase == Phase.BETTING:
            return self.betting.closed
        if phase == Phase.SHOWDOWN:
            return self.showdown.done
        if phase == Phase.HAND_KILLING:
            return not self._kill_candidates()
        if phase == Phase.CHIPS_PUSHING:
            return self._pushed_count >= len(self._final_pots)
        return False

    def _set_phase(self, phase: Phase):
        logger.debug(f"Phase {self.phase} -> {phase}")
        self.phase = phase

    def _advance(self):
        phase = self.phase
        if phase == Phase.ANTE_POSTING:
            self._set_phase(Phase.BET_COLLECTION)
        elif phase == Phase.BET_COLLECTION:
            if self._collecting_antes:
                self._collecting_antes = False
                self._blind_pending = [
                    i for i in range(self.player_count) if self.effective_blind_or_straddle(i) > 0
                ]
                self._set_phase(Phase.BLIND_OR_STRADDLE_POSTING)
            elif sum(player.live for player in self.players) <= 1:
                self._begin_chips_pushing()
            elif self.street_index + 1 < len(self.streets):
                self._begin_street(self.street_index + 1)
            else:
                self._begin_showdown()
        elif phase == Phase.BLIND_OR_STRADDLE_POSTING:
            self._begin_street(0)
        elif phase == Phase.DEALING:
            bring_in = self.bring_in if self.variant.uses_bring_in else 0
            self.betting = BettingRound(
                self.players, self.street, self.variant.betting_structure, bring_in
            )
            self._set_phase(Phase.BETTING)
        elif phase == Phase.BETTING:
            self._set_phase(Phase.BET_COLLECTION)
        elif phase == Phase.SHOWDOWN:
            self._set_phase(Phase.HAND_KILLING)
        elif phase == Phase.HAND_KILLING:
            self._begin_chips_pushing()
        elif phase == Phase.CHIPS_PUSHING:
            self._set_phase(Phase.CHIPS_PULLING)
        elif phase == Phase.CHIPS_PULLING:
            self._set_phase(Phase.TERMINAL)
            self._status = HandStatus.COMPLETE
            logger.debug(f"Hand complete: stacks={self.stacks()}")

    def _begin_street(self, street_index: int):
        self.street_index = street_index
        self.dealing = DealingRound(self.street, self.players)
        self._set_phase(Phase.DEALING)

    def _begin_showdown(self):
        show_all = self.mode == Mode.TOURNAMENT and any(
            player.live and player.stack == 0 for player in self.players
        )
        aggressor = self.betting.aggressor_index if self.betting is not None else None
        self.showdown = ShowdownRound(
            self.players, aggressor, self.board_cards, self.variant.hand_types, show_all
        )
        self._set_phase(Phase.SHOWDOWN)

    def _begin_chips_pushing(self):
        self._final_pots = self.pots()
        self._pushed_count = 0
        self._set_phase(Phase.CHIPS_PUSHING)

    def __str__(self) -> str:
        return (
            f"State({self.variant}, phase={self.phase}, street={self.street_index}, "
            f"stacks={self.stacks()}, bets={self.bets()}, actor={self.actor_index()})"
        )
