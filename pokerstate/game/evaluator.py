"""
Hand ranking.

The state machine only needs a ``HandRanker``: something that turns a
player's cards for a pot into a comparable ``Hand`` (greater is stronger) or
``None`` when the cards do not make a qualifying hand. High hands are
evaluated with treys; lowball hands are ranked directly from card ranks.
"""

from collections import Counter
from dataclasses import dataclass, field
from itertools import combinations
from typing import Iterable, Optional, Protocol, Sequence, Tuple

from treys import Evaluator as TreysEvaluator

from pokerstate.game.cards import RANKS, Card

_LOW_RANK_SYMBOLS = "A23456789TJQK"


@dataclass(frozen=True, order=True)
class Hand:
    """
    Strength of a player's hand for one hand type.

    Only ``value`` takes part in comparisons, so hands of equal strength
    compare equal even when made from different cards.
    """

    value: Tuple[int, ...]
    label: str = field(default="", compare=False)
    cards: Tuple[Card, ...] = field(default=(), compare=False)

    def __str__(self) -> str:
        cards = "".join(repr(card) for card in self.cards)
        return f"{self.label} ({cards})" if cards else self.label


class HandRanker(Protocol):
    """Variant-aware ranking capability used at showdown."""

    name: str
    low: bool

    def strength(self, hole_cards: Sequence[Card], board_cards: Sequence[Card]) -> Optional[Hand]:
        """Best hand the cards make, or None if they make no qualifying hand."""
        ...


# Global treys evaluator instance (building the lookup tables is not free)
_treys_instance = None


def get_treys_evaluator() -> TreysEvaluator:
    """Get or create the shared treys evaluator."""
    global _treys_instance
    if _treys_instance is None:
        _treys_instance = TreysEvaluator()
    return _treys_instance


def _treys_hand(cards: Sequence[Card]) -> Hand:
    """Evaluate 5 to 7 cards with treys (lower treys scores are stronger)."""
    evaluator = get_treys_evaluator()
    score = evaluator.evaluate([card.card_int for card in cards], [])
    label = evaluator.class_to_string(evaluator.get_rank_class(score))
    return Hand(value=(-score,), label=label, cards=tuple(cards))


def _low_rank(card: Card) -> int:
    """Rank value with aces low (ace = 1, king = 13)."""
    return (card.rank_index + 1) % 13 + 1


def _ace_to_five_key(cards: Sequence[Card]) -> Tuple[int, ...]:
    """Ace-to-five lowball key, lower is better. Straights and flushes do not count."""
    counts = Counter(_low_rank(card) for card in cards)
    ordered = sorted(counts, key=lambda rank: (counts[rank], rank), reverse=True)
    shape = sorted(counts.values(), reverse=True)
    return tuple(shape) + tuple(ordered)


def _standard_key(cards: Sequence[Card]) -> Tuple[int, ...]:
    """
    Five-card high key with aces always high, greater is better.

    A-2-3-4-5 is not a straight here; this is the deuce-to-seven convention.
    """
    ranks = [card.rank_index for card in cards]
    counts = Counter(ranks)
    ordered = sorted(counts, key=lambda rank: (counts[rank], rank), reverse=True)
    shape = sorted(counts.values(), reverse=True)
    flush = len({card.suit for card in cards}) == 1
    straight = len(counts) == 5 and max(ranks) - min(ranks) == 4

    if straight and flush:
        category = 8
    elif shape[0] == 4:
        category = 7
    elif shape == [3, 2]:
        category = 6
    elif flush:
        category = 5
    elif straight:
        category = 4
    elif shape[0] == 3:
        category = 3
    elif shape == [2, 2, 1]:
        category = 2
    elif shape[0] == 2:
        category = 1
    else:
        category = 0
    return (category,) + tuple(ordered)


def _low_label(cards: Sequence[Card]) -> str:
    ranks = sorted((_low_rank(card) for card in cards), reverse=True)
    return "-".join(_LOW_RANK_SYMBOLS[rank - 1] for rank in ranks) + " low"


def _deuce_label(cards: Sequence[Card]) -> str:
    ranks = sorted((card.rank_index for card in cards), reverse=True)
    return "-".join(RANKS[rank] for rank in ranks) + " low"


def _five_card_combinations(
    hole_cards: Sequence[Card], board_cards: Sequence[Card], hole_count: Optional[int]
) -> Iterable[Tuple[Card, ...]]:
    """Yield candidate five-card hands (any five, or exactly hole_count from the hole)."""
    if hole_count is None:
        yield from combinations(list(hole_cards) + list(board_cards), 5)
        return
    for hole in combinations(hole_cards, hole_count):
        for board in combinations(board_cards, 5 - hole_count):
            yield hole + board


class StandardHighRanker:
    """Best five of all cards, standard high rankings (hold'em, stud)."""

    name = "standard-high"
    low = False

    def strength(self, hole_cards, board_cards) -> Optional[Hand]:
        cards = list(hole_cards) + list(board_cards)
        if len(cards) < 5:
            return None
        if len(cards) <= 7:
            return _treys_hand(cards)
        return max(_treys_hand(combo) for combo in combinations(cards, 5))


class OmahaHighRanker:
    """Exactly two hole cards and three board cards, standard high rankings."""

    name = "omaha-high"
    low = False

    def strength(self, hole_cards, board_cards) -> Optional[Hand]:
        if len(hole_cards) < 2 or len(board_cards) < 3:
            return None
        return max(_treys_hand(combo) for combo in _five_card_combinations(hole_cards, board_cards, 2))


class _AceToFiveLowRanker:
    """Shared machinery for ace-to-five lowball (optionally eight-or-better)."""

    name = "ace-to-five-low"
    low = True
    qualifier: Optional[int] = None
    hole_count: Optional[int] = None

    def _qualifies(self, combo: Sequence[Card]) -> bool:
        if self.qualifier is None:
            return True
        ranks = [_low_rank(card) for card in combo]
        return len(set(ranks)) == 5 and max(ranks) <= self.qualifier

    def strength(self, hole_cards, board_cards) -> Optional[Hand]:
        best_key = None
        best_combo = None
        for combo in _five_card_combinations(hole_cards, board_cards, self.hole_count):
            if not self._qualifies(combo):
                continue
            key = _ace_to_five_key(combo)
            if best_key is None or key < best_key:
                best_key, best_combo = key, combo
        if best_key is None:
            return None
        return Hand(
            value=tuple(-part for part in best_key),
            label=_low_label(best_combo),
            cards=tuple(best_combo),
        )


class RegularLowRanker(_AceToFiveLowRanker):
    """Ace-to-five low without qualifier (razz)."""

    name = "regular-low"


class EightOrBetterLowRanker(_AceToFiveLowRanker):
    """Ace-to-five low with an eight-or-better qualifier (stud/8)."""

    name = "eight-or-better-low"
    qualifier = 8


class OmahaEightOrBetterLowRanker(_AceToFiveLowRanker):
    """Eight-or-better low using exactly two hole and three board cards."""

    name = "omaha-eight-or-better-low"
    qualifier = 8
    hole_count = 2


class DeuceToSevenLowRanker:
    """Deuce-to-seven lowball: the worst standard high hand wins, aces high."""

    name = "deuce-to-seven-low"
    low = True

    def strength(self, hole_cards, board_cards) -> Optional[Hand]:
        best_key = None
        best_combo = None
        for combo in _five_card_combinations(hole_cards, board_cards, None):
            key = _standard_key(combo)
            if best_key is None or key < best_key:
                best_key, best_combo = key, combo
        if best_key is None:
            return None
        return Hand(
            value=tuple(-part for part in best_key),
            label=_deuce_label(best_combo),
            cards=tuple(best_combo),
        )


STANDARD_HIGH = StandardHighRanker()
OMAHA_HIGH = OmahaHighRanker()
REGULAR_LOW = RegularLowRanker()
EIGHT_OR_BETTER_LOW = EightOrBetterLowRanker()
OMAHA_EIGHT_OR_BETTER_LOW = OmahaEightOrBetterLowRanker()
DEUCE_TO_SEVEN_LOW = DeuceToSevenLowRanker()


# Opening keys for stud-style streets (greater key opens)


def up_card_key(card: Card, aces_low: bool = False) -> Tuple[int, int]:
    """Card order used for bring-in: rank first, then suit (clubs lowest)."""
    rank = _low_rank(card) if aces_low else card.rank_index
    return (rank, card.suit_index)


def visible_high_key(cards: Sequence[Card]) -> Tuple[int, ...]:
    """Strength of a partial face-up high hand (pairs and trips count, aces high)."""
    counts = Counter(card.rank_index for card in cards)
    ordered = sorted(counts, key=lambda rank: (counts[rank], rank), reverse=True)
    return tuple(sorted(counts.values(), reverse=True)) + tuple(ordered)


def visible_low_key(cards: Sequence[Card]) -> Tuple[int, ...]:
    """Strength of a partial face-up ace-to-five low hand."""
    return tuple(-part for part in _ace_to_five_key(cards))
