"""
Variant descriptors.

A ``Variant`` is pure data: an ordered list of street templates, a betting
structure, the deck to use, and the hand rankers that split the pot. The
controllers read this data; no variant overrides any behaviour.
"""

import random
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, Optional, Tuple

from pokerstate.game.cards import Deck
from pokerstate.game.errors import MalformedConfigurationError
from pokerstate.game.evaluator import (
    DEUCE_TO_SEVEN_LOW,
    EIGHT_OR_BETTER_LOW,
    OMAHA_EIGHT_OR_BETTER_LOW,
    OMAHA_HIGH,
    REGULAR_LOW,
    STANDARD_HIGH,
    HandRanker,
)


class BettingStructure(Enum):
    """Sizing rule for completions, bets and raises."""

    FIXED_LIMIT = auto()
    POT_LIMIT = auto()
    NO_LIMIT = auto()

    def __str__(self) -> str:
        return self.name.lower().replace("_", "-")


class Opening(Enum):
    """How the first player to act on a street is chosen."""

    POSITION = auto()
    LOW_CARD = auto()
    HIGH_CARD = auto()
    LOW_HAND = auto()
    HIGH_HAND = auto()

    def has_bring_in(self) -> bool:
        """Card-based openings are bring-in streets."""
        return self in (Opening.LOW_CARD, Opening.HIGH_CARD)


@dataclass(frozen=True)
class Street:
    """
    One betting stage of a variant.

    Attributes:
        card_burning: Whether a card is burnt before dealing
        hole_dealing_statuses: One entry per hole card dealt, True if face up
        board_dealing_count: Number of board cards dealt
        draw: Whether players may discard and draw replacements
        opening: How the first actor is chosen
        min_completion_betting_or_raising_amount: Minimum bet/raise increment
            (the fixed increment in fixed-limit)
        max_completion_betting_or_raising_count: Cap on bets/raises, None for no cap
    """

    card_burning: bool
    hole_dealing_statuses: Tuple[bool, ...]
    board_dealing_count: int
    draw: bool
    opening: Opening
    min_completion_betting_or_raising_amount: int
    max_completion_betting_or_raising_count: Optional[int] = None

    def __post_init__(self):
        if self.hole_dealing_statuses and self.draw:
            raise MalformedConfigurationError("Only one of hole dealing or drawing is permitted")
        if self.min_completion_betting_or_raising_amount <= 0:
            raise MalformedConfigurationError(
                "Non-positive minimum bet/raise amount supplied: "
                f"{self.min_completion_betting_or_raising_amount}"
            )
        if self.board_dealing_count < 0:
            raise MalformedConfigurationError(
                f"Negative board dealing count: {self.board_dealing_count}"
            )


@dataclass(frozen=True)
class StreetTemplate:
    """Street shape with its bet size expressed as a multiple of the minimum bet."""

    card_burning: bool
    hole_dealing_statuses: Tuple[bool, ...]
    board_dealing_count: int
    draw: bool
    opening: Opening
    bet_multiplier: int = 1

    def build(self, min_bet: int, max_count: Optional[int]) -> Street:
        return Street(
            card_burning=self.card_burning,
            hole_dealing_statuses=self.hole_dealing_statuses,
            board_dealing_count=self.board_dealing_count,
            draw=self.draw,
            opening=self.opening,
            min_completion_betting_or_raising_amount=min_bet * self.bet_multiplier,
            max_completion_betting_or_raising_count=max_count,
        )


@dataclass(frozen=True)
class Variant:
    """
    Static description of a poker game.

    Attributes:
        name: Registry identifier (e.g. 'no-limit-texas-holdem')
        street_templates: Streets in order
        betting_structure: Sizing rule
        hand_types: Rankers; the pot is split evenly between them (hi/lo)
        deck_factory: Builds the default card supply from an RNG
        uses_bring_in: Whether the first street opens with a bring-in
        max_completion_betting_or_raising_count: Per-street raise cap
        min_player_count: Smallest legal table
    """

    name: str
    street_templates: Tuple[StreetTemplate, ...]
    betting_structure: BettingStructure
    hand_types: Tuple[HandRanker, ...]
    deck_factory: Callable[[Optional[random.Random]], Deck] = Deck.standard
    uses_bring_in: bool = False
    max_completion_betting_or_raising_count: Optional[int] = None
    min_player_count: int = 2

    def build_streets(self, min_bet: int) -> Tuple[Street, ...]:
        """Materialize the streets for a given minimum bet unit."""
        return tuple(
            template.build(min_bet, self.max_completion_betting_or_raising_count)
            for template in self.street_templates
        )

    def __str__(self) -> str:
        return self.name


def _holdem_streets(hole_count: int, fixed_limit: bool) -> Tuple[StreetTemplate, ...]:
    big = 2 if fixed_limit else 1
    return (
        StreetTemplate(False, (False,) * hole_count, 0, False, Opening.POSITION),
        StreetTemplate(True, (), 3, False, Opening.POSITION),
        StreetTemplate(True, (), 1, False, Opening.POSITION, big),
        StreetTemplate(True, (), 1, False, Opening.POSITION, big),
    )


def _stud_streets(low: bool) -> Tuple[StreetTemplate, ...]:
    bring_in_opening = Opening.HIGH_CARD if low else Opening.LOW_CARD
    hand_opening = Opening.LOW_HAND if low else Opening.HIGH_HAND
    return (
        StreetTemplate(False, (False, False, True), 0, False, bring_in_opening),
        StreetTemplate(True, (True,), 0, False, hand_opening),
        StreetTemplate(True, (True,), 0, False, hand_opening, 2),
        StreetTemplate(True, (True,), 0, False, hand_opening, 2),
        StreetTemplate(True, (False,), 0, False, hand_opening, 2),
    )


def _draw_streets(draw_count: int, fixed_limit: bool) -> Tuple[StreetTemplate, ...]:
    streets = [StreetTemplate(False, (False,) * 5, 0, False, Opening.POSITION)]
    for index in range(draw_count):
        # Fixed-limit doubles the bet after the first draw
        multiplier = 2 if fixed_limit and index >= 1 else 1
        streets.append(StreetTemplate(True, (), 0, True, Opening.POSITION, multiplier))
    return tuple(streets)


FIXED_LIMIT_TEXAS_HOLDEM = Variant(
    name="fixed-limit-texas-holdem",
    street_templates=_holdem_streets(2, fixed_limit=True),
    betting_structure=BettingStructure.FIXED_LIMIT,
    hand_types=(STANDARD_HIGH,),
    max_completion_betting_or_raising_count=4,
)

NO_LIMIT_TEXAS_HOLDEM = Variant(
    name="no-limit-texas-holdem",
    street_templates=_holdem_streets(2, fixed_limit=False),
    betting_structure=BettingStructure.NO_LIMIT,
    hand_types=(STANDARD_HIGH,),
)

POT_LIMIT_OMAHA_HOLDEM = Variant(
    name="pot-limit-omaha-holdem",
    street_templates=_holdem_streets(4, fixed_limit=False),
    betting_structure=BettingStructure.POT_LIMIT,
    hand_types=(OMAHA_HIGH,),
)

FIXED_LIMIT_OMAHA_HOLDEM_HIGH_LOW = Variant(
    name="fixed-limit-omaha-holdem-high-low",
    street_templates=_holdem_streets(4, fixed_limit=True),
    betting_structure=BettingStructure.FIXED_LIMIT,
    hand_types=(OMAHA_HIGH, OMAHA_EIGHT_OR_BETTER_LOW),
    max_completion_betting_or_raising_count=4,
)

FIXED_LIMIT_SEVEN_CARD_STUD = Variant(
    name="fixed-limit-seven-card-stud",
    street_templates=_stud_streets(low=False),
    betting_structure=BettingStructure.FIXED_LIMIT,
    hand_types=(STANDARD_HIGH,),
    uses_bring_in=True,
    max_completion_betting_or_raising_count=4,
)

FIXED_LIMIT_SEVEN_CARD_STUD_HIGH_LOW = Variant(
    name="fixed-limit-seven-card-stud-high-low",
    street_templates=_stud_streets(low=False),
    betting_structure=BettingStructure.FIXED_LIMIT,
    hand_types=(STANDARD_HIGH, EIGHT_OR_BETTER_LOW),
    uses_bring_in=True,
    max_completion_betting_or_raising_count=4,
)

FIXED_LIMIT_RAZZ = Variant(
    name="fixed-limit-razz",
    street_templates=_stud_streets(low=True),
    betting_structure=BettingStructure.FIXED_LIMIT,
    hand_types=(REGULAR_LOW,),
    uses_bring_in=True,
    max_completion_betting_or_raising_count=4,
)

NO_LIMIT_DEUCE_TO_SEVEN_SINGLE_DRAW = Variant(
    name="no-limit-deuce-to-seven-single-draw",
    street_templates=_draw_streets(1, fixed_limit=False),
    betting_structure=BettingStructure.NO_LIMIT,
    hand_types=(DEUCE_TO_SEVEN_LOW,),
)

FIXED_LIMIT_DEUCE_TO_SEVEN_TRIPLE_DRAW = Variant(
    name="fixed-limit-deuce-to-seven-triple-draw",
    street_templates=_draw_streets(3, fixed_limit=True),
    betting_structure=BettingStructure.FIXED_LIMIT,
    hand_types=(DEUCE_TO_SEVEN_LOW,),
    max_completion_betting_or_raising_count=4,
)

VARIANTS: Dict[str, Variant] = {
    variant.name: variant
    for variant in (
        FIXED_LIMIT_TEXAS_HOLDEM,
        NO_LIMIT_TEXAS_HOLDEM,
        POT_LIMIT_OMAHA_HOLDEM,
        FIXED_LIMIT_OMAHA_HOLDEM_HIGH_LOW,
        FIXED_LIMIT_SEVEN_CARD_STUD,
        FIXED_LIMIT_SEVEN_CARD_STUD_HIGH_LOW,
        FIXED_LIMIT_RAZZ,
        NO_LIMIT_DEUCE_TO_SEVEN_SINGLE_DRAW,
        FIXED_LIMIT_DEUCE_TO_SEVEN_TRIPLE_DRAW,
    )
}


def get_variant(variant) -> Variant:
    """
    Resolve a variant identifier.

    Args:
        variant: A Variant, or a registered name (case and '_' insensitive)

    Returns:
        The Variant
    """
    if isinstance(variant, Variant):
        return variant
    key = str(variant).strip().lower().replace("_", "-").replace(" ", "-")
    try:
        return VARIANTS[key]
    except KeyError as exc:
        raise MalformedConfigurationError(
            f"Unknown variant {variant!r}; expected one of {sorted(VARIANTS)}"
        ) from exc
