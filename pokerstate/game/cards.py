"""
Cards, decks and the card supply interface.

Cards wrap treys integers so that the default hand rankers can evaluate them
without conversion. The state machine only ever talks to a ``CardSupply``;
``Deck`` is the default shuffled implementation.
"""

import random
from typing import Iterable, List, Optional, Protocol, Sequence

from treys import Card as TreysCard

from pokerstate.game.errors import CardSupplyExhaustedError

RANKS = "23456789TJQKA"
SUITS = "cdhs"

# Module-level cache for Card.new()
_CARD_CACHE = {}


class Card:
    """
    A playing card with a rank and a suit.

    Backed by the treys integer encoding. Cards are cached: calling
    ``Card.new`` twice with the same string returns the same object.
    """

    def __init__(self, card_int: int):
        """
        Initialize from treys card integer.

        Args:
            card_int: Integer representation from treys (use Card.new() to create)
        """
        self.card_int = card_int
        self._hash = None

    @classmethod
    def new(cls, card_str: str) -> "Card":
        """
        Create a card from string representation (e.g., 'As', 'Kh', '2d').

        Args:
            card_str: Two-character string (rank + suit)
                     Ranks: '2'-'9', 'T', 'J', 'Q', 'K', 'A'
                     Suits: 's', 'h', 'd', 'c'

        Returns:
            Card instance (cached)
        """
        if card_str not in _CARD_CACHE:
            if len(card_str) != 2 or card_str[0] not in RANKS or card_str[1] not in SUITS:
                raise ValueError(f"Invalid card string: {card_str!r}")
            _CARD_CACHE[card_str] = cls(TreysCard.new(card_str))
        return _CARD_CACHE[card_str]

    @property
    def rank(self) -> str:
        """Rank character ('2'-'9', 'T', 'J', 'Q', 'K', 'A')."""
        return RANKS[TreysCard.get_rank_int(self.card_int)]

    @property
    def suit(self) -> str:
        """Suit character ('c', 'd', 'h', 's')."""
        return TreysCard.INT_SUIT_TO_CHAR_SUIT[TreysCard.get_suit_int(self.card_int)]

    @property
    def rank_index(self) -> int:
        """Rank index with aces high (deuce = 0, ace = 12)."""
        return TreysCard.get_rank_int(self.card_int)

    @property
    def suit_index(self) -> int:
        """Suit index in bridge order (clubs = 0, spades = 3)."""
        return SUITS.index(self.suit)

    def __str__(self) -> str:
        return TreysCard.int_to_pretty_str(self.card_int)

    def __repr__(self) -> str:
        return TreysCard.int_to_str(self.card_int)

    def __eq__(self, other: object) -> bool:
        if type(other) is Card:
            return self.card_int == other.card_int
        if not isinstance(other, Card):
            return False
        return self.card_int == other.card_int

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(self.card_int)
        return self._hash

    def __lt__(self, other: "Card") -> bool:
        return (self.rank_index, self.suit_index) < (other.rank_index, other.suit_index)


def parse_cards(raw: str) -> List[Card]:
    """
    Parse a run of card strings such as ``"AsKh"`` or ``"As Kh, 2d"``.

    Args:
        raw: Concatenated two-character card strings, optionally separated
            by whitespace or commas. ``10`` is accepted for tens.

    Returns:
        Parsed cards in order
    """
    cleaned = raw.replace("10", "T").replace(",", " ")
    cards = []
    for chunk in cleaned.split():
        if len(chunk) % 2 != 0:
            raise ValueError(f"Card string length must be a multiple of 2, got {chunk!r}")
        cards.extend(Card.new(chunk[i : i + 2]) for i in range(0, len(chunk), 2))
    return cards


def coerce_cards(cards) -> List[Card]:
    """Accept a card string, a single Card, or an iterable of cards/strings."""
    if isinstance(cards, str):
        return parse_cards(cards)
    if isinstance(cards, Card):
        return [cards]
    result = []
    for card in cards:
        result.extend(coerce_cards(card))
    return result


class CardSupply(Protocol):
    """Source of cards for one hand."""

    def next_card(self) -> Card:
        """Return the next card or raise CardSupplyExhaustedError."""
        ...


class Deck:
    """
    Default card supply: a list of cards dealt from the front.

    Cards are never returned to the deck during a hand, so burnt, mucked and
    discarded cards stay out of play.
    """

    def __init__(self, cards: Iterable[Card]):
        self._cards = list(cards)

    @classmethod
    def standard(cls, rng: Optional[random.Random] = None) -> "Deck":
        """Shuffled 52-card deck (unshuffled when rng is None)."""
        return cls._build(RANKS, rng)

    @classmethod
    def stacked(cls, cards: Sequence) -> "Deck":
        """Deck that deals exactly the given cards in order (for replays and tests)."""
        return cls(coerce_cards(cards))

    @classmethod
    def _build(cls, ranks: str, rng: Optional[random.Random]) -> "Deck":
        cards = [Card.new(f"{rank}{suit}") for rank in ranks for suit in SUITS]
        if rng is not None:
            rng.shuffle(cards)
        return cls(cards)

    def next_card(self) -> Card:
        if not self._cards:
            raise CardSupplyExhaustedError("The card supply is exhausted")
        return self._cards.pop(0)

    def __len__(self) -> int:
        return len(self._cards)
