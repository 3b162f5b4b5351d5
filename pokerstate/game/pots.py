"""
Pot engine.

Pots are never stored; they are derived from each player's committed chips
whenever they are asked for.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple


@dataclass(frozen=True)
class Pot:
    """
    A main pot or side pot.

    Attributes:
        amount: Chips in the pot
        player_indices: Sorted indices of the live players who may win it
    """

    amount: int
    player_indices: Tuple[int, ...]

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError(f"Pot amount must be positive, got {self.amount}")

    @property
    def contested(self) -> bool:
        """True if more than one player is eligible."""
        return len(self.player_indices) > 1


def compute_pots(contributions: Sequence[int], live: Sequence[bool]) -> List[Pot]:
    """
    Partition committed chips into a main pot and ordered side pots.

    Each distinct non-zero contribution level is a tier. A tier holds the
    difference to the previous level from every player who reached it, and
    is eligible to the live players who reached it. Folded chips count toward
    the amount but never toward eligibility.

    Args:
        contributions: Chips committed per player
        live: Whether each player is still in the hand

    Returns:
        Pots ordered from the main pot outwards

    Example:
        >>> compute_pots([100, 300, 300], [True, True, True])
        [Pot(amount=300, player_indices=(0, 1, 2)), Pot(amount=400, player_indices=(1, 2))]
    """
    if len(contributions) != len(live):
        raise ValueError(
            f"Got {len(contributions)} contributions but {len(live)} live flags"
        )

    pots = []
    previous = 0
    for tier in sorted({amount for amount in contributions if amount > 0}):
        reached = [index for index, amount in enumerate(contributions) if amount >= tier]
        amount = (tier - previous) * len(reached)
        if amount > 0:
            eligible = tuple(index for index in reached if live[index])
            pots.append(Pot(amount=amount, player_indices=eligible))
        previous = tier
    return pots
