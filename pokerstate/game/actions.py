"""
Betting decisions available to the player due to act.

``State.legal_actions()`` returns a list of ``Action`` descriptors. Sized
actions carry the legal range; the others carry the chips they would move.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class ActionType(Enum):
    """Decisions a player can make during a betting round."""

    FOLD = auto()
    CHECK_OR_CALL = auto()
    POST_BRING_IN = auto()
    COMPLETE_BET_OR_RAISE_TO = auto()

    def __str__(self) -> str:
        return self.name.lower()

    def is_aggressive(self) -> bool:
        """Check if action puts more chips in than the current high bet."""
        return self == ActionType.COMPLETE_BET_OR_RAISE_TO

    def is_passive(self) -> bool:
        """Check if action only matches (or opens with the forced) bet."""
        return self in (ActionType.CHECK_OR_CALL, ActionType.POST_BRING_IN)


@dataclass(frozen=True)
class Action:
    """
    Immutable description of one legal decision.

    Attributes:
        type: The decision
        amount: Chips moved by fold/check/call/bring-in, or the minimum
            raise-to total for COMPLETE_BET_OR_RAISE_TO
        max_amount: Maximum raise-to total (COMPLETE_BET_OR_RAISE_TO only)
    """

    type: ActionType
    amount: int = 0
    max_amount: Optional[int] = None

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError(f"Action amount cannot be negative: {self.amount}")

        if self.type == ActionType.FOLD and self.amount != 0:
            raise ValueError(f"{self.type} must have amount=0, got {self.amount}")

        if self.type == ActionType.COMPLETE_BET_OR_RAISE_TO:
            if self.amount <= 0:
                raise ValueError(f"{self.type} must have positive amount, got {self.amount}")
            if self.max_amount is None or self.max_amount < self.amount:
                raise ValueError(
                    f"{self.type} needs max_amount >= amount, got {self.max_amount} < {self.amount}"
                )
        elif self.max_amount is not None:
            raise ValueError(f"{self.type} does not take a max_amount")

    @property
    def min_amount(self) -> int:
        """Alias of ``amount`` that reads better for raises."""
        return self.amount

    def is_aggressive(self) -> bool:
        return self.type.is_aggressive()

    def is_passive(self) -> bool:
        return self.type.is_passive()

    def allows(self, amount: int) -> bool:
        """Check whether a raise-to total falls inside this action's range."""
        if self.type != ActionType.COMPLETE_BET_OR_RAISE_TO:
            return False
        return self.amount <= amount <= self.max_amount

    def __str__(self) -> str:
        if self.type == ActionType.COMPLETE_BET_OR_RAISE_TO:
            if self.amount == self.max_amount:
                return f"{self.type.name}({self.amount})"
            return f"{self.type.name}({self.amount}-{self.max_amount})"
        if self.amount > 0:
            return f"{self.type.name}({self.amount})"
        return self.type.name


def fold() -> Action:
    """Create a fold action."""
    return Action(ActionType.FOLD, 0)


def check_or_call(amount: int = 0) -> Action:
    """Create a check (amount 0) or call action."""
    return Action(ActionType.CHECK_OR_CALL, amount)


def post_bring_in(amount: int) -> Action:
    """Create a bring-in action."""
    return Action(ActionType.POST_BRING_IN, amount)


def complete_bet_or_raise_to(min_amount: int, max_amount: int) -> Action:
    """Create a completion/bet/raise action with its legal range."""
    return Action(ActionType.COMPLETE_BET_OR_RAISE_TO, min_amount, max_amount)
