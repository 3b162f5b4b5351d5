"""Errors raised by the hand state machine."""


class PokerStateError(ValueError):
    """Base class for every error raised by the state machine."""

    pass


class OutOfTurnError(PokerStateError):
    """Raised when the wrong player, or the wrong phase, attempts an operation."""

    pass


class IllegalActionError(PokerStateError):
    """Raised when an operation is not in the current legal set."""

    pass


class InsufficientChipsError(IllegalActionError):
    """Raised when an amount exceeds the stack or the betting structure's limit."""

    pass


class InvalidPlayerIndexError(PokerStateError, IndexError):
    """Raised when a player index is outside the table."""

    pass


class CardSupplyExhaustedError(PokerStateError):
    """Raised when the card supply runs out. Fatal for the hand."""

    pass


class MalformedConfigurationError(PokerStateError):
    """Raised when a hand cannot be created from the given configuration."""

    pass
