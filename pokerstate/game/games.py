"""
Factory for hand states.

``create_state`` turns loosely typed configuration (ints, sequences or
seat mappings) into a validated ``State`` with the enabled automations
already applied.
"""

import logging
import random
from typing import Iterable, List, Mapping, Optional, Union

from pokerstate.game.cards import CardSupply
from pokerstate.game.errors import MalformedConfigurationError
from pokerstate.game.state import Automation, Mode, State
from pokerstate.game.variants import Variant, get_variant

logger = logging.getLogger(__name__)

RawValues = Union[int, Iterable[int], Mapping[int, int], None]

ALL_AUTOMATIONS = tuple(Automation)


def clean_values(values: RawValues, count: int, name: str = "values") -> List[int]:
    """
    Expand a raw per-seat value into one integer per player.

    Args:
        values: A single int (every player), a sequence (padded with zeros),
            a mapping of seat index to amount, or None (all zeros)
        count: Number of players
        name: Label used in error messages

    Returns:
        One non-negative amount per player
    """
    if values is None:
        cleaned = [0] * count
    elif isinstance(values, int):
        cleaned = [values] * count
    elif isinstance(values, Mapping):
        cleaned = [0] * count
        for key, value in values.items():
            index = int(key)
            if not 0 <= index < count:
                raise MalformedConfigurationError(
                    f"{name} references player {index}, but there are {count} players"
                )
            cleaned[index] = int(value)
    else:
        cleaned = [int(value) for value in values]
        if len(cleaned) > count:
            raise MalformedConfigurationError(
                f"{name} has {len(cleaned)} entries, but there are {count} players"
            )
        cleaned += [0] * (count - len(cleaned))

    negative = [value for value in cleaned if value < 0]
    if negative:
        raise MalformedConfigurationError(f"{name} contains negative amounts: {negative}")
    return cleaned


def clean_automations(automations: Iterable[Union[Automation, str]]) -> frozenset:
    """Accept Automation members or their names (case-insensitive)."""
    cleaned = set()
    for automation in automations:
        if isinstance(automation, Automation):
            cleaned.add(automation)
            continue
        try:
            cleaned.add(Automation[str(automation).strip().upper()])
        except KeyError as exc:
            raise MalformedConfigurationError(f"Unknown automation: {automation!r}") from exc
    return frozenset(cleaned)


def clean_mode(mode: Union[Mode, str]) -> Mode:
    if isinstance(mode, Mode):
        return mode
    try:
        return Mode[str(mode).strip().upper().replace("-", "_")]
    except KeyError as exc:
        raise MalformedConfigurationError(f"Unknown mode: {mode!r}") from exc


def create_state(
    variant: Union[Variant, str],
    automations: Iterable[Union[Automation, str]],
    uniform_antes: bool,
    antes: RawValues,
    blinds_or_straddles: RawValues,
    min_bet: int,
    starting_stacks: RawValues,
    player_count: int,
    mode: Union[Mode, str],
    bring_in: int = 0,
    card_supply: Optional[CardSupply] = None,
    rng: Optional[random.Random] = None,
) -> State:
    """
    Create the initial state of a hand.

    Args:
        variant: Variant or registered variant name
        automations: Steps to run without a caller
        uniform_antes: Cap antes at the smallest starting stack
        antes: Ante per seat
        blinds_or_straddles: Blind or straddle per seat
        min_bet: Minimum bet unit (fixed-limit small bet)
        starting_stacks: Stack per seat
        player_count: Number of players
        mode: Tournament or cash game
        bring_in: Bring-in amount, required by bring-in variants
        card_supply: Source of cards (defaults to the variant's shuffled deck)
        rng: Random generator for the default deck

    Returns:
        State with the enabled automations applied

    Raises:
        MalformedConfigurationError: If the configuration cannot describe a hand
    """
    variant = get_variant(variant)

    if player_count < variant.min_player_count:
        raise MalformedConfigurationError(
            f"{variant} needs at least {variant.min_player_count} players, got {player_count}"
        )
    if min_bet <= 0:
        raise MalformedConfigurationError(f"Non-positive minimum bet: {min_bet}")

    stacks = clean_values(starting_stacks, player_count, "starting_stacks")
    if any(stack <= 0 for stack in stacks):
        raise MalformedConfigurationError(f"Non-positive starting stacks: {stacks}")

    if variant.uses_bring_in:
        if bring_in <= 0:
            raise MalformedConfigurationError(f"{variant} requires a positive bring-in")
        if bring_in >= min_bet:
            raise MalformedConfigurationError(
                f"Bring-in {bring_in} must be smaller than the minimum bet {min_bet}"
            )
    elif bring_in:
        raise MalformedConfigurationError(f"{variant} does not use a bring-in")

    if card_supply is None:
        card_supply = variant.deck_factory(rng if rng is not None else random.Random())

    logger.debug(f"Creating {variant} state for {player_count} players")
    return State(
        variant=variant,
        automations=clean_automations(automations),
        antes=clean_values(antes, player_count, "antes"),
        blinds_or_straddles=clean_values(blinds_or_straddles, player_count, "blinds_or_straddles"),
        bring_in=bring_in,
        min_bet=min_bet,
        starting_stacks=stacks,
        mode=clean_mode(mode),
        uniform_antes=uniform_antes,
        card_supply=card_supply,
    )
