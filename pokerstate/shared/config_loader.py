"""
Configuration loading: YAML overrides applied to Pydantic model defaults.

Defaults live in Python (config.py); YAML files only specify overrides. A YAML
file may declare `extends: <filename>` to inherit from another YAML in the
same directory; the current file's values always win.
"""

import logging
import random
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from pokerstate.game.cards import CardSupply
from pokerstate.game.games import create_state
from pokerstate.game.state import State
from pokerstate.shared.config import Config
from pokerstate.shared.dicts import deep_merge_dicts, nest_keys
from pokerstate.shared.logging_config import configure_logging

logger = logging.getLogger(__name__)


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> Config:
    """
    Load configuration from an optional YAML file with optional programmatic overrides.

    Resolution order (last wins):
      1. Python field defaults (always the base)
      2. YAML file (resolved via ``extends`` chain if present)
      3. Programmatic keyword overrides

    Args:
        path: Optional path to a YAML config file.
        **overrides: Programmatic overrides using ``__`` as a nesting separator,
            e.g. ``game__min_bet=4``.

    Returns:
        Validated, frozen :class:`Config` instance.

    Examples:
        >>> cfg = load_config()
        >>> cfg = load_config("config/stud.yaml")
        >>> cfg = load_config("config/stud.yaml", game__player_count=4)
    """
    config = Config.default()

    if path is not None:
        config = config.merge(_load_yaml(Path(path)))

    if overrides:
        config = config.merge(nest_keys(overrides))

    return config


def _load_yaml(path: Path) -> dict[str, Any]:
    """
    Load a YAML file and recursively resolve any ``extends`` chain.

    Chains are supported (A extends B extends C). The current file's values
    always win over the base.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}

    if "extends" in data:
        base_path = path.parent / data.pop("extends")
        data = deep_merge_dicts(_load_yaml(base_path), data)

    return data


def create_state_from_config(
    config: Config,
    card_supply: Optional[CardSupply] = None,
    rng: Optional[random.Random] = None,
) -> State:
    """
    Build a hand from a validated configuration.

    ``system.seed`` seeds the default deck when neither a card supply nor an
    RNG is passed. ``system.log_level`` sets the package log level.
    """
    configure_logging(level=config.system.log_level)
    game = config.game
    if card_supply is None and rng is None and config.system.seed is not None:
        rng = random.Random(config.system.seed)

    logger.info(f"Starting {game.variant} hand from config '{config.system.config_name}'")
    return create_state(
        variant=game.variant,
        automations=config.automations.enabled,
        uniform_antes=game.uniform_antes,
        antes=game.antes,
        blinds_or_straddles=game.blinds_or_straddles,
        min_bet=game.min_bet,
        starting_stacks=game.starting_stacks,
        player_count=game.player_count,
        mode=game.mode,
        bring_in=game.bring_in,
        card_supply=card_supply,
        rng=rng,
    )
