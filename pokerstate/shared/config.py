"""
Configuration schema: the single source of truth for defaults.

Defaults are defined as Pydantic field defaults. YAML files provide overrides only.
Validation constraints live here, next to each field.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pokerstate.shared.dicts import deep_merge_dicts

# ---------------------------------------------------------------------------
# Shared type aliases for common constraints
# ---------------------------------------------------------------------------

PositiveInt = Annotated[int, Field(gt=0)]
NonNegInt = Annotated[int, Field(ge=0)]

# One value for every seat, a list by seat, or a mapping seat -> amount
SeatAmounts = Union[NonNegInt, list[NonNegInt], dict[int, NonNegInt]]

AutomationName = Literal[
    "ANTE_POSTING",
    "BET_COLLECTION",
    "BLIND_OR_STRADDLE_POSTING",
    "CARD_BURNING",
    "HOLE_DEALING",
    "BOARD_DEALING",
    "HOLE_CARDS_SHOWING_OR_MUCKING",
    "HAND_KILLING",
    "CHIPS_PUSHING",
    "CHIPS_PULLING",
]


# ---------------------------------------------------------------------------
# Base model: all config classes inherit this
# ---------------------------------------------------------------------------


class StrictFrozenModel(BaseModel):
    """Base for all config models: immutable, extra keys forbidden."""

    model_config = ConfigDict(frozen=True, extra="forbid")


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------


class GameConfig(StrictFrozenModel):
    """Table and variant configuration for one hand."""

    variant: str = Field(default="no-limit-texas-holdem")
    player_count: Annotated[int, Field(ge=2)] = Field(default=6)
    starting_stacks: SeatAmounts = Field(default=200)
    antes: SeatAmounts = Field(default=0)
    blinds_or_straddles: SeatAmounts = Field(default_factory=lambda: {0: 1, 1: 2})
    bring_in: NonNegInt = Field(default=0)
    min_bet: PositiveInt = Field(default=2)
    uniform_antes: bool = Field(default=False)
    mode: Literal["cash_game", "tournament"] = Field(default="cash_game")

    @field_validator("variant")
    @classmethod
    def variant_is_registered(cls, value: str) -> str:
        from pokerstate.game.variants import VARIANTS

        key = value.strip().lower().replace("_", "-")
        if key not in VARIANTS:
            raise ValueError(f"Unknown variant '{value}'; expected one of {sorted(VARIANTS)}")
        return key

    @model_validator(mode="after")
    def seats_are_in_range(self) -> "GameConfig":
        for name in ("starting_stacks", "antes", "blinds_or_straddles"):
            amounts = getattr(self, name)
            if isinstance(amounts, dict):
                outside = sorted(seat for seat in amounts if not 0 <= seat < self.player_count)
                if outside:
                    raise ValueError(
                        f"{name} references seats {outside} outside 0..{self.player_count - 1}"
                    )
            elif isinstance(amounts, list) and len(amounts) > self.player_count:
                raise ValueError(
                    f"{name} has {len(amounts)} entries for {self.player_count} players"
                )
        return self


class AutomationConfig(StrictFrozenModel):
    """Housekeeping steps run without a caller."""

    enabled: tuple[AutomationName, ...] = Field(
        default=(
            "ANTE_POSTING",
            "BET_COLLECTION",
            "BLIND_OR_STRADDLE_POSTING",
            "CARD_BURNING",
            "HOLE_DEALING",
            "BOARD_DEALING",
            "HOLE_CARDS_SHOWING_OR_MUCKING",
            "HAND_KILLING",
            "CHIPS_PUSHING",
            "CHIPS_PULLING",
        )
    )

    @field_validator("enabled", mode="before")
    @classmethod
    def normalize_names(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return tuple(str(item).strip().upper() for item in value)
        return value


class SystemConfig(StrictFrozenModel):
    """System-level configuration."""

    seed: int | None = Field(default=None)
    config_name: str = Field(default="default")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class Config(StrictFrozenModel):
    """
    Complete hand configuration.

    All defaults are defined here in Python. YAML files provide only overrides.
    """

    game: GameConfig = Field(default_factory=GameConfig)
    automations: AutomationConfig = Field(default_factory=AutomationConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize config to a plain dict (for JSON, logging, etc.)."""
        return self.model_dump()

    @classmethod
    def default(cls) -> "Config":
        """Return a Config populated with all defaults."""
        return cls()

    def merge(self, overrides: dict[str, Any]) -> "Config":
        """Return a new Config with the provided overrides merged in."""
        merged = deep_merge_dicts(self.model_dump(), overrides)
        return Config.model_validate(merged)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "Config":
        """Create Config from a dict merged over defaults."""
        merged = deep_merge_dicts(cls().model_dump(), config_dict)
        return cls.model_validate(merged)
