"""
Game configuration settings.

`GameConfig` carries the rule constants a session is played with.
`EngineSettings` reads host-level overrides from the environment
(prefix ``FORE_``) using pydantic-settings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fore.enums import Difficulty
from fore.money import Money

TOTAL_TILES = 24
START_POSITION = 0


@dataclass(frozen=True)
class GameConfig:
    """Configuration for a Fore game."""

    starting_currency: Money = Money.of_dollars(1500)
    passing_salary: Money = Money.of_dollars(200)
    water_hazard_penalty: Money = Money.of_dollars(50)

    sand_trap_turns: int = 3
    doubles_for_sand_trap: int = 3
    sand_trap_position: int = 8

    min_players: int = 2
    max_players: int = 2

    default_difficulty: Difficulty = Difficulty.MEDIUM
    seed: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: "EngineSettings") -> "GameConfig":
        return cls(
            starting_currency=Money.of_dollars(settings.starting_currency_dollars),
            passing_salary=Money.of_dollars(settings.passing_salary_dollars),
            water_hazard_penalty=Money.of_dollars(settings.water_hazard_penalty_dollars),
            default_difficulty=settings.default_difficulty,
            seed=settings.seed,
        )


class EngineSettings(BaseSettings):
    """
    Host configuration for the engine.

    Environment variables (prefix: FORE_):
        FORE_LOG_LEVEL                    - logging level name (default: INFO)
        FORE_SEED                         - dice seed for new sessions (default: unseeded)
        FORE_DEFAULT_DIFFICULTY           - NPC difficulty when none is given (default: MEDIUM)
        FORE_STARTING_CURRENCY_DOLLARS    - starting balance (default: 1500)
        FORE_PASSING_SALARY_DOLLARS       - pass-start salary (default: 200)
        FORE_WATER_HAZARD_PENALTY_DOLLARS - water hazard penalty (default: 50)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="FORE_",
    )

    log_level: str = Field(default="INFO", description="Logging level name.")
    seed: Optional[int] = Field(default=None, description="Seed for the dice RNG.")
    default_difficulty: Difficulty = Field(
        default=Difficulty.MEDIUM,
        description="NPC difficulty used when a vs-NPC game gives none.",
    )
    starting_currency_dollars: int = Field(default=1500, gt=0)
    passing_salary_dollars: int = Field(default=200, ge=0)
    water_hazard_penalty_dollars: int = Field(default=50, ge=0)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Optional[str]) -> str:
        if not value:
            return "INFO"
        level = str(value).upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("default_difficulty", mode="before")
    @classmethod
    def parse_difficulty(cls, value):
        """Accept difficulty names (``hard``) as well as members."""
        if isinstance(value, str):
            try:
                return Difficulty[value.upper()]
            except KeyError:
                raise ValueError(f"Unknown difficulty: {value}") from None
        return value

    def game_config(self) -> GameConfig:
        return GameConfig.from_settings(self)


@lru_cache
def get_engine_settings() -> EngineSettings:
    """Return cached engine settings instance."""
    return EngineSettings()


def configure_logging(settings: Optional[EngineSettings] = None) -> None:
    """Configure root logging for a host process from engine settings."""
    settings = settings or get_engine_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
