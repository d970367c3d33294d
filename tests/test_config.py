import pytest
from pydantic import ValidationError

from fore.config import EngineSettings, GameConfig
from fore.enums import Difficulty
from fore.money import Money


def test_game_config_defaults():
    config = GameConfig()
    assert config.starting_currency == Money.of_dollars(1500)
    assert config.passing_salary == Money.of_dollars(200)
    assert config.water_hazard_penalty == Money.of_dollars(50)
    assert config.sand_trap_position == 8
    assert config.max_players == 2


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("FORE_LOG_LEVEL", "debug")
    monkeypatch.setenv("FORE_SEED", "7")
    monkeypatch.setenv("FORE_DEFAULT_DIFFICULTY", "ruthless")
    monkeypatch.setenv("FORE_STARTING_CURRENCY_DOLLARS", "2000")

    settings = EngineSettings(_env_file=None)

    assert settings.log_level == "DEBUG"
    assert settings.seed == 7
    assert settings.default_difficulty is Difficulty.RUTHLESS

    config = settings.game_config()
    assert config.starting_currency == Money.of_dollars(2000)
    assert config.seed == 7
    assert config.default_difficulty is Difficulty.RUTHLESS


def test_invalid_log_level(monkeypatch):
    monkeypatch.setenv("FORE_LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        EngineSettings(_env_file=None)


def test_starting_currency_must_be_positive():
    with pytest.raises(ValidationError):
        EngineSettings(_env_file=None, starting_currency_dollars=0)
