import json

from nflwatch.client import DEFAULT_TIMEOUT_SECONDS, ESPN_BASE_URL
from nflwatch.config import Settings, load_config, load_settings


def test_first_readable_config_wins(tmp_path):
    local = tmp_path / "local.json"
    home = tmp_path / "home.json"
    home.write_text(json.dumps({"theme": "light"}))
    assert load_config([local, home]) == {"theme": "light"}

    local.write_text(json.dumps({"theme": "dark"}))
    assert load_config([local, home]) == {"theme": "dark"}


def test_broken_config_is_skipped(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{oops")
    listy = tmp_path / "list.json"
    listy.write_text("[1, 2]")
    good = tmp_path / "good.json"
    good.write_text(json.dumps({"plain": True}))
    assert load_config([bad, listy, good]) == {"plain": True}


def test_no_config_files_gives_empty_dict(tmp_path):
    assert load_config([tmp_path / "missing.json"]) == {}


def test_defaults():
    assert load_settings({}, environ={}) == Settings()


def test_values_are_validated():
    settings = load_settings(
        {"theme": "Neon", "replay_speed": 42, "timeout": -1, "plain": True},
        environ={},
    )
    assert settings.theme == "dark"
    assert settings.replay_speed == 5
    assert settings.timeout == DEFAULT_TIMEOUT_SECONDS
    assert settings.plain is True


def test_non_numeric_speed_falls_back():
    assert load_settings({"replay_speed": "fast"}, environ={}).replay_speed == 2


def test_light_theme_and_timeout():
    settings = load_settings({"theme": "LIGHT", "timeout": 3}, environ={})
    assert settings.theme == "light"
    assert settings.timeout == 3.0


def test_environment_overrides_base_url():
    settings = load_settings({"base_url": "http://from-config/"},
                             environ={"NFLWATCH_BASE_URL": "http://from-env/"})
    assert settings.base_url == "http://from-env"

    settings = load_settings({"base_url": "http://from-config/"}, environ={})
    assert settings.base_url == "http://from-config"

    assert load_settings({}, environ={}).base_url == ESPN_BASE_URL.rstrip("/")
