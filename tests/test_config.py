import configparser

import pytest

from simple_budget import config


@pytest.fixture
def ini(tmp_path, monkeypatch):
    path = tmp_path / "simple_budget.ini"
    monkeypatch.setattr(config, "CONFIG_FILE", path)
    return path


def test_missing_settings_are_written_back_with_defaults(ini):
    settings = config.load_app_settings()
    assert settings == config.SETTINGS_DEFAULTS

    cfg = configparser.ConfigParser()
    cfg.read(ini, encoding="utf-8")
    assert cfg["settings"]["log_level"] == "INFO"
    assert float(cfg["settings"]["db_timeout"]) == 5.0


def test_invalid_settings_fall_back_to_defaults(ini):
    ini.write_text("[settings]\nlog_level = chatty\ndb_timeout = soon\ncurrency_symbol = $\n", encoding="utf-8")

    settings = config.load_app_settings()
    assert settings["log_level"] == "INFO"
    assert settings["db_timeout"] == 5.0
    assert settings["currency_symbol"] == "$"

    cfg = configparser.ConfigParser()
    cfg.read(ini, encoding="utf-8")
    assert cfg["settings"]["db_timeout"] == "5.0"


def test_log_level_is_normalised(ini):
    ini.write_text("[settings]\nlog_level = debug\n", encoding="utf-8")
    assert config.load_app_settings()["log_level"] == "DEBUG"


def test_db_path_defaults_beside_the_ini(ini):
    assert config.load_db_path() == ini.parent / config.DEFAULT_DB_FILENAME


def test_db_path_is_persisted(ini, tmp_path):
    target = tmp_path / "elsewhere" / "money.db"
    config.save_db_path(target)
    assert config.load_db_path() == target.resolve()

    config.save_db_path(None)
    assert config.load_db_path() == config.default_db_path()
