import json

import pytest

from commute_routing.config import UserConfig

ENV_VARS = ("COMMUTE_HOME_ADDRESS", "COMMUTE_WORK_ADDRESS", "GOOGLE_MAPS_API_KEY")


def clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def write_config(path, data):
    with open(path, "w") as f:
        json.dump(data, f)
    return str(path)


def test_missing_file_gives_empty_config(tmp_path, monkeypatch):
    clear_env(monkeypatch)
    cfg = UserConfig.load(str(tmp_path / "config.json"))
    assert cfg.home_address == ""
    assert not cfg.is_valid()


def test_load_all_fields(tmp_path, monkeypatch):
    clear_env(monkeypatch)
    path = write_config(tmp_path / "config.json", {
        "home_address": "4500 University Way NE",
        "work_address": "1st Ave & Pike St",
        "google_api_key": "key-123",
    })

    cfg = UserConfig.load(path)
    assert cfg.home_address == "4500 University Way NE"
    assert cfg.work_address == "1st Ave & Pike St"
    assert cfg.google_api_key == "key-123"
    assert cfg.is_valid()


def test_work_address_is_optional(tmp_path, monkeypatch):
    clear_env(monkeypatch)
    path = write_config(tmp_path / "config.json", {"home_address": "Home", "google_api_key": "key"})
    cfg = UserConfig.load(path)
    assert cfg.work_address == ""
    assert cfg.is_valid()


def test_environment_fills_missing_fields(tmp_path, monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "env-key")
    path = write_config(tmp_path / "config.json", {"home_address": "Home"})

    cfg = UserConfig.load(path)
    assert cfg.google_api_key == "env-key"
    assert cfg.is_valid()


def test_invalid_json_raises(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ValueError):
        UserConfig.load(str(path))


def test_config_has_no_writer():
    assert not hasattr(UserConfig, "save")
