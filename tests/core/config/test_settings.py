"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from quotepoll.core.config import (
    DEFAULT_ALLOW_LIST,
    ConfigManager,
    QuotePollConfig,
    load_config,
    load_config_from_env,
)
from quotepoll.core.exceptions import ConfigError

ENV_NAMES = [
    "QUOTEPOLL_RETRY_INTERVAL",
    "QUOTEPOLL_DEADLINE",
    "QUOTEPOLL_BATCH_SIZE",
    "QUOTEPOLL_SOURCE_TIMEOUT",
    "QUOTEPOLL_SOURCE_URL",
    "QUOTEPOLL_DATA_DIR",
    "QUOTEPOLL_STOCK_LIST",
    "QUOTEPOLL_ALLOW_LIST",
    "QUOTEPOLL_LOGGING_LEVEL",
    "QUOTEPOLL_LOGGING_FILE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults_match_session_timings() -> None:
    config = QuotePollConfig()

    assert config.poller.retry_interval == 3.0
    assert config.poller.deadline == 30.0
    assert config.poller.batch_size == 30
    assert config.store.filename == "realtime.json"
    assert tuple(config.universe.allow_list) == DEFAULT_ALLOW_LIST


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "absent.toml")

    assert manager.get_config() == QuotePollConfig()


def test_toml_file_overrides_defaults(tmp_path: Path) -> None:
    path = tmp_path / "quotepoll.toml"
    path.write_text(
        '[poller]\ndeadline = 12.5\nbatch_size = 10\n\n[universe]\nallow_list = ["2330", "0050"]\n',
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.poller.deadline == 12.5
    assert config.poller.batch_size == 10
    assert config.poller.retry_interval == 3.0
    assert config.universe.allow_list == ["2330", "0050"]


def test_broken_toml_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "quotepoll.toml"
    path.write_text("[poller\n", encoding="utf-8")

    assert ConfigManager(path).get_config() == QuotePollConfig()


def test_unknown_key_is_a_config_error(tmp_path: Path) -> None:
    path = tmp_path / "quotepoll.toml"
    path.write_text("[poller]\ninterval = 1\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "quotepoll.toml"
    path.write_text("[poller]\ndeadline = 12.5\n", encoding="utf-8")
    monkeypatch.setenv("QUOTEPOLL_DEADLINE", "5")
    monkeypatch.setenv("QUOTEPOLL_BATCH_SIZE", "7")
    monkeypatch.setenv("QUOTEPOLL_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("QUOTEPOLL_ALLOW_LIST", "2330, 2317,,")

    config = load_config(path)

    assert config.poller.deadline == 5.0
    assert config.poller.batch_size == 7
    assert config.store.data_dir == str(tmp_path / "data")
    assert config.universe.allow_list == ["2330", "2317"]


def test_non_numeric_environment_value_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QUOTEPOLL_RETRY_INTERVAL", "soon")

    with pytest.raises(ConfigError) as exc_info:
        load_config_from_env()

    assert exc_info.value.details["field"] == "QUOTEPOLL_RETRY_INTERVAL"


def test_empty_environment_yields_no_overrides() -> None:
    assert load_config_from_env() == {}


@pytest.mark.parametrize(
    ("section", "values", "field"),
    [
        ("poller", {"retry_interval": -1.0}, "poller.retry_interval"),
        ("poller", {"deadline": 0.0}, "poller.deadline"),
        ("poller", {"batch_size": 0}, "poller.batch_size"),
        ("source", {"timeout": 0.0}, "source.timeout"),
        ("source", {"base_url": ""}, "source.base_url"),
    ],
)
def test_validate_rejects_out_of_range_values(section: str, values: dict, field: str) -> None:
    config = QuotePollConfig.from_dict({section: values})

    with pytest.raises(ConfigError) as exc_info:
        config.validate()

    assert exc_info.value.field_name == field


def test_update_config_merges_nested_sections(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "absent.toml")

    manager.update_config(poller={"deadline": 9.0})

    assert manager.get_config().poller.deadline == 9.0
    assert manager.get_config().poller.retry_interval == 3.0
    assert manager.get_config().to_dict()["store"]["filename"] == "realtime.json"
