from __future__ import annotations

from datetime import timedelta

import pytest

from amrcollect.config import CollectConfig
from amrcollect.exceptions import CollectConfigError

_ALL_VARS = (
    "COLLECT_INFLUXDB_HOSTNAME",
    "COLLECT_INFLUXDB_USER",
    "COLLECT_INFLUXDB_PASS",
    "COLLECT_INFLUXDB_DATABASE",
    "COLLECT_INFLUXDB_IDM_MEASUREMENT_NAME",
    "COLLECT_INFLUXDB_SCM_MEASUREMENT_NAME",
    "COLLECT_MULTIPLIER",
    "COLLECT_INFLUXDB_PORT",
    "COLLECT_PRELOAD_HOURS",
    "COLLECT_PRELOAD_ENABLED",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ALL_VARS:
        monkeypatch.delenv(name, raising=False)


def _set_required(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COLLECT_INFLUXDB_HOSTNAME", "influx.local")
    monkeypatch.setenv("COLLECT_INFLUXDB_USER", "collector")
    monkeypatch.setenv("COLLECT_INFLUXDB_PASS", "secret")


def test_defaults_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_required(monkeypatch)

    config = CollectConfig.from_env()

    assert config.hostname == "influx.local"
    assert config.database == "rtlamr"
    assert config.idm_measurement == "power"
    assert config.scm_measurement == "power"
    assert config.multiplier == 10.0
    assert config.base_url == "http://influx.local:8086"
    assert config.preload_enabled is True
    assert config.preload_window == timedelta(hours=4)
    assert config.slot_field == "interval"


def test_optional_values_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_required(monkeypatch)
    monkeypatch.setenv("COLLECT_INFLUXDB_DATABASE", "meters")
    monkeypatch.setenv("COLLECT_INFLUXDB_IDM_MEASUREMENT_NAME", "idm")
    monkeypatch.setenv("COLLECT_INFLUXDB_SCM_MEASUREMENT_NAME", "scm")
    monkeypatch.setenv("COLLECT_MULTIPLIER", "2.5")
    monkeypatch.setenv("COLLECT_INFLUXDB_PORT", "9999")
    monkeypatch.setenv("COLLECT_PRELOAD_HOURS", "1")
    monkeypatch.setenv("COLLECT_PRELOAD_ENABLED", "off")

    config = CollectConfig.from_env()

    assert config.database == "meters"
    assert config.idm_measurement == "idm"
    assert config.scm_measurement == "scm"
    assert config.multiplier == 2.5
    assert config.base_url == "http://influx.local:9999"
    assert config.preload_window == timedelta(hours=1)
    assert config.preload_enabled is False


def test_missing_required_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_required(monkeypatch)
    monkeypatch.delenv("COLLECT_INFLUXDB_PASS")

    with pytest.raises(CollectConfigError, match="COLLECT_INFLUXDB_PASS undefined"):
        CollectConfig.from_env()


def test_credentials_optional_for_dry_run() -> None:
    config = CollectConfig.from_env(require_credentials=False)

    assert config.hostname == ""
    assert config.password == ""


def test_malformed_multiplier(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_required(monkeypatch)
    monkeypatch.setenv("COLLECT_MULTIPLIER", "ten")

    with pytest.raises(CollectConfigError, match="does not contain a number"):
        CollectConfig.from_env()


def test_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_required(monkeypatch)
    monkeypatch.setenv("COLLECT_MULTIPLIER", "ten")

    config = CollectConfig.from_env(multiplier=1.0, password="override")

    assert config.multiplier == 1.0
    assert config.password == "override"


def test_repr_hides_password() -> None:
    config = CollectConfig(hostname="h", username="u", password="secret")

    text = repr(config)

    assert "secret" not in text
    assert "username='u'" in text


@pytest.mark.parametrize("value", ["inf", "-inf", "nan", "1e400"])
def test_non_finite_multiplier_rejected(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    _set_required(monkeypatch)
    monkeypatch.setenv("COLLECT_MULTIPLIER", value)

    with pytest.raises(CollectConfigError, match="COLLECT_MULTIPLIER is defined and is not a finite number"):
        CollectConfig.from_env()


def test_non_finite_multiplier_rejected_in_constructor() -> None:
    with pytest.raises(CollectConfigError, match="finite"):
        CollectConfig(hostname="h", username="u", password="p", multiplier=float("inf"))
