"""Collector configuration for amrcollect."""

from __future__ import annotations

import dataclasses
import math
import os
from datetime import timedelta
from typing import Any

from amrcollect._constants import (
    DEFAULT_DATABASE,
    DEFAULT_INFLUXDB_PORT,
    DEFAULT_MEASUREMENT,
    DEFAULT_MULTIPLIER,
    DEFAULT_PRELOAD_HOURS,
    FIELD_INTERVAL,
)
from amrcollect.exceptions import CollectConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        number = float(value)
    except ValueError as exc:
        raise CollectConfigError(f"{env_key} is defined and does not contain a number") from exc
    if not math.isfinite(number):
        raise CollectConfigError(f"{env_key} is defined and is not a finite number")
    return number


@dataclasses.dataclass(frozen=True)
class CollectConfig:
    """Collector configuration.

    Parameters
    ----------
    hostname : str
        InfluxDB host name.
    username : str
        InfluxDB user.
    password : str
        InfluxDB password.
    database : str
        Database points are written to and preloaded from.
    idm_measurement : str
        Measurement name for interval (IDM) consumption records.
    scm_measurement : str
        Measurement name for cumulative (SCM) consumption records.
    multiplier : float
        Scaling applied to every IDM interval delta.
    port : int
        InfluxDB HTTP API port.
    preload_enabled : bool
        Warm-start the meter registry from recent IDM history.
    preload_hours : float
        Size of the history window queried at startup.
    slot_field : str or None
        Name of the integer field that records an interval's slot id on
        emitted IDM points. Needed for the preload to recover slot ids.
    """

    hostname: str
    username: str
    password: str = dataclasses.field(repr=False)
    database: str = DEFAULT_DATABASE
    idm_measurement: str = DEFAULT_MEASUREMENT
    scm_measurement: str = DEFAULT_MEASUREMENT
    multiplier: float = DEFAULT_MULTIPLIER
    port: int = DEFAULT_INFLUXDB_PORT
    preload_enabled: bool = True
    preload_hours: float = DEFAULT_PRELOAD_HOURS
    slot_field: str | None = FIELD_INTERVAL

    def __post_init__(self) -> None:
        if not math.isfinite(self.multiplier):
            raise CollectConfigError(f"multiplier must be a finite number, got {self.multiplier!r}")

    @property
    def base_url(self) -> str:
        return f"http://{self.hostname}:{self.port}"

    @property
    def preload_window(self) -> timedelta:
        return timedelta(hours=self.preload_hours)

    @classmethod
    def from_env(cls, *, require_credentials: bool = True, **overrides: Any) -> CollectConfig:
        """Create configuration from ``COLLECT_*`` environment variables.

        Explicit keyword arguments override environment values.

        Parameters
        ----------
        require_credentials
            When ``False`` the InfluxDB host and credentials may be absent
            (they default to empty strings). Used for dry runs.
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        CollectConfig
            Populated configuration.

        Raises
        ------
        CollectConfigError
            A required variable is undefined or a numeric one is malformed.
        """
        env = os.environ

        _ENV_REQUIRED_MAP = {
            "COLLECT_INFLUXDB_HOSTNAME": "hostname",
            "COLLECT_INFLUXDB_USER": "username",
            "COLLECT_INFLUXDB_PASS": "password",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_REQUIRED_MAP.items():
            if field_name in overrides:
                continue
            val = env.get(env_key)
            if val is None:
                if require_credentials:
                    raise CollectConfigError(f"{env_key} undefined")
                val = ""
            config_kwargs[field_name] = val

        _ENV_CONFIG_MAP = {
            "COLLECT_INFLUXDB_DATABASE": "database",
            "COLLECT_INFLUXDB_IDM_MEASUREMENT_NAME": "idm_measurement",
            "COLLECT_INFLUXDB_SCM_MEASUREMENT_NAME": "scm_measurement",
        }
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        multiplier_env = env.get("COLLECT_MULTIPLIER")
        if multiplier_env is not None and "multiplier" not in overrides:
            config_kwargs["multiplier"] = _env_float("COLLECT_MULTIPLIER", multiplier_env)

        port_env = env.get("COLLECT_INFLUXDB_PORT")
        if port_env is not None and "port" not in overrides:
            if not port_env.strip().isdigit():
                raise CollectConfigError("COLLECT_INFLUXDB_PORT is defined and is not a port number")
            config_kwargs["port"] = int(port_env)

        hours_env = env.get("COLLECT_PRELOAD_HOURS")
        if hours_env is not None and "preload_hours" not in overrides:
            config_kwargs["preload_hours"] = _env_float("COLLECT_PRELOAD_HOURS", hours_env)

        if "preload_enabled" not in overrides:
            config_kwargs["preload_enabled"] = _env_bool(env.get("COLLECT_PRELOAD_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
