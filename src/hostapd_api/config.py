from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from hostapd_api.parser import HOSTAPD


class ConfigError(Exception):
    """Raised when configuration is invalid."""


@dataclass(frozen=True)
class WatchdogConfig:
    url: str
    period: int = 1800
    interval: int = 60


@dataclass
class Config:
    file: str = "/var/log/messages"
    listen: str = "0.0.0.0:5580"
    program: str = HOSTAPD
    poll_interval: float = 0.5
    json_logs: bool = False
    log_level: str = "INFO"
    watchdog: WatchdogConfig | None = None

    @property
    def host(self) -> str:
        """Listen host, with the brackets of an IPv6 literal removed."""
        host = self.listen.rpartition(":")[0]
        if host.startswith("[") and host.endswith("]"):
            return host[1:-1]
        return host

    @property
    def port(self) -> int:
        return int(self.listen.rpartition(":")[2])

    @staticmethod
    def _validate_listen(listen: str) -> str:
        host, sep, port = listen.rpartition(":")
        if not sep or not host:
            raise ConfigError(f"listen must be HOST:PORT, got {listen!r}")
        if ":" in host and not (host.startswith("[") and host.endswith("]")):
            raise ConfigError(f"IPv6 listen address must be bracketed, got {listen!r}")
        if host == "[]" or host.count("[") != host.count("]"):
            raise ConfigError(f"invalid listen host in {listen!r}")
        try:
            port_num = int(port)
        except ValueError:
            raise ConfigError(f"invalid port in listen address {listen!r}") from None
        if not 0 <= port_num < 65536:
            raise ConfigError(f"port out of range in listen address {listen!r}")
        return listen

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Validate *data* and return a fully-initialised :class:`Config`."""
        data = data or {}

        # --- file ---
        file: str = data.get("file", "/var/log/messages")
        if not file:
            raise ConfigError("file must name a log file to follow")

        # --- listen ---
        listen = cls._validate_listen(data.get("listen", "0.0.0.0:5580"))

        # --- program ---
        program: str = data.get("program", HOSTAPD)

        # --- poll_interval ---
        poll_interval: float = data.get("poll_interval", 0.5)
        if poll_interval <= 0:
            raise ConfigError("poll_interval must be positive")

        # --- logging ---
        json_logs: bool = data.get("json_logs", False)
        log_level = str(data.get("log_level", "INFO")).upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigError(f"Unknown log level {log_level!r}")

        # --- watchdog ---
        watchdog: WatchdogConfig | None = None
        watchdog_raw: dict[str, Any] = data.get("watchdog") or {}
        if watchdog_raw.get("url"):
            watchdog = WatchdogConfig(
                url=watchdog_raw["url"],
                period=watchdog_raw.get("period", 1800),
                interval=watchdog_raw.get("interval", 60),
            )
            if watchdog.period <= 0 or watchdog.interval <= 0:
                raise ConfigError("watchdog period and interval must be positive")

        return cls(
            file=file,
            listen=listen,
            program=program,
            poll_interval=poll_interval,
            json_logs=json_logs,
            log_level=log_level,
            watchdog=watchdog,
        )

    @classmethod
    def from_yaml(
        cls, path: str | Path | None, *, watchdog_url: str | None = None
    ) -> Config:
        """Load a YAML file and return a validated :class:`Config`.

        With no *path* every setting takes its default. A non-empty
        *watchdog_url* replaces ``watchdog.url``.
        """
        data: dict[str, Any] = {}
        if path:
            with open(path) as fh:
                data = yaml.safe_load(fh) or {}

        if watchdog_url:
            data["watchdog"] = {**(data.get("watchdog") or {}), "url": watchdog_url}

        return cls.from_dict(data)

    @classmethod
    def load(cls, environ: Mapping[str, str] | None = None) -> Config:
        """Build the runtime configuration from the environment.

        Reads the YAML file named by ``CONFIG_PATH`` if set, otherwise uses
        defaults. ``WATCHDOG_URL`` overrides ``watchdog.url``.
        """
        env = os.environ if environ is None else environ
        return cls.from_yaml(
            env.get("CONFIG_PATH"), watchdog_url=env.get("WATCHDOG_URL")
        )
