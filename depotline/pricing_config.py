"""Owners of the current PricingConfig value.

Services only ever call ``current()``; how the value is sourced or refreshed
stays behind the provider.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Optional, Protocol, Tuple

from .domain import PricingConfig
from .logging import ServiceLogger

MISSING = (-1, -1)


class PricingConfigProvider(Protocol):
    def current(self) -> PricingConfig: ...


class StaticPricingConfigProvider:
    def __init__(self, config: PricingConfig) -> None:
        self._config = config

    def current(self) -> PricingConfig:
        return self._config


class FilePricingConfigProvider:
    """Serves a JSON pricing file and re-reads it whenever it changes on disk.

    Changes are detected on (mtime, size). A reload that fails, or a file that
    goes missing, keeps the last good config; the failed version is retried on
    the next call so a fix written with the same mtime is still picked up.
    """

    def __init__(self, path: str) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._logger = ServiceLogger("pricing_config")
        self._version = self._stat()
        self._config = self._read()
        self._failed: Optional[Tuple[int, int]] = None

    def current(self) -> PricingConfig:
        try:
            version = self._stat()
        except OSError as exc:
            self._report_failure(MISSING, "Pricing config unavailable", exc)
            return self._config
        if version != self._version:
            with self._lock:
                if version != self._version:
                    self._reload(version)
        return self._config

    def _stat(self) -> Tuple[int, int]:
        stat = self._path.stat()
        return stat.st_mtime_ns, stat.st_size

    def _read(self) -> PricingConfig:
        data = json.loads(self._path.read_text(encoding="utf-8"))
        return PricingConfig(**data)

    def _reload(self, version: Tuple[int, int]) -> None:
        try:
            config = self._read()
        except (OSError, ValueError) as exc:
            self._report_failure(version, "Pricing config reload rejected", exc)
            return
        self._config = config
        self._version = version
        self._failed = None
        self._logger.info(
            "Pricing config reloaded",
            path=str(self._path),
            device_price=config.device_price,
            tiers=len(config.discount_tiers),
        )

    def _report_failure(self, version: Tuple[int, int], message: str, exc: Exception) -> None:
        # One log line per failing version, not one per request.
        if version == self._failed:
            return
        self._failed = version
        self._logger.error(message, path=str(self._path), error=str(exc))
