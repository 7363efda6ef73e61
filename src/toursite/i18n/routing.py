"""Routing configuration (the multi-language toggle) and its provider.

The toggle lives in a small JSON file so operators can flip it from the CMS
or by hand. The provider caches the parsed file and re-reads it when the
cache is older than its TTL and the file's mtime has changed, so updates
apply on a following request without a restart.
"""

import json
import os
from pathlib import Path
import tempfile
import threading
import time

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from toursite.core.logging import get_logger

logger = get_logger(__name__)


class RoutingConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    enable_multi_language: bool = Field(default=True, alias="enableMultiLanguage")


class RoutingConfigProvider:
    """Cached, reloadable access to the routing config file.

    A missing or unreadable file yields the defaults (multi-language on).
    """

    def __init__(self, path: Path | str, ttl_seconds: float = 5.0) -> None:
        self.path = Path(path)
        self.ttl_seconds = ttl_seconds
        self._lock = threading.Lock()
        self._config = RoutingConfig()
        self._mtime: float | None = None
        self._checked_at: float | None = None

    def get(self) -> RoutingConfig:
        now = time.monotonic()
        with self._lock:
            if self._checked_at is not None and now - self._checked_at < self.ttl_seconds:
                return self._config
            self._checked_at = now
            mtime = self._current_mtime()
            if self._mtime is None or mtime != self._mtime:
                self._config = self._read()
                self._mtime = mtime
            return self._config

    def reload(self) -> RoutingConfig:
        with self._lock:
            self._config = self._read()
            self._mtime = self._current_mtime()
            self._checked_at = time.monotonic()
            return self._config

    def update(self, config: RoutingConfig) -> RoutingConfig:
        """Persist a new config atomically and make it current immediately."""
        payload = config.model_dump(by_alias=True)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=".routing-", suffix=".json"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(payload, fh, indent=2)
                os.replace(tmp_name, self.path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
            self._config = config
            self._mtime = self._current_mtime()
            self._checked_at = time.monotonic()

        logger.info("routing_config_updated", **payload)
        return config

    def _current_mtime(self) -> float:
        try:
            return self.path.stat().st_mtime
        except OSError:
            return -1.0

    def _read(self) -> RoutingConfig:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return RoutingConfig()
        except OSError as e:
            logger.warning("routing_config_unreadable", path=str(self.path), error=str(e))
            return RoutingConfig()

        try:
            return RoutingConfig.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.warning("routing_config_invalid", path=str(self.path), error=str(e))
            return RoutingConfig()
