"""
Runtime settings read from the environment.

- PROTECTPATH_PASSWORD: password for non-interactive CLI runs
- PROTECTPATH_WORKERS: default number of batch workers
- PROTECTPATH_LOG_LEVEL: default log level name (DEBUG, INFO, ...)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

ENV_PASSWORD = "PROTECTPATH_PASSWORD"
ENV_WORKERS = "PROTECTPATH_WORKERS"
ENV_LOG_LEVEL = "PROTECTPATH_LOG_LEVEL"


def default_workers() -> int:
    return max(1, min(4, os.cpu_count() or 1))


@dataclass(frozen=True)
class Settings:
    password: Optional[str] = None
    workers: int = 1
    log_level: int = logging.WARNING

    def __repr__(self) -> str:
        # keep the password out of reprs and logs
        pw = "set" if self.password else "unset"
        return f"Settings(password={pw}, workers={self.workers}, log_level={logging.getLevelName(self.log_level)})"

    @classmethod
    def from_env(cls) -> "Settings":
        workers = default_workers()
        raw_workers = os.getenv(ENV_WORKERS)
        if raw_workers:
            try:
                workers = int(raw_workers)
                if workers < 1:
                    raise ValueError
            except ValueError:
                logger.warning("ignoring invalid %s=%r", ENV_WORKERS, raw_workers)
                workers = default_workers()

        log_level = logging.WARNING
        raw_level = os.getenv(ENV_LOG_LEVEL)
        if raw_level:
            level = logging.getLevelName(raw_level.strip().upper())
            if isinstance(level, int):
                log_level = level
            else:
                logger.warning("ignoring invalid %s=%r", ENV_LOG_LEVEL, raw_level)

        return cls(
            password=os.getenv(ENV_PASSWORD) or None,
            workers=workers,
            log_level=log_level,
        )
