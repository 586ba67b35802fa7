"""Logging settings read from CAUSALBN_LOG_* environment variables.

    CAUSALBN_LOG_FORMATTER    structlog (default) | plain
    CAUSALBN_LOG_DESTINATION  stderr (default) | file
    CAUSALBN_LOG_RENDERER     console (default) | json
    CAUSALBN_LOG_LEVEL        WARNING (default)
    CAUSALBN_LOG_PATH         file destination target (default causalbn.log)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field


def _env(name: str, default: str | None) -> str | None:
    return os.environ.get(f"CAUSALBN_LOG_{name}", default)


@dataclass
class LoggingConfig:
    formatter: str = field(default_factory=lambda: _env("FORMATTER", "structlog"))
    destination: str = field(default_factory=lambda: _env("DESTINATION", "stderr"))
    renderer: str = field(default_factory=lambda: _env("RENDERER", "console"))
    level: str = field(default_factory=lambda: _env("LEVEL", "WARNING"))
    path: str | None = field(default_factory=lambda: _env("PATH", None))

    @property
    def numeric_level(self) -> int:
        value = logging.getLevelName(self.level.upper())
        if not isinstance(value, int):
            raise ValueError(f"Unknown log level {self.level!r}")
        return value
