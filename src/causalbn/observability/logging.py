"""Structured logging for causalbn: a formatter and a destination, picked by name.

Library modules log through ``logging.getLogger(__name__)`` and never
configure anything. ``setup_logging`` is called once by an entry point
(the CLI callback, a notebook, a test) and attaches a single handler to
the root logger:

    formatter   how a record becomes text      structlog | plain
    destination where the text goes            stderr | file

The structlog formatter bridges stdlib records through
``ProcessorFormatter``, so ``logger.info("Fitted %d CPTs", n)`` in
``causalbn.fit`` renders as a structured event with ``component=fit``.

Extra formatters and destinations can be registered by name before
``setup_logging`` runs.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog

from .config import LoggingConfig

# ---------------------------------------------------------------------------
# Strategy interfaces
# ---------------------------------------------------------------------------


@runtime_checkable
class LogFormatter(Protocol):
    def build(self, config: LoggingConfig) -> logging.Formatter: ...


@runtime_checkable
class LogDestination(Protocol):
    def create_handler(self, formatter: logging.Formatter) -> logging.Handler: ...

    def shutdown(self) -> None: ...


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def add_component(
    _: Any, __: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """``causalbn.inference`` -> ``component=inference``; other loggers pass through."""
    name = event_dict.get("logger")
    if isinstance(name, str) and name.startswith("causalbn."):
        event_dict["component"] = name.removeprefix("causalbn.")
    return event_dict


class StructlogFormatter:
    """Renders stdlib records through a structlog processor chain."""

    def build(self, config: LoggingConfig) -> logging.Formatter:
        pre_chain: list[Any] = [
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            add_component,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
        ]
        if config.renderer == "json":
            renderer: Any = structlog.processors.JSONRenderer(sort_keys=True)
        elif config.renderer == "console":
            renderer = structlog.dev.ConsoleRenderer(colors=False)
        else:
            raise ValueError(f"Unknown log renderer {config.renderer!r}; use 'console' or 'json'")

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                *pre_chain,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )
        return structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )


class PlainFormatter:
    """One line per record, no structlog involvement."""

    def build(self, config: LoggingConfig) -> logging.Formatter:
        return logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")


# ---------------------------------------------------------------------------
# Destinations
# ---------------------------------------------------------------------------


class StderrDestination:
    def __init__(self, config: LoggingConfig) -> None:
        self._handler: logging.Handler | None = None

    def create_handler(self, formatter: logging.Formatter) -> logging.Handler:
        # Bind the stream lazily so redirected stderr (pytest, CliRunner) is honoured.
        self._handler = _LazyStderrHandler()
        self._handler.setFormatter(formatter)
        return self._handler

    def shutdown(self) -> None:
        if self._handler is not None:
            self._handler.flush()


class FileDestination:
    """Appends to ``config.path`` (default ``causalbn.log``)."""

    def __init__(self, config: LoggingConfig) -> None:
        self.path = Path(config.path or "causalbn.log")
        self._handler: logging.FileHandler | None = None

    def create_handler(self, formatter: logging.Formatter) -> logging.Handler:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handler = logging.FileHandler(self.path, mode="a", encoding="utf-8")
        self._handler.setFormatter(formatter)
        return self._handler

    def shutdown(self) -> None:
        if self._handler is not None:
            self._handler.close()
            self._handler = None


class _LazyStderrHandler(logging.StreamHandler):
    def __init__(self) -> None:
        super().__init__(sys.stderr)

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, value: Any) -> None:
        pass


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------

_FORMATTERS: dict[str, type] = {"structlog": StructlogFormatter, "plain": PlainFormatter}
_DESTINATIONS: dict[str, type] = {"stderr": StderrDestination, "file": FileDestination}


def register_formatter(name: str, cls: type) -> None:
    _FORMATTERS[name] = cls


def register_destination(name: str, cls: type) -> None:
    """*cls* is constructed with the LoggingConfig."""
    _DESTINATIONS[name] = cls


def _lookup(registry: dict[str, type], kind: str, name: str) -> type:
    try:
        return registry[name]
    except KeyError:
        raise ValueError(
            f"Unknown log {kind} {name!r}; registered: {sorted(registry)}"
        ) from None


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

_MANAGED_FLAG = "_causalbn_managed"
_active: LogDestination | None = None


def setup_logging(config: LoggingConfig | None = None) -> logging.Handler:
    """Attach one causalbn handler to the root logger, replacing any previous one.

    Handlers installed by others (pytest's caplog, an application's own
    setup) are left alone. Returns the new handler.
    """
    global _active
    config = config or LoggingConfig()
    formatter_cls = _lookup(_FORMATTERS, "formatter", config.formatter)
    destination_cls = _lookup(_DESTINATIONS, "destination", config.destination)
    level = config.numeric_level

    formatter = formatter_cls().build(config)
    destination = destination_cls(config)
    handler = destination.create_handler(formatter)
    setattr(handler, _MANAGED_FLAG, True)

    shutdown_logging()
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)
    _active = destination
    return handler


def shutdown_logging() -> None:
    """Detach the causalbn handler and release its destination."""
    global _active
    root = logging.getLogger()
    for handler in [h for h in root.handlers if getattr(h, _MANAGED_FLAG, False)]:
        root.removeHandler(handler)
    if _active is not None:
        _active.shutdown()
        _active = None


def get_logger(name: str = "causalbn", **initial: Any) -> Any:
    """A structlog logger accepting ``key=value`` context."""
    return structlog.get_logger(name, **initial)
