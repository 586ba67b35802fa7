"""CLI error handling and decorators."""

from __future__ import annotations

import functools
from typing import Any, Callable

import typer

from causalbn.errors import BayesNetError


def reports_errors(f: Callable) -> Callable:
    """Decorator turning library errors into a one-line message and exit 1.

    Bad input (library errors, malformed arguments, missing files) exits 1;
    anything else propagates.
    """

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except (BayesNetError, ValueError, FileNotFoundError) as err:
            handle_error(str(err))

    return wrapper


def handle_error(msg: str) -> None:
    """Print an error message and exit."""
    typer.echo(f"Error: {msg}", err=True)
    raise typer.Exit(1)
