"""causalbn CLI -- typer-based command interface.

Commands:
    causalbn graph dsep/order/blanket/separations    Structure queries
    causalbn data citest/refute                      Tests against CSV data
    causalbn model fit/inspect/sample/query/mutilate Fitted networks
"""

from __future__ import annotations

import typer

from causalbn.cli import data_cmd, graph_cmd, model_cmd
from causalbn.observability import LoggingConfig, setup_logging

app = typer.Typer(
    name="causalbn",
    help="Build, test, fit, simulate and intervene on discrete Bayesian networks.",
    no_args_is_help=True,
)

app.add_typer(graph_cmd.app, name="graph")
app.add_typer(data_cmd.app, name="data")
app.add_typer(model_cmd.app, name="model")


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Wire structured logging before any command runs."""
    config = LoggingConfig()
    if verbose:
        config.level = "DEBUG"
    setup_logging(config)


def main() -> None:
    """Entry point for the causalbn CLI."""
    app()
