"""CLI commands for structure queries (no data, no parameters)."""

from __future__ import annotations

import typer

from causalbn.cli._errors import reports_errors
from causalbn.cli._io import load_structure, parse_names
from causalbn.dsep import DSeparationEngine, is_d_separated

app = typer.Typer(help="Query DAG structure: d-separation, ordering, blankets.")

SOURCE_HELP = "Bracket model string like '[A][B|A]' or a saved model file."


@app.command()
@reports_errors
def dsep(
    source: str = typer.Argument(..., help=SOURCE_HELP),
    x: str = typer.Argument(..., help="First variable"),
    y: str = typer.Argument(..., help="Second variable"),
    given: str = typer.Option("", "--given", "-z", help="Comma-separated conditioning set"),
) -> None:
    """Decide whether X and Y are d-separated given Z."""
    dag = load_structure(source)
    z = parse_names(given)
    verdict = "d-separated" if is_d_separated(dag, x, y, z) else "d-connected"
    typer.echo(f"{x} and {y} are {verdict} given {{{', '.join(z)}}}")


@app.command()
@reports_errors
def order(source: str = typer.Argument(..., help=SOURCE_HELP)) -> None:
    """Print the topological order (ties broken by name)."""
    typer.echo(" ".join(load_structure(source).topological_order()))


@app.command()
@reports_errors
def blanket(
    source: str = typer.Argument(..., help=SOURCE_HELP),
    node: str = typer.Argument(..., help="Variable name"),
) -> None:
    """Print the Markov blanket of a node."""
    typer.echo(" ".join(sorted(load_structure(source).markov_blanket(node))))


@app.command()
@reports_errors
def separations(
    source: str = typer.Argument(..., help=SOURCE_HELP),
    max_size: int = typer.Option(2, "--max-size", help="Largest conditioning set to try"),
) -> None:
    """List every d-separation up to a conditioning-set size."""
    engine = DSeparationEngine(dag=load_structure(source))
    found = engine.find_all_d_separations(max_conditioning_size=max_size)
    if not found:
        typer.echo("(none)")
        return
    for a in found:
        typer.echo(f"{a.x} _||_ {a.y} | {{{', '.join(sorted(a.z))}}}")
