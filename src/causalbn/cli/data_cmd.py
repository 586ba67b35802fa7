"""CLI commands that test structure against data."""

from __future__ import annotations

from pathlib import Path

import typer

from causalbn.citest import ConditionalIndependenceTester, DAGRefuter
from causalbn.cli._errors import reports_errors
from causalbn.cli._io import load_structure, parse_names, read_csv
from causalbn.config import get_settings
from causalbn.dsep import DSeparationEngine

app = typer.Typer(help="Conditional independence tests on CSV data.")


@app.command()
@reports_errors
def citest(
    data: Path = typer.Argument(..., help="CSV file with a header row"),
    x: str = typer.Argument(..., help="First variable"),
    y: str = typer.Argument(..., help="Second variable"),
    given: str = typer.Option("", "--given", "-z", help="Comma-separated conditioning set"),
    method: str | None = typer.Option(None, help="'mi' (G-test) or 'x2' (Pearson)"),
) -> None:
    """Test X ⊥ Y | Z on the data."""
    settings = get_settings()
    tester = ConditionalIndependenceTester(method=method or settings.ci_method)
    result = tester.test(read_csv(data), x, y, parse_names(given))
    typer.echo(f"{result.method} = {result.statistic:.4f}, df = {result.degrees_of_freedom}, "
               f"p-value = {result.p_value:.4g}")
    verdict = "independent" if result.is_independent(settings.significance_level) else "dependent"
    typer.echo(f"{verdict} at alpha = {settings.significance_level}")


@app.command()
@reports_errors
def refute(
    source: str = typer.Argument(..., help="Bracket model string or saved model file"),
    data: Path = typer.Argument(..., help="CSV file with a header row"),
    max_size: int = typer.Option(1, "--max-size", help="Largest conditioning set to try"),
) -> None:
    """Check every d-separation the DAG implies against the data."""
    settings = get_settings()
    assertions = DSeparationEngine(dag=load_structure(source)).find_all_d_separations(max_size)
    refuter = DAGRefuter(
        significance_level=settings.significance_level,
        tester=ConditionalIndependenceTester(method=settings.ci_method),
    )
    results = refuter.refute_all(assertions, read_csv(data))
    for r in results:
        a = r.assertion
        mark = "ok" if r.consistent else "REJECTED"
        typer.echo(f"{a.x} _||_ {a.y} | {{{', '.join(sorted(a.z))}}}  "
                   f"p = {r.test.p_value:.4g}  {mark}")
    rejected = sum(not r.consistent for r in results)
    typer.echo(f"{len(results)} tested, {rejected} rejected")
