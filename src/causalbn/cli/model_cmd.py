"""CLI commands for fitted networks: fit, inspect, sample, query, mutilate."""

from __future__ import annotations

import sys
from pathlib import Path

import typer

from causalbn.cli._errors import reports_errors
from causalbn.cli._io import open_model, parse_assignment, read_csv, write_csv
from causalbn.config import get_settings
from causalbn.dag import CausalDAG
from causalbn.fit import fit as fit_model
from causalbn.inference import query_distribution
from causalbn.mutilate import mutilate as mutilate_model
from causalbn.sampling import sample as sample_model
from causalbn.serialize import save_model

app = typer.Typer(help="Fit, inspect, simulate and query Bayesian networks.")


@app.command()
@reports_errors
def fit(
    structure: str = typer.Argument(..., help="Bracket model string, e.g. '[A][S][E|A:S]'"),
    data: Path = typer.Argument(..., help="CSV file with a header row"),
    out: Path = typer.Option(..., "--out", "-o", help="Where to write the model (.json/.yaml)"),
    method: str = typer.Option("bayes", help="'bayes' or 'mle'"),
    prior: float | None = typer.Option(None, help="Dirichlet pseudocount for 'bayes'"),
) -> None:
    """Fit CPTs for a structure from data; domains come from the data."""
    settings = get_settings()
    dataset = read_csv(data)
    domains = {name: var.domain for name, var in dataset.variables.items()}
    dag = CausalDAG.from_model_string(structure, domains)
    prior = settings.prior_pseudocount if prior is None else prior
    model = fit_model(dag, dataset, method=method, prior_pseudocount=prior)
    save_model(model, out)
    typer.echo(f"Fitted {len(model.nodes)} nodes on {dataset.n_rows} rows -> {out}")


@app.command()
@reports_errors
def inspect(model_path: Path = typer.Argument(..., help="Saved model file")) -> None:
    """Print structure and CPTs."""
    model = open_model(model_path)
    typer.echo(f"structure: {model.dag.to_model_string()}")
    typer.echo(f"order: {' '.join(model.topological_order())}")
    for name in model.topological_order():
        cpt = model.cpt(name)
        given = f" | {', '.join(cpt.parent_names)}" if cpt.parents else ""
        typer.echo(f"\nP({name}{given})")
        for config, probs in cpt.as_rows().items():
            label = f"  [{', '.join(config)}]" if config else " "
            cells = "  ".join(f"{k}={v:.4f}" for k, v in probs.items())
            typer.echo(f"{label} {cells}")


@app.command()
@reports_errors
def sample(
    model_path: Path = typer.Argument(..., help="Saved model file"),
    n: int = typer.Option(10, "-n", help="Number of draws"),
    seed: int | None = typer.Option(None, help="Random seed"),
    out: Path | None = typer.Option(None, "--out", "-o", help="CSV output (default stdout)"),
) -> None:
    """Forward-simulate draws as CSV."""
    model = open_model(model_path)
    seed = seed if seed is not None else get_settings().seed
    draws = sample_model(model, n, seed=seed)
    if out is None:
        write_csv(draws, model.nodes, sys.stdout)
        return
    with out.open("w", newline="", encoding="utf-8") as fh:
        count = write_csv(draws, model.nodes, fh)
    typer.echo(f"Wrote {count} rows -> {out}")


@app.command()
@reports_errors
def query(
    model_path: Path = typer.Argument(..., help="Saved model file"),
    target: str = typer.Argument(..., help="Variable to query"),
    evidence: list[str] | None = typer.Option(
        None, "--evidence", "-e", help="NAME=VALUE (repeatable)"
    ),
    do: list[str] | None = typer.Option(None, "--do", help="Intervention NAME=VALUE (repeatable)"),
    n_samples: int | None = typer.Option(None, "--n-samples", "-n", help="Weighted samples"),
    seed: int | None = typer.Option(None, help="Random seed"),
) -> None:
    """Estimate P(target | evidence), optionally under do(...)."""
    settings = get_settings()
    model = open_model(model_path)
    interventions = parse_assignment(do)
    if interventions:
        model = mutilate_model(model, interventions)
    dist = query_distribution(
        model,
        target,
        parse_assignment(evidence),
        settings.n_samples if n_samples is None else n_samples,
        seed=seed if seed is not None else settings.seed,
    )
    for label, p in dist.as_dict().items():
        typer.echo(f"{label}\t{p:.4f}")


@app.command()
@reports_errors
def mutilate(
    model_path: Path = typer.Argument(..., help="Saved model file"),
    do: list[str] = typer.Option(..., "--do", help="Intervention NAME=VALUE (repeatable)"),
    out: Path = typer.Option(..., "--out", "-o", help="Where to write the intervened model"),
) -> None:
    """Write the network produced by do(...)."""
    model = mutilate_model(open_model(model_path), parse_assignment(do))
    save_model(model, out)
    typer.echo(f"Intervened model -> {out}")
