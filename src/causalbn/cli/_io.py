"""File and argument parsing shared by CLI commands."""

from __future__ import annotations

import csv
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from causalbn.config import get_settings
from causalbn.dag import CausalDAG
from causalbn.dataset import Dataset
from causalbn.model import BayesianNetwork
from causalbn.serialize import load_model
from causalbn.types import Assignment

# Structure-only commands never look at categories.
_PLACEHOLDER_DOMAIN = ("*",)


def read_csv(path: Path) -> Dataset:
    """Read a header-first CSV of categorical values."""
    with path.open(newline="", encoding="utf-8") as fh:
        rows = list(csv.DictReader(fh))
    return Dataset.from_rows(rows)


def write_csv(rows: Iterable[Assignment], columns: list[str], out: TextIO) -> int:
    writer = csv.DictWriter(out, fieldnames=columns, lineterminator="\n")
    writer.writeheader()
    count = 0
    for row in rows:
        writer.writerow(row)
        count += 1
    return count


def load_structure(source: str) -> CausalDAG:
    """A DAG from a bracket model string or a saved model file."""
    if source.lstrip().startswith("["):
        names = _model_string_names(source)
        return CausalDAG.from_model_string(source, {n: _PLACEHOLDER_DOMAIN for n in names})
    return open_model(Path(source)).dag


def open_model(path: Path) -> BayesianNetwork:
    """Load a saved model, validating tables at the configured tolerance."""
    return load_model(path, tolerance=get_settings().cpt_tolerance)


def _model_string_names(model_string: str) -> list[str]:
    names: list[str] = []
    for block in model_string.replace(" ", "").strip("[]").split("]["):
        node, _, parents = block.partition("|")
        for name in [node, *parents.replace(",", ":").split(":")]:
            if name and name not in names:
                names.append(name)
    return names


def parse_assignment(pairs: list[str] | None) -> dict[str, str]:
    """``["A=young", "S=M,E=high"]`` → ``{"A": "young", "S": "M", "E": "high"}``."""
    out: dict[str, str] = {}
    for chunk in pairs or []:
        for pair in chunk.split(","):
            if not pair:
                continue
            name, sep, value = pair.partition("=")
            if not sep or not name or not value:
                raise ValueError(f"Expected NAME=VALUE, got {pair!r}")
            out[name.strip()] = value.strip()
    return out


def parse_names(spec: str | None) -> list[str]:
    return [n.strip() for n in (spec or "").split(",") if n.strip()]
