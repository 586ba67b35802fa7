"""Lossless dict / JSON / YAML round-trip of a BayesianNetwork.

Schema::

    {
      "format": "causalbn/v1",
      "variables": [{"name": "A", "domain": ["young", "adult", "old"]}, ...],
      "edges": [["A", "E"], ...],                 # insertion order = parent order
      "cpts": {"E": {"parents": ["A", "S"], "table": [[...], ...]}, ...}
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .cpt import DEFAULT_TOLERANCE
from .dag import CausalDAG
from .errors import ShapeMismatch
from .model import BayesianNetwork
from .types import Variable

FORMAT = "causalbn/v1"


def model_to_dict(model: BayesianNetwork) -> dict[str, Any]:
    """Convert a network to plain builtins."""
    return {
        "format": FORMAT,
        "variables": [var.to_dict() for var in model.variables.values()],
        "edges": [[parent, child] for parent, child in model.edges],
        "cpts": {
            name: {"parents": cpt.parent_names, "table": cpt.table.tolist()}
            for name, cpt in model.cpts.items()
        },
    }


def model_from_dict(data: dict[str, Any], tolerance: float = DEFAULT_TOLERANCE) -> BayesianNetwork:
    """Rebuild a network; tables are re-validated against *tolerance*.

    Raises:
        ShapeMismatch: If a stored parent list disagrees with the edges.
        InvalidCPT: If a stored table is not a valid CPT.
    """
    fmt = data.get("format", FORMAT)
    if fmt != FORMAT:
        raise ValueError(f"Unsupported model format {fmt!r} (expected {FORMAT!r})")

    dag = CausalDAG.from_edges(
        (Variable.from_dict(v) for v in data["variables"]),
        (tuple(e) for e in data["edges"]),
    )
    tables: dict[str, Any] = {}
    for name, entry in data["cpts"].items():
        if list(entry.get("parents", [])) != dag.parents(name):
            raise ShapeMismatch(
                f"Stored parents of {name!r} {entry.get('parents')} "
                f"disagree with edges {dag.parents(name)}"
            )
        tables[name] = entry["table"]
    return BayesianNetwork.from_tables(dag, tables, tolerance)


def dumps_json(model: BayesianNetwork, indent: int | None = 2) -> str:
    return json.dumps(model_to_dict(model), indent=indent)


def loads_json(text: str, tolerance: float = DEFAULT_TOLERANCE) -> BayesianNetwork:
    return model_from_dict(json.loads(text), tolerance)


def dumps_yaml(model: BayesianNetwork) -> str:
    return yaml.dump(
        model_to_dict(model),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def loads_yaml(text: str, tolerance: float = DEFAULT_TOLERANCE) -> BayesianNetwork:
    return model_from_dict(yaml.safe_load(text), tolerance)


def save_model(model: BayesianNetwork, path: Path | str) -> Path:
    """Write JSON, or YAML when the suffix is .yaml/.yml."""
    path = Path(path)
    if path.suffix in (".yaml", ".yml"):
        path.write_text(dumps_yaml(model), encoding="utf-8")
    else:
        path.write_text(dumps_json(model), encoding="utf-8")
    return path


def load_model(path: Path | str, tolerance: float = DEFAULT_TOLERANCE) -> BayesianNetwork:
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        return loads_yaml(text, tolerance)
    return loads_json(text, tolerance)
