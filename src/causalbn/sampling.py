"""Ancestral (forward) sampling from a BayesianNetwork.

Randomness comes only from the numpy Generator passed in (or one seeded
from ``seed``); there is no module-level random state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import numpy as np

from .dataset import Dataset
from .model import BayesianNetwork
from .types import Assignment

logger = logging.getLogger(__name__)


def make_rng(
    rng: np.random.Generator | None = None, seed: int | None = None
) -> np.random.Generator:
    """Use *rng* if given, else a fresh Generator seeded with *seed*."""
    if rng is not None:
        return rng
    return np.random.default_rng(seed)


def draw_category(row: np.ndarray, rng: np.random.Generator) -> int:
    """One categorical draw from a probability row."""
    cumulative = np.cumsum(row)
    idx = int(np.searchsorted(cumulative, rng.random() * cumulative[-1], side="right"))
    return min(idx, len(row) - 1)


def sample(
    model: BayesianNetwork,
    n: int,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> Iterator[Assignment]:
    """Lazily draw *n* full assignments from the joint distribution.

    Nodes are visited in topological order, so each node's parents are
    already drawn when its CPT row is selected. Two calls with the same
    ``seed`` yield identical sequences.
    """
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    logger.debug("Sampling %d assignments over %d nodes", n, len(model.nodes))
    return _draws(model, n, make_rng(rng, seed))


def _draws(model: BayesianNetwork, n: int, generator: np.random.Generator) -> Iterator[Assignment]:
    order = model.topological_order()
    cpts = model.cpts
    for _ in range(n):
        values: Assignment = {}
        for node in order:
            cpt = cpts[node]
            values[node] = cpt.variable.domain[draw_category(cpt.row(values), generator)]
        yield values


def sample_dataset(
    model: BayesianNetwork,
    n: int,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> Dataset:
    """Draw *n* assignments into a Dataset with the model's domains."""
    generator = make_rng(rng, seed)
    columns: dict[str, list[str]] = {name: [] for name in model.nodes}
    for draw in sample(model, n, rng=generator):
        for name, value in draw.items():
            columns[name].append(value)
    domains = {name: var.domain for name, var in model.variables.items()}
    return Dataset.from_columns(columns, domains)
