"""Likelihood-weighted query inference.

Evidence variables are clamped rather than sampled, and each sample is
weighted by the probability of the clamped values given its parents.
Draws are vectorised over samples: one pass through the topological
order per query.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

import numpy as np

from .dataset import Dataset
from .errors import UnknownVariable, ZeroWeight
from .model import BayesianNetwork
from .sampling import make_rng
from .types import Variable

logger = logging.getLogger(__name__)

DEFAULT_N_SAMPLES = 10_000


@dataclass(frozen=True)
class Distribution:
    """Normalized probabilities over a variable's domain."""

    variable: Variable
    probabilities: tuple[float, ...]

    def __getitem__(self, label: str) -> float:
        return self.probabilities[self.variable.index(label)]

    def as_dict(self) -> dict[str, float]:
        return dict(zip(self.variable.domain, self.probabilities))

    def as_array(self) -> np.ndarray:
        return np.array(self.probabilities)

    @property
    def mode(self) -> str:
        """Most probable category (first one on ties)."""
        return self.variable.domain[int(np.argmax(self.probabilities))]


def query_distribution(
    model: BayesianNetwork,
    target: str,
    evidence: Mapping[str, str] | None = None,
    n_samples: int = DEFAULT_N_SAMPLES,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> Distribution:
    """Estimate P(target | evidence) by likelihood weighting.

    Raises:
        UnknownVariable: If target or an evidence variable is not in the model.
        UnknownCategory: If an evidence value is outside its domain.
        ZeroWeight: If every sample has weight zero (impossible evidence).
    """
    evidence = dict(evidence or {})
    codes, weights = _weighted_draws(model, {target}, evidence, n_samples, make_rng(rng, seed))
    total = _total_weight(weights, evidence)

    var = model.variable(target)
    mass = np.bincount(codes[target], weights=weights, minlength=var.cardinality) / total
    logger.debug("P(%s | %s) ~ %s over %d samples", target, evidence, mass.round(4), n_samples)
    return Distribution(variable=var, probabilities=tuple(float(p) for p in mass))


def query_probability(
    model: BayesianNetwork,
    event: Mapping[str, str],
    evidence: Mapping[str, str] | None = None,
    n_samples: int = DEFAULT_N_SAMPLES,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> float:
    """Estimate P(event | evidence) for a partial assignment *event*."""
    if not event:
        raise ValueError("event must assign at least one variable")
    evidence = dict(evidence or {})
    codes, weights = _weighted_draws(
        model, set(event), evidence, n_samples, make_rng(rng, seed)
    )
    total = _total_weight(weights, evidence)

    hit = np.ones(n_samples, dtype=bool)
    for name, value in event.items():
        hit &= codes[name] == model.variable(name).index(value)
    return float(weights[hit].sum() / total)


def predict(
    model: BayesianNetwork,
    data: Dataset,
    target: str,
    n_samples: int = DEFAULT_N_SAMPLES,
    output: Literal["label", "distribution"] = "label",
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> list[str] | list[Distribution]:
    """Per-row prediction of *target* from the row's other model variables.

    Rows with identical evidence share one query.
    """
    if output not in ("label", "distribution"):
        raise ValueError(f"output must be 'label' or 'distribution', got {output!r}")
    model.variable(target)
    generator = make_rng(rng, seed)
    evidence_nodes = [n for n in model.nodes if n != target and n in data]

    cache: dict[tuple[str, ...], Distribution] = {}
    results: list[Distribution] = []
    for row in data.rows():
        key = tuple(row[n] for n in evidence_nodes)
        if key not in cache:
            cache[key] = query_distribution(
                model, target, dict(zip(evidence_nodes, key)), n_samples, rng=generator
            )
        results.append(cache[key])

    logger.info(
        "Predicted %s for %d rows (%d distinct evidence sets)", target, len(results), len(cache)
    )
    if output == "distribution":
        return results
    return [d.mode for d in results]


def prediction_accuracy(
    model: BayesianNetwork,
    data: Dataset,
    target: str,
    n_samples: int = DEFAULT_N_SAMPLES,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> float:
    """Fraction of rows whose predicted *target* equals the observed one."""
    if target not in data:
        raise UnknownVariable(target)
    if data.n_rows == 0:
        return 0.0
    predicted = predict(model, data, target, n_samples, rng=rng, seed=seed)
    observed = data.column(target)
    return sum(p == o for p, o in zip(predicted, observed)) / data.n_rows


# ----------------------------------------------------------------------
# Internal helpers
# ----------------------------------------------------------------------


def _weighted_draws(
    model: BayesianNetwork,
    targets: set[str],
    evidence: Mapping[str, str],
    n_samples: int,
    generator: np.random.Generator,
) -> tuple[dict[str, np.ndarray], np.ndarray]:
    """Category codes per node and the likelihood weight of every sample.

    Only ancestors of the targets and the evidence are visited; the
    remaining nodes cannot change either the weights or the targets.
    """
    if n_samples <= 0:
        raise ValueError(f"n_samples must be > 0, got {n_samples}")
    relevant = set(targets) | set(evidence)
    for name in list(relevant):
        relevant |= model.ancestors(name)
    clamped = {name: model.variable(name).index(value) for name, value in evidence.items()}

    codes: dict[str, np.ndarray] = {}
    weights = np.ones(n_samples)
    for node in model.topological_order():
        if node not in relevant:
            continue
        cpt = model.cpts[node]
        if cpt.parents:
            dims = tuple(p.cardinality for p in cpt.parents)
            rows = np.ravel_multi_index(tuple(codes[p.name] for p in cpt.parents), dims)
        else:
            rows = np.zeros(n_samples, dtype=np.intp)
        probs = cpt.table[rows]

        if node in clamped:
            weights *= probs[:, clamped[node]]
            codes[node] = np.full(n_samples, clamped[node], dtype=np.intp)
        else:
            cumulative = np.cumsum(probs, axis=1)
            u = generator.random(n_samples) * cumulative[:, -1]
            drawn = np.sum(cumulative <= u[:, None], axis=1)
            codes[node] = np.minimum(drawn, cpt.variable.cardinality - 1)
    return codes, weights


def _total_weight(weights: np.ndarray, evidence: Mapping[str, str]) -> float:
    total = float(weights.sum())
    if not total > 0.0:
        logger.warning("Zero total weight for evidence %s", dict(evidence))
        raise ZeroWeight(evidence, len(weights))
    return total
