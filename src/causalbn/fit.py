"""Parameter fitting: Bayesian (Dirichlet smoothing) and maximum likelihood.

Every function returns a new BayesianNetwork; inputs are never modified.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import numpy as np

from .cpt import CPT
from .dag import CausalDAG
from .dataset import Dataset
from .model import BayesianNetwork, _configuration_codes, _recode, _require_columns

logger = logging.getLogger(__name__)

FIT_METHODS = ("bayes", "mle")


def fit_bayesian(
    dag: CausalDAG,
    data: Dataset,
    prior_pseudocount: float = 1.0,
) -> BayesianNetwork:
    """Posterior-mean CPTs under a symmetric Dirichlet prior.

    Each row is (count + α) / (row total + α·k), so configurations never
    observed in *data* get a uniform row rather than a division by zero.

    Raises:
        ShapeMismatch: If *dag* names variables that *data* has no column for,
            or a column holds categories outside the variable's domain.
        ValueError: If ``prior_pseudocount`` is not positive.
    """
    if not prior_pseudocount > 0:
        raise ValueError(f"prior_pseudocount must be > 0, got {prior_pseudocount}")
    _require_columns(dag.variables, data)

    cpts = {name: _bayes_cpt(dag, name, data, prior_pseudocount) for name in dag.variables}
    logger.info(
        "Fitted %d CPTs (bayes, pseudocount=%g) on %d rows",
        len(cpts), prior_pseudocount, data.n_rows,
    )
    return BayesianNetwork(dag, cpts)


def fit_mle(dag: CausalDAG, data: Dataset) -> BayesianNetwork:
    """Relative-frequency CPTs.

    Parent configurations absent from *data* get a uniform row (logged
    at WARNING) so every table stays row-stochastic.
    """
    _require_columns(dag.variables, data)

    cpts = {name: _mle_cpt(dag, name, data) for name in dag.variables}
    logger.info("Fitted %d CPTs (mle) on %d rows", len(cpts), data.n_rows)
    return BayesianNetwork(dag, cpts)


def fit(
    dag: CausalDAG,
    data: Dataset,
    method: str = "bayes",
    prior_pseudocount: float = 1.0,
) -> BayesianNetwork:
    """Dispatch to ``fit_bayesian`` or ``fit_mle``."""
    if method == "bayes":
        return fit_bayesian(dag, data, prior_pseudocount)
    if method == "mle":
        return fit_mle(dag, data)
    raise ValueError(f"Unknown fit method {method!r}; expected one of {FIT_METHODS}")


def refit(
    model: BayesianNetwork,
    data: Dataset,
    nodes: Iterable[str],
    method: str = "bayes",
    prior_pseudocount: float = 1.0,
) -> BayesianNetwork:
    """New network with only *nodes* re-estimated from *data*."""
    names = list(nodes)
    dag = model.dag
    for name in names:
        dag.variable(name)
    _require_columns({n for name in names for n in (name, *dag.parents(name))}, data)
    if method == "bayes":
        if not prior_pseudocount > 0:
            raise ValueError(f"prior_pseudocount must be > 0, got {prior_pseudocount}")
        tables = {name: _bayes_cpt(dag, name, data, prior_pseudocount) for name in names}
    elif method == "mle":
        tables = {name: _mle_cpt(dag, name, data) for name in names}
    else:
        raise ValueError(f"Unknown fit method {method!r}; expected one of {FIT_METHODS}")
    logger.info("Refitted %s (%s) on %d rows", names, method, data.n_rows)
    return model.with_cpts(tables)


# ----------------------------------------------------------------------
# Counting
# ----------------------------------------------------------------------


def _family_counts(dag: CausalDAG, name: str, data: Dataset) -> tuple[CPT, np.ndarray]:
    """Uniform template CPT for *name* plus its (configurations × categories) counts."""
    template = CPT.uniform(dag.variable(name), [dag.variable(p) for p in dag.parents(name)])
    counts = np.zeros(template.table.shape, dtype=float)
    np.add.at(counts, (_configuration_codes(template, data), _recode(template.variable, data)), 1.0)
    return template, counts


def _bayes_cpt(dag: CausalDAG, name: str, data: Dataset, alpha: float) -> CPT:
    template, counts = _family_counts(dag, name, data)
    k = template.variable.cardinality
    table = (counts + alpha) / (counts.sum(axis=1, keepdims=True) + alpha * k)
    return CPT(template.variable, template.parents, table)


def _mle_cpt(dag: CausalDAG, name: str, data: Dataset) -> CPT:
    template, counts = _family_counts(dag, name, data)
    totals = counts.sum(axis=1, keepdims=True)
    empty = totals[:, 0] == 0
    if empty.any():
        logger.warning(
            "%s: %d of %d parent configurations unobserved, using uniform rows",
            name, int(empty.sum()), len(empty),
        )
    table = np.where(totals > 0, counts / np.where(totals > 0, totals, 1.0), template.table)
    return CPT(template.variable, template.parents, table)
