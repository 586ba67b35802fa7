"""BayesianNetwork — a DAG plus one validated CPT per node.

Treated as an immutable value: the structure is copied in on
construction, tables are read-only, and every "update" returns a new
network.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

import numpy as np

from .cpt import CPT, DEFAULT_TOLERANCE
from .dag import CausalDAG
from .dataset import Dataset
from .errors import IncompleteAssignment, InvalidCPT, ShapeMismatch
from .types import Edge, Variable


class BayesianNetwork:
    """Fitted discrete Bayesian network."""

    def __init__(self, dag: CausalDAG, cpts: Mapping[str, CPT]) -> None:
        missing = [n for n in dag.variables if n not in cpts]
        if missing:
            raise InvalidCPT(f"No CPT for nodes: {missing}")
        extra = [n for n in cpts if n not in dag]
        if extra:
            raise InvalidCPT(f"CPTs for nodes not in the graph: {extra}")

        for name, cpt in cpts.items():
            _check_against_structure(dag, name, cpt)

        self._dag = dag.copy()
        self._cpts: Mapping[str, CPT] = MappingProxyType(
            {name: cpts[name] for name in dag.variables}
        )
        self._order: tuple[str, ...] = tuple(self._dag.topological_order())

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_tables(
        cls,
        dag: CausalDAG,
        tables: Mapping[str, Any],
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> BayesianNetwork:
        """Specify a network directly: node -> m × k array-like (or CPT)."""
        cpts = {name: _as_cpt(dag, name, table, tolerance) for name, table in tables.items()}
        return cls(dag, cpts)

    def with_cpt(
        self,
        node: str,
        table: Any,
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> BayesianNetwork:
        """New network with *node*'s table replaced; this one is untouched.

        Raises:
            UnknownVariable: If *node* is not in the graph.
            InvalidCPT: If the table's shape or rows are wrong.
        """
        return self.with_cpts({node: table}, tolerance)

    def with_cpts(
        self,
        tables: Mapping[str, Any],
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> BayesianNetwork:
        cpts = dict(self._cpts)
        for name, table in tables.items():
            cpts[name] = _as_cpt(self._dag, name, table, tolerance)
        return BayesianNetwork(self._dag, cpts)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def dag(self) -> CausalDAG:
        """Copy of the structure (mutating it does not affect the network)."""
        return self._dag.copy()

    @property
    def nodes(self) -> list[str]:
        return list(self._dag.variables)

    @property
    def variables(self) -> dict[str, Variable]:
        return self._dag.variables

    def variable(self, name: str) -> Variable:
        return self._dag.variable(name)

    @property
    def edges(self) -> list[Edge]:
        return self._dag.edges

    def parents(self, node: str) -> list[str]:
        return self._dag.parents(node)

    def children(self, node: str) -> list[str]:
        return self._dag.children(node)

    def ancestors(self, node: str) -> frozenset[str]:
        return self._dag.ancestors(node)

    def topological_order(self) -> list[str]:
        return list(self._order)

    def __contains__(self, name: object) -> bool:
        return name in self._dag

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    @property
    def cpts(self) -> Mapping[str, CPT]:
        return self._cpts

    def cpt(self, node: str) -> CPT:
        self._dag.variable(node)
        return self._cpts[node]

    def lookup(self, node: str, parent_assignment: Mapping[str, str]) -> np.ndarray:
        """Probability row of *node* for the given parent values.

        Raises:
            IncompleteAssignment: If any parent of *node* has no value.
        """
        return self.cpt(node).row(parent_assignment)

    def joint_probability(self, assignment: Mapping[str, str]) -> float:
        """Exact probability of a full assignment (chain rule)."""
        missing = [n for n in self._order if n not in assignment]
        if missing:
            raise IncompleteAssignment("<joint>", missing)
        return math.prod(
            self._cpts[n].probability(assignment[n], assignment) for n in self._order
        )

    def log_likelihood(self, data: Dataset) -> float:
        """Sum of log joint probabilities of the rows of *data*."""
        _require_columns(self._order, data)
        total = 0.0
        for name in self._order:
            cpt = self._cpts[name]
            rows = _configuration_codes(cpt, data)
            probs = cpt.table[rows, _recode(cpt.variable, data)]
            with np.errstate(divide="ignore"):
                total += float(np.sum(np.log(probs)))
        return total

    def __repr__(self) -> str:
        return f"BayesianNetwork({self._dag.to_model_string()})"


# ----------------------------------------------------------------------
# Helpers shared with fit / inference
# ----------------------------------------------------------------------


def _as_cpt(dag: CausalDAG, name: str, table: Any, tolerance: float) -> CPT:
    var = dag.variable(name)
    if isinstance(table, CPT):
        _check_against_structure(dag, name, table)
        return table
    parents = [dag.variable(p) for p in dag.parents(name)]
    return CPT(var, parents, table, tolerance)


def _check_against_structure(dag: CausalDAG, name: str, cpt: CPT) -> None:
    expected_parents = [dag.variable(p) for p in dag.parents(name)]
    if cpt.variable != dag.variable(name):
        raise InvalidCPT(f"CPT variable {cpt.variable} does not match {dag.variable(name)}")
    if list(cpt.parents) != expected_parents:
        raise InvalidCPT(
            f"CPT for {name!r} is conditioned on {cpt.parent_names}, "
            f"graph parents are {dag.parents(name)}"
        )


def _recode(variable: Variable, data: Dataset) -> np.ndarray:
    """Codes of *data*'s column for *variable*, mapped into *variable*'s domain.

    Raises:
        ShapeMismatch: If the data column has categories the variable lacks.
    """
    column = data.variable(variable.name)
    if column.domain == variable.domain:
        return data.codes(variable.name)
    unknown = [c for c in column.domain if c not in variable.domain]
    if unknown:
        raise ShapeMismatch(
            f"Data column {variable.name!r} has categories {unknown} "
            f"outside the domain {list(variable.domain)}"
        )
    mapping = np.array([variable.domain.index(c) for c in column.domain], dtype=np.intp)
    return mapping[data.codes(variable.name)]


def _configuration_codes(cpt: CPT, data: Dataset) -> np.ndarray:
    """Row index into *cpt* for every row of *data*."""
    if not cpt.parents:
        return np.zeros(data.n_rows, dtype=np.intp)
    codes = tuple(_recode(p, data) for p in cpt.parents)
    return np.ravel_multi_index(codes, tuple(p.cardinality for p in cpt.parents))


def _require_columns(names: Iterable[str], data: Dataset) -> None:
    missing = [n for n in names if n not in data]
    if missing:
        raise ShapeMismatch(f"Data has no columns for {missing}")
