"""Conditional probability tables.

A CPT for a node with domain size k and parent configuration count m is an
m × k row-stochastic array. Rows enumerate parent configurations in
row-major order: the first parent varies slowest.
"""

from __future__ import annotations

import itertools
import math
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

import numpy as np

from .errors import IncompleteAssignment, InvalidCPT
from .types import Variable

DEFAULT_TOLERANCE = 1e-6


class CPT:
    """Validated, read-only conditional probability table."""

    __slots__ = ("variable", "parents", "_table")

    def __init__(
        self,
        variable: Variable,
        parents: Sequence[Variable],
        table: Any,
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> None:
        self.variable = variable
        self.parents: tuple[Variable, ...] = tuple(parents)

        try:
            arr = np.array(table, dtype=float)
        except (TypeError, ValueError) as err:
            raise InvalidCPT(f"Table for {variable.name!r} is not numeric: {err}") from err
        expected = (self.n_configurations, variable.cardinality)
        if arr.ndim == 1 and not self.parents:
            arr = arr.reshape(1, -1)
        if arr.shape != expected:
            raise InvalidCPT(
                f"Table for {variable.name!r} has shape {arr.shape}, expected {expected} "
                f"({self.n_configurations} parent configurations × "
                f"{variable.cardinality} categories)"
            )
        if not np.all(np.isfinite(arr)) or np.any(arr < 0):
            raise InvalidCPT(f"Table for {variable.name!r} has negative or non-finite entries")
        sums = arr.sum(axis=1)
        bad = np.flatnonzero(np.abs(sums - 1.0) > tolerance)
        if bad.size:
            config = self.configuration(int(bad[0]))
            raise InvalidCPT(
                f"Row {config} of {variable.name!r} sums to {sums[bad[0]]:.6g}, not 1"
            )
        arr.setflags(write=False)
        self._table = arr

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def point_mass(cls, variable: Variable, value: str) -> CPT:
        """Parentless table putting probability 1 on *value*."""
        row = np.zeros(variable.cardinality)
        row[variable.index(value)] = 1.0
        return cls(variable, (), row.reshape(1, -1))

    @classmethod
    def uniform(cls, variable: Variable, parents: Sequence[Variable] = ()) -> CPT:
        m = math.prod(p.cardinality for p in parents)
        k = variable.cardinality
        return cls(variable, parents, np.full((m, k), 1.0 / k))

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.variable.name

    @property
    def parent_names(self) -> list[str]:
        return [p.name for p in self.parents]

    @property
    def table(self) -> np.ndarray:
        """The m × k array (read-only)."""
        return self._table

    @property
    def n_configurations(self) -> int:
        return math.prod(p.cardinality for p in self.parents)

    def configurations(self) -> Iterator[tuple[str, ...]]:
        """Parent configurations in row order."""
        return itertools.product(*(p.domain for p in self.parents))

    def configuration(self, row: int) -> tuple[str, ...]:
        if not self.parents:
            return ()
        idx = np.unravel_index(row, tuple(p.cardinality for p in self.parents))
        return tuple(p.domain[int(i)] for p, i in zip(self.parents, idx))

    def row_index(self, parent_assignment: Mapping[str, str]) -> int:
        """Row for the parent values in *parent_assignment* (extra keys ignored).

        Raises:
            IncompleteAssignment: If a parent value is missing.
            UnknownCategory: If a parent value is outside its domain.
        """
        missing = [p.name for p in self.parents if p.name not in parent_assignment]
        if missing:
            raise IncompleteAssignment(self.name, missing)
        if not self.parents:
            return 0
        codes = tuple(p.index(parent_assignment[p.name]) for p in self.parents)
        return int(np.ravel_multi_index(codes, tuple(p.cardinality for p in self.parents)))

    def row(self, parent_assignment: Mapping[str, str]) -> np.ndarray:
        return self._table[self.row_index(parent_assignment)]

    def probability(self, value: str, parent_assignment: Mapping[str, str]) -> float:
        return float(self.row(parent_assignment)[self.variable.index(value)])

    def copy(self) -> CPT:
        """Same table in a fresh array; already validated, so not checked again."""
        clone = object.__new__(CPT)
        clone.variable = self.variable
        clone.parents = self.parents
        table = self._table.copy()
        table.setflags(write=False)
        clone._table = table
        return clone

    def to_dict(self) -> dict[str, Any]:
        return {
            "variable": self.name,
            "parents": self.parent_names,
            "table": self._table.tolist(),
        }

    def as_rows(self) -> dict[tuple[str, ...], dict[str, float]]:
        """Configuration → {category: probability}, for display."""
        return {
            config: dict(zip(self.variable.domain, map(float, self._table[i])))
            for i, config in enumerate(self.configurations())
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CPT):
            return NotImplemented
        return (
            self.variable == other.variable
            and self.parents == other.parents
            and np.array_equal(self._table, other._table)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        given = f" | {', '.join(self.parent_names)}" if self.parents else ""
        return f"CPT({self.name}{given}, shape={self._table.shape})"
