"""Dataset — ordered rows over named categorical columns.

Columns are stored as integer codes into each variable's domain, which is
what the counting code in ``fit`` and ``citest`` operates on.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence

import numpy as np

from .errors import ShapeMismatch, UnknownVariable
from .types import Assignment, Variable


class Dataset:
    """Fixed-size table of categorical observations.

    Immutable after construction: ``codes()`` hands out read-only arrays.
    """

    def __init__(self, variables: Sequence[Variable], codes: Mapping[str, np.ndarray]) -> None:
        self._variables: dict[str, Variable] = {v.name: v for v in variables}
        if len(self._variables) != len(variables):
            raise ShapeMismatch("Dataset columns must have unique names")

        lengths = {len(codes[name]) for name in self._variables}
        if len(lengths) > 1:
            raise ShapeMismatch(f"Columns have different lengths: {sorted(lengths)}")
        self._n_rows = lengths.pop() if lengths else 0

        self._codes: dict[str, np.ndarray] = {}
        for name, var in self._variables.items():
            col = np.array(codes[name], dtype=np.intp)
            if col.size and (col.min() < 0 or col.max() >= var.cardinality):
                raise ShapeMismatch(f"Column {name!r} has codes outside its domain")
            col.setflags(write=False)
            self._codes[name] = col

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_columns(
        cls,
        columns: Mapping[str, Sequence[object]],
        domains: Mapping[str, Sequence[str]] | None = None,
    ) -> Dataset:
        """Build from column-oriented data: name -> list of labels.

        Domains default to the sorted distinct labels of each column.
        """
        domains = domains or {}
        variables: list[Variable] = []
        codes: dict[str, np.ndarray] = {}
        for name, values in columns.items():
            labels = [str(v) for v in values]
            domain = tuple(domains.get(name) or sorted(set(labels)))
            var = Variable(name=name, domain=domain)
            index = {label: i for i, label in enumerate(var.domain)}
            try:
                codes[name] = np.array([index[label] for label in labels], dtype=np.intp)
            except KeyError as err:
                var.index(err.args[0])  # raises UnknownCategory
                raise
            variables.append(var)
        return cls(variables, codes)

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Mapping[str, object]],
        domains: Mapping[str, Sequence[str]] | None = None,
    ) -> Dataset:
        """Build from a sequence of full assignments.

        Raises:
            ShapeMismatch: If rows do not all cover the same variables.
        """
        if not rows:
            if not domains:
                raise ShapeMismatch("Cannot infer columns from zero rows without domains")
            return cls.from_columns({name: [] for name in domains}, domains)

        names = list(rows[0])
        for i, row in enumerate(rows):
            if set(row) != set(names):
                raise ShapeMismatch(f"Row {i} covers {sorted(row)}, expected {sorted(names)}")
        return cls.from_columns({n: [row[n] for row in rows] for n in names}, domains)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def n_rows(self) -> int:
        return self._n_rows

    def __len__(self) -> int:
        return self._n_rows

    @property
    def columns(self) -> list[str]:
        return list(self._variables)

    @property
    def variables(self) -> dict[str, Variable]:
        return dict(self._variables)

    def variable(self, name: str) -> Variable:
        if name not in self._variables:
            raise UnknownVariable(name)
        return self._variables[name]

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def codes(self, name: str) -> np.ndarray:
        """Integer codes of a column (read-only)."""
        self.variable(name)
        return self._codes[name]

    def column(self, name: str) -> list[str]:
        """Labels of a column."""
        domain = self.variable(name).domain
        return [domain[c] for c in self._codes[name]]

    def row(self, i: int) -> Assignment:
        return {
            name: var.domain[self._codes[name][i]] for name, var in self._variables.items()
        }

    def rows(self) -> Iterator[Assignment]:
        for i in range(self._n_rows):
            yield self.row(i)

    def select(self, names: Sequence[str]) -> Dataset:
        """Dataset restricted to the given columns."""
        return Dataset([self.variable(n) for n in names], {n: self._codes[n] for n in names})
