"""D-separation via the moralized ancestral graph.

Pure graph topology: no data, no randomness.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

import networkx as nx

from .dag import CausalDAG
from .errors import UnknownVariable
from .types import IndependenceAssertion


def is_d_separated(dag: CausalDAG, x: str, y: str, z: Iterable[str] = ()) -> bool:
    """Return True iff *x* and *y* are d-separated given *z* in *dag*.

    1. restrict to the ancestral subgraph of {x, y} ∪ z
    2. moralize (marry co-parents) and drop directions
    3. delete z and test whether x still reaches y

    Raises:
        UnknownVariable: If any name is not in the DAG.
        ValueError: If x == y or z overlaps {x, y}.
    """
    given = frozenset(z)
    for name in (x, y, *given):
        if name not in dag:
            raise UnknownVariable(name)
    if x == y:
        raise ValueError(f"Cannot test {x!r} against itself")
    if given & {x, y}:
        raise ValueError(f"Conditioning set {sorted(given)} overlaps {{{x!r}, {y!r}}}")

    relevant = {x, y} | given
    ancestral = set(relevant)
    for node in relevant:
        ancestral |= dag.ancestors(node)

    moral = nx.moral_graph(dag.graph.subgraph(ancestral))
    moral.remove_nodes_from(given)
    return not nx.has_path(moral, x, y)


@dataclass
class DSeparationEngine:
    """Answers d-separation queries on a CausalDAG."""

    dag: CausalDAG

    # ------------------------------------------------------------------
    # Core query
    # ------------------------------------------------------------------

    def is_d_separated(
        self,
        x: str,
        y: str,
        z: Iterable[str] = (),
    ) -> IndependenceAssertion:
        """Test whether *x* and *y* are d-separated given *z*."""
        given = frozenset(z)
        return IndependenceAssertion(
            x=x,
            y=y,
            z=given,
            is_independent=is_d_separated(self.dag, x, y, given),
        )

    # ------------------------------------------------------------------
    # Exhaustive enumeration
    # ------------------------------------------------------------------

    def find_all_d_separations(
        self,
        max_conditioning_size: int = 3,
    ) -> list[IndependenceAssertion]:
        """Every separating (x, y, z) with x < y by name and |z| <= the bound.

        Sets are tried smallest first, so for each pair the output runs from
        the empty set upward.
        """
        found: list[IndependenceAssertion] = []
        for x, y in itertools.combinations(sorted(self.dag.node_ids), 2):
            for given in _conditioning_sets(self.dag, x, y, max_conditioning_size):
                assertion = self.is_d_separated(x, y, given)
                if assertion.is_independent:
                    found.append(assertion)
        return found

    def find_minimal_conditioning_set(self, x: str, y: str) -> frozenset[str] | None:
        """Smallest set separating *x* and *y*, or None (adjacent nodes never separate).

        Ties between equally small sets go to the first in name order.
        """
        for given in _conditioning_sets(self.dag, x, y, len(self.dag)):
            if is_d_separated(self.dag, x, y, given):
                return frozenset(given)
        return None


def _conditioning_sets(dag: CausalDAG, x: str, y: str, max_size: int) -> Iterator[tuple[str, ...]]:
    others = sorted(dag.node_ids - {x, y})
    for size in range(min(max_size, len(others)) + 1):
        yield from itertools.combinations(others, size)
