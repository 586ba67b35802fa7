"""CausalDAG — acyclic directed graph over categorical variables.

Wraps networkx.DiGraph. Unlike a plain DiGraph, edge insertion order is
recorded so that parent order (and therefore CPT layout) is stable
across copies.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

import networkx as nx

from .errors import CycleDetected, DuplicateVariable, UnknownVariable
from .types import Edge, Variable

logger = logging.getLogger(__name__)

_MODEL_STRING_NODE = re.compile(r"\[([^\[\]|]+)(?:\|([^\[\]]*))?\]")


@dataclass
class CausalDAG:
    """Directed acyclic graph of named categorical variables.

    Acyclicity is enforced on every ``add_edge``; a rejected edge leaves
    the graph untouched.
    """

    _graph: nx.DiGraph = field(default_factory=nx.DiGraph, repr=False)
    _variables: dict[str, Variable] = field(default_factory=dict, repr=False)
    _edges: list[Edge] = field(default_factory=list, repr=False)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_edges(
        cls,
        variables: Iterable[Variable],
        edges: Iterable[Edge],
    ) -> CausalDAG:
        """Build a CausalDAG from declared variables and (parent, child) edges."""
        dag = cls()
        for var in variables:
            dag.add_variable(var.name, var.domain)
        for parent, child in edges:
            dag.add_edge(parent, child)
        return dag

    @classmethod
    def from_model_string(
        cls,
        model_string: str,
        domains: Mapping[str, Sequence[str]],
    ) -> CausalDAG:
        """Build a CausalDAG from bracket notation, e.g. ``[A][S][E|A:S]``.

        Parents may be separated by ``:`` or ``,``. Every node named in the
        string needs an entry in *domains*.
        """
        blocks = _MODEL_STRING_NODE.findall(model_string.replace(" ", ""))
        leftover = _MODEL_STRING_NODE.sub("", model_string.replace(" ", ""))
        if leftover or not blocks:
            raise ValueError(f"Malformed model string: {model_string!r}")

        dag = cls()
        parsed: list[tuple[str, list[str]]] = []
        for node, parent_spec in blocks:
            parents = [p for p in re.split(r"[:,]", parent_spec) if p] if parent_spec else []
            parsed.append((node, parents))

        for node, _ in parsed:
            if node not in domains:
                raise UnknownVariable(node)
            dag.add_variable(node, domains[node])
        for node, parents in parsed:
            for parent in parents:
                dag.add_edge(parent, node)
        return dag

    def to_model_string(self) -> str:
        """Render bracket notation, nodes in topological order."""
        parts = []
        for node in self.topological_order():
            parents = self.parents(node)
            parts.append(f"[{node}|{':'.join(parents)}]" if parents else f"[{node}]")
        return "".join(parts)

    def add_variable(self, name: str, domain: Sequence[str]) -> Variable:
        """Declare a new variable.

        Raises:
            DuplicateVariable: If *name* is already declared.
        """
        if name in self._variables:
            raise DuplicateVariable(name)
        var = Variable(name=name, domain=tuple(domain))
        self._variables[name] = var
        self._graph.add_node(name)
        return var

    def add_edge(self, parent: str, child: str) -> None:
        """Insert parent → child.

        Adding an existing edge is a no-op.

        Raises:
            UnknownVariable: If either endpoint is undeclared.
            CycleDetected: If *child* already reaches *parent*.
        """
        self._require(parent)
        self._require(child)
        if self._graph.has_edge(parent, child):
            return
        if parent == child:
            raise CycleDetected([parent, child])
        if nx.has_path(self._graph, child, parent):
            path = nx.shortest_path(self._graph, child, parent)
            raise CycleDetected([parent, *path])
        self._graph.add_edge(parent, child)
        self._edges.append((parent, child))

    def remove_incoming_edges(self, node: str) -> None:
        """Strip every parent edge of *node*; its outgoing edges stay."""
        self._require(node)
        incoming = [(u, v) for u, v in self._edges if v == node]
        if not incoming:
            return
        self._graph.remove_edges_from(incoming)
        self._edges = [(u, v) for u, v in self._edges if v != node]
        logger.debug("Removed %d incoming edges of %s", len(incoming), node)

    def copy(self) -> CausalDAG:
        """Independent copy with the same variable and edge insertion order."""
        return CausalDAG.from_edges(self._variables.values(), self._edges)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def graph(self) -> nx.DiGraph:
        """A networkx DiGraph copy of the structure (safe to mutate)."""
        return self._graph.copy()

    @property
    def variables(self) -> dict[str, Variable]:
        """Name → Variable mapping, in declaration order."""
        return dict(self._variables)

    @property
    def node_ids(self) -> frozenset[str]:
        return frozenset(self._variables)

    @property
    def edges(self) -> list[Edge]:
        """Edges in insertion order."""
        return list(self._edges)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def variable(self, name: str) -> Variable:
        self._require(name)
        return self._variables[name]

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def __len__(self) -> int:
        return len(self._variables)

    def parents(self, node: str) -> list[str]:
        """Direct parents, in edge insertion order."""
        self._require(node)
        return [u for u, v in self._edges if v == node]

    def children(self, node: str) -> list[str]:
        """Direct children, in edge insertion order."""
        self._require(node)
        return [v for u, v in self._edges if u == node]

    def ancestors(self, node: str) -> frozenset[str]:
        """All ancestors of a node (transitive parents)."""
        self._require(node)
        return frozenset(nx.ancestors(self._graph, node))

    def descendants(self, node: str) -> frozenset[str]:
        """All descendants of a node (transitive children)."""
        self._require(node)
        return frozenset(nx.descendants(self._graph, node))

    def markov_blanket(self, node: str) -> frozenset[str]:
        """Parents, children, and the children's other parents."""
        blanket = set(self.parents(node)) | set(self.children(node))
        for child in self.children(node):
            blanket.update(self.parents(child))
        blanket.discard(node)
        return frozenset(blanket)

    def topological_order(self) -> list[str]:
        """Topological sort, ties broken lexicographically by name."""
        return list(nx.lexicographical_topological_sort(self._graph))

    def is_valid_dag(self) -> bool:
        """Check that the graph is a valid DAG (directed, acyclic)."""
        return self._graph.is_directed() and nx.is_directed_acyclic_graph(self._graph)

    def _require(self, name: str) -> None:
        if name not in self._variables:
            raise UnknownVariable(name)
