"""Type system for causalbn: variables, assignments, query enums.

Every other module imports from here. Kept free of numpy so that
the graph layer can be used without touching the numeric stack.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .errors import UnknownCategory

# =============================================================================
# Aliases
# =============================================================================

Assignment = dict[str, str]
"""Variable name -> category label. Partial or full."""

Edge = tuple[str, str]
"""Directed (parent, child)."""


# =============================================================================
# Enums
# =============================================================================


class CausalCapability(StrEnum):
    """What a query engine can do."""

    D_SEPARATION = "d_separation"
    CI_TESTING = "ci_testing"
    PROBABILISTIC_INFERENCE = "probabilistic_inference"
    INTERVENTION = "intervention"
    COUNTERFACTUAL = "counterfactual"


class QueryType(StrEnum):
    """Pearl's three rungs of the causal ladder."""

    OBSERVATIONAL = "observational"
    INTERVENTIONAL = "interventional"
    COUNTERFACTUAL = "counterfactual"


# =============================================================================
# Dataclasses
# =============================================================================


@dataclass(frozen=True)
class Variable:
    """A named categorical variable with a fixed, ordered domain.

    Frozen: identity is the name, and the domain never changes once the
    variable is declared.
    """

    name: str
    domain: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Variable name must be a non-empty string")
        domain = tuple(str(v) for v in self.domain)
        if not domain:
            raise ValueError(f"Variable {self.name!r} needs at least one category")
        if len(set(domain)) != len(domain):
            raise ValueError(f"Variable {self.name!r} has duplicate categories: {domain}")
        object.__setattr__(self, "domain", domain)

    @property
    def cardinality(self) -> int:
        return len(self.domain)

    def index(self, value: str) -> int:
        """Position of *value* in the domain.

        Raises:
            UnknownCategory: If *value* is not a category of this variable.
        """
        try:
            return self.domain.index(str(value))
        except ValueError:
            raise UnknownCategory(self.name, value, self.domain) from None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "domain": list(self.domain)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Variable:
        return cls(name=data["name"], domain=tuple(data["domain"]))


@dataclass(frozen=True)
class IndependenceAssertion:
    """Result of a d-separation query: is x independent of y given z?"""

    x: str
    y: str
    z: frozenset[str]
    is_independent: bool
    method: str = "d_separation"


@dataclass
class CausalQuery:
    """A causal query: observational, interventional, or counterfactual.

    ``evidence`` conditions the query (seeing), ``interventions`` fix
    variables via the do-operator (doing).
    """

    query_type: QueryType
    target: str
    evidence: dict[str, str] = field(default_factory=dict)
    interventions: dict[str, str] = field(default_factory=dict)


@dataclass
class QueryResult:
    """Answer to a CausalQuery."""

    query: CausalQuery
    distribution: dict[str, float]
    n_samples: int
    capabilities_used: list[str] = field(default_factory=list)

    @property
    def most_likely(self) -> str:
        return max(self.distribution, key=lambda k: self.distribution[k])
