"""Error kinds raised by causalbn.

All share ``BayesNetError`` so callers can catch the family, and each
also derives from the closest builtin so generic handlers keep working.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence


class BayesNetError(Exception):
    """Base class for every causalbn failure."""


class DuplicateVariable(BayesNetError, ValueError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Variable {name!r} already exists")


class UnknownVariable(BayesNetError, LookupError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown variable {name!r}")

    def __str__(self) -> str:
        return self.args[0]


class UnknownCategory(BayesNetError, ValueError):
    """A value outside a variable's domain."""

    def __init__(self, variable: str, value: object, domain: Sequence[str]) -> None:
        self.variable = variable
        self.value = value
        self.domain = tuple(domain)
        super().__init__(
            f"{value!r} is not a category of {variable!r} (domain: {list(self.domain)})"
        )


class CycleDetected(BayesNetError, ValueError):
    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = list(cycle)
        super().__init__("Adding edge closes the cycle " + " -> ".join(self.cycle))


class ShapeMismatch(BayesNetError, ValueError):
    """Graph and data (or graph and table) disagree on variables or domains."""


class InvalidCPT(BayesNetError, ValueError):
    """A table with the wrong shape or rows that are not distributions."""


class IncompleteAssignment(BayesNetError, LookupError):
    def __init__(self, node: str, missing: Iterable[str]) -> None:
        self.node = node
        self.missing = sorted(missing)
        super().__init__(f"Assignment for {node!r} is missing parent values: {self.missing}")

    def __str__(self) -> str:
        return self.args[0]


class InsufficientData(BayesNetError, ValueError):
    """No observations to compute a statistic from."""


class ZeroWeight(BayesNetError, ArithmeticError):
    """Every likelihood-weighted sample had weight zero.

    The evidence is impossible under the model (or so improbable that
    the weights underflowed). Retrying with more samples is the caller's call.
    """

    def __init__(self, evidence: Mapping[str, str], n_samples: int) -> None:
        self.evidence = dict(evidence)
        self.n_samples = n_samples
        super().__init__(
            f"All {n_samples} samples have zero weight for evidence {self.evidence}"
        )
