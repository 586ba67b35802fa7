"""Conditional independence testing on categorical data.

ConditionalIndependenceTester computes a G-test (2·N·MI) or Pearson
chi-squared statistic stratified over the joint configurations of Z.
DAGRefuter checks d-separation claims against data with it.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
from scipy.stats import chi2

from .dataset import Dataset
from .errors import InsufficientData
from .types import IndependenceAssertion

logger = logging.getLogger(__name__)

CI_METHODS = ("mi", "x2")


@dataclass
class CITestResult:
    """Outcome of a conditional independence test."""

    x: str
    y: str
    z: frozenset[str]
    method: str
    statistic: float
    degrees_of_freedom: int
    p_value: float
    sample_size: int
    mutual_information: float

    def is_independent(self, significance_level: float = 0.05) -> bool:
        """Fail to reject independence at *significance_level*."""
        return self.p_value > significance_level


@dataclass
class ConditionalIndependenceTester:
    """Tests X ⊥ Y | Z from counts.

    Strata (Z configurations) with no observations contribute nothing;
    degrees of freedom are (|X|-1)(|Y|-1)·Π|Zᵢ| regardless.
    """

    method: str = "mi"

    def __post_init__(self) -> None:
        if self.method not in CI_METHODS:
            raise ValueError(
                f"Unknown CI test method {self.method!r}; expected one of {CI_METHODS}"
            )

    def test(self, data: Dataset, x: str, y: str, z: Iterable[str] = ()) -> CITestResult:
        """Test whether *x* and *y* are independent given *z* in *data*.

        Raises:
            UnknownVariable: If a column is missing.
            InsufficientData: If there are no rows, or no stratum has observations.
        """
        given = tuple(sorted(set(z)))
        if x == y or x in given or y in given:
            raise ValueError(f"x, y and z must be disjoint (got {x!r}, {y!r}, {list(given)})")

        x_var, y_var = data.variable(x), data.variable(y)
        z_vars = [data.variable(name) for name in given]
        n = data.n_rows
        if n == 0:
            raise InsufficientData(f"No rows to test {x} ⊥ {y} | {list(given)}")

        counts = self._counts(data, x, y, given)
        observed = counts.sum(axis=(1, 2))
        if not observed.any():
            raise InsufficientData(f"All strata of {list(given)} are empty")

        g = self._g_statistic(counts)
        statistic = g if self.method == "mi" else self._pearson_statistic(counts)

        dof = (x_var.cardinality - 1) * (y_var.cardinality - 1)
        dof *= math.prod(v.cardinality for v in z_vars)
        p_value = float(chi2.sf(statistic, dof)) if dof > 0 else 1.0
        mi = g / (2.0 * n)

        logger.debug(
            "CI test %s ⊥ %s | %s: %s=%.4f dof=%d p=%.4g",
            x, y, list(given), self.method, statistic, dof, p_value,
        )
        return CITestResult(
            x=x,
            y=y,
            z=frozenset(given),
            method=self.method,
            statistic=float(statistic),
            degrees_of_freedom=int(dof),
            p_value=p_value,
            sample_size=n,
            mutual_information=float(mi),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _counts(data: Dataset, x: str, y: str, given: tuple[str, ...]) -> np.ndarray:
        """Joint counts of shape (Z configurations, |X|, |Y|)."""
        kx = data.variable(x).cardinality
        ky = data.variable(y).cardinality
        if given:
            dims = tuple(data.variable(name).cardinality for name in given)
            strata = np.ravel_multi_index(tuple(data.codes(name) for name in given), dims)
            m = math.prod(dims)
        else:
            strata = np.zeros(data.n_rows, dtype=np.intp)
            m = 1
        counts = np.zeros((m, kx, ky), dtype=float)
        np.add.at(counts, (strata, data.codes(x), data.codes(y)), 1.0)
        return counts

    @staticmethod
    def _g_statistic(counts: np.ndarray) -> float:
        n_z = counts.sum(axis=(1, 2), keepdims=True)
        n_xz = counts.sum(axis=2, keepdims=True)
        n_yz = counts.sum(axis=1, keepdims=True)
        mask = counts > 0
        expected = np.broadcast_to(n_xz * n_yz / np.where(n_z > 0, n_z, 1.0), counts.shape)
        observed = counts[mask]
        return float(2.0 * np.sum(observed * np.log(observed / expected[mask])))

    @staticmethod
    def _pearson_statistic(counts: np.ndarray) -> float:
        n_z = counts.sum(axis=(1, 2), keepdims=True)
        n_xz = counts.sum(axis=2, keepdims=True)
        n_yz = counts.sum(axis=1, keepdims=True)
        expected = n_xz * n_yz / np.where(n_z > 0, n_z, 1.0)
        mask = expected > 0
        diff = counts - expected
        return float(np.sum(diff[mask] ** 2 / expected[mask]))


@dataclass
class RefutationResult:
    """Outcome of testing a structural claim against data."""

    assertion: IndependenceAssertion
    test: CITestResult
    consistent: bool  # Does the data agree with the structural claim?


@dataclass
class DAGRefuter:
    """Refute d-separation assertions against observed data."""

    significance_level: float = 0.05
    tester: ConditionalIndependenceTester | None = None

    def __post_init__(self) -> None:
        if self.tester is None:
            self.tester = ConditionalIndependenceTester()

    def test_independence(
        self,
        assertion: IndependenceAssertion,
        data: Dataset,
    ) -> RefutationResult:
        """Test a single assertion; data says independent iff p > significance."""
        result = self.tester.test(data, assertion.x, assertion.y, assertion.z)
        data_says_independent = result.is_independent(self.significance_level)
        return RefutationResult(
            assertion=assertion,
            test=result,
            consistent=data_says_independent == assertion.is_independent,
        )

    def refute_all(
        self,
        assertions: list[IndependenceAssertion],
        data: Dataset,
    ) -> list[RefutationResult]:
        """Refute all assertions, skipping those with insufficient data."""
        results: list[RefutationResult] = []
        for assertion in assertions:
            try:
                results.append(self.test_independence(assertion, data))
            except InsufficientData as e:
                logger.debug("Skipping assertion %s: %s", assertion, e)
        return results
