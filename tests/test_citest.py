"""Tests for ConditionalIndependenceTester and DAGRefuter."""

import numpy as np
import pytest
from scipy.stats import chi2_contingency

from causalbn.citest import ConditionalIndependenceTester, DAGRefuter
from causalbn.dataset import Dataset
from causalbn.dsep import DSeparationEngine
from causalbn.errors import InsufficientData
from causalbn.types import IndependenceAssertion


@pytest.fixture
def independent_data():
    """Two columns that are independent (random)."""
    rng = np.random.default_rng(42)
    n = 400
    return Dataset.from_columns(
        {
            "X": rng.choice(["a", "b"], size=n).tolist(),
            "Y": rng.choice(["c", "d"], size=n).tolist(),
        }
    )


@pytest.fixture
def dependent_data():
    """Two columns that are strongly dependent (Y copies X)."""
    x = ["a", "b"] * 100
    y = ["c" if v == "a" else "d" for v in x]
    return Dataset.from_columns({"X": x, "Y": y})


@pytest.fixture
def chain_data():
    """X → Z → Y with Z a noisy copy of X and Y a noisy copy of Z."""
    rng = np.random.default_rng(7)
    n = 2000
    x = rng.integers(0, 2, n)
    z = np.where(rng.random(n) < 0.9, x, 1 - x)
    y = np.where(rng.random(n) < 0.9, z, 1 - z)
    return Dataset.from_columns({"X": x.tolist(), "Y": y.tolist(), "Z": z.tolist()})


class TestTester:
    def test_independent(self, independent_data):
        result = ConditionalIndependenceTester().test(independent_data, "X", "Y")
        assert result.p_value > 0.001
        assert result.is_independent(0.001)
        assert result.degrees_of_freedom == 1
        assert result.sample_size == 400

    def test_dependent(self, dependent_data):
        result = ConditionalIndependenceTester().test(dependent_data, "X", "Y")
        assert result.p_value < 0.001
        assert not result.is_independent()
        # Y copies X: MI equals H(X) = log 2
        assert result.mutual_information == pytest.approx(np.log(2))

    def test_conditional_independence_in_chain(self, chain_data):
        tester = ConditionalIndependenceTester()
        assert not tester.test(chain_data, "X", "Y").is_independent()
        conditional = tester.test(chain_data, "X", "Y", ["Z"])
        assert conditional.is_independent(0.001)
        assert conditional.degrees_of_freedom == 2
        assert conditional.z == frozenset({"Z"})

    def test_g_statistic_is_twice_n_mi(self, chain_data):
        result = ConditionalIndependenceTester("mi").test(chain_data, "X", "Z")
        assert result.statistic == pytest.approx(2 * result.sample_size * result.mutual_information)

    def test_pearson_matches_scipy(self, chain_data):
        result = ConditionalIndependenceTester("x2").test(chain_data, "X", "Z")
        table = np.zeros((2, 2))
        np.add.at(table, (chain_data.codes("X"), chain_data.codes("Z")), 1)
        expected, p, dof, _ = chi2_contingency(table, correction=False)
        assert result.statistic == pytest.approx(expected)
        assert result.p_value == pytest.approx(p)
        assert result.degrees_of_freedom == dof

    def test_g_matches_scipy_log_likelihood(self, chain_data):
        result = ConditionalIndependenceTester("mi").test(chain_data, "X", "Y")
        table = np.zeros((2, 2))
        np.add.at(table, (chain_data.codes("X"), chain_data.codes("Y")), 1)
        expected, p, _, _ = chi2_contingency(table, correction=False, lambda_="log-likelihood")
        assert result.statistic == pytest.approx(expected)
        assert result.p_value == pytest.approx(p)

    def test_single_category_gives_zero_dof(self):
        data = Dataset.from_columns({"X": ["a"] * 10, "Y": ["c", "d"] * 5})
        result = ConditionalIndependenceTester().test(data, "X", "Y")
        assert result.degrees_of_freedom == 0
        assert result.p_value == 1.0

    def test_empty_strata_contribute_nothing(self):
        data = Dataset.from_columns(
            {"X": ["a", "b"] * 20, "Y": ["c", "d"] * 20, "Z": ["u"] * 40},
            {"Z": ("u", "v")},
        )
        result = ConditionalIndependenceTester().test(data, "X", "Y", ["Z"])
        assert result.degrees_of_freedom == 2
        assert result.statistic > 0

    def test_no_rows(self):
        data = Dataset.from_rows([], {"X": ("a", "b"), "Y": ("c", "d")})
        with pytest.raises(InsufficientData):
            ConditionalIndependenceTester().test(data, "X", "Y")

    def test_overlapping_arguments(self, chain_data):
        with pytest.raises(ValueError, match="disjoint"):
            ConditionalIndependenceTester().test(chain_data, "X", "Y", ["X"])

    def test_unknown_method(self):
        with pytest.raises(ValueError, match="Unknown CI test method"):
            ConditionalIndependenceTester("fisher")


class TestRefuter:
    def test_independent_data_consistent(self, independent_data):
        assertion = IndependenceAssertion("X", "Y", frozenset(), is_independent=True)
        result = DAGRefuter(significance_level=0.001).test_independence(assertion, independent_data)
        assert result.consistent
        assert result.test.p_value > 0.001

    def test_dependent_data_refutes_claim(self, dependent_data):
        assertion = IndependenceAssertion("X", "Y", frozenset(), is_independent=True)
        result = DAGRefuter().test_independence(assertion, dependent_data)
        assert not result.consistent

    def test_true_structure_survives(self, survey_dag, survey_data):
        assertions = DSeparationEngine(dag=survey_dag).find_all_d_separations(1)
        results = DAGRefuter(significance_level=1e-4).refute_all(assertions, survey_data)
        assert len(results) == len(assertions)
        assert all(r.consistent for r in results)

    def test_refute_all_skips_insufficient_data(self):
        data = Dataset.from_rows([], {"X": ("a", "b"), "Y": ("c", "d")})
        assertion = IndependenceAssertion("X", "Y", frozenset(), is_independent=True)
        assert DAGRefuter().refute_all([assertion], data) == []

    def test_custom_tester(self, chain_data):
        refuter = DAGRefuter(tester=ConditionalIndependenceTester("x2"))
        assertion = IndependenceAssertion("X", "Y", frozenset({"Z"}), is_independent=True)
        assert refuter.test_independence(assertion, chain_data).test.method == "x2"
