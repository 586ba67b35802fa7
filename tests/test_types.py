"""Tests for core types and the error hierarchy."""

import pytest

from causalbn.errors import (
    BayesNetError,
    CycleDetected,
    DuplicateVariable,
    IncompleteAssignment,
    InsufficientData,
    InvalidCPT,
    ShapeMismatch,
    UnknownCategory,
    UnknownVariable,
    ZeroWeight,
)
from causalbn.types import (
    CausalCapability,
    CausalQuery,
    IndependenceAssertion,
    QueryResult,
    QueryType,
    Variable,
)


class TestVariable:
    def test_domain_normalised_to_str_tuple(self):
        var = Variable("X", [0, 1, 2])
        assert var.domain == ("0", "1", "2")
        assert var.cardinality == 3

    def test_frozen(self):
        var = Variable("X", ("a", "b"))
        with pytest.raises(AttributeError):
            var.name = "Y"  # type: ignore[misc]

    def test_index(self):
        var = Variable("R", ("small", "big"))
        assert var.index("small") == 0
        assert var.index("big") == 1

    def test_index_unknown(self):
        var = Variable("R", ("small", "big"))
        with pytest.raises(UnknownCategory) as info:
            var.index("medium")
        assert info.value.variable == "R"
        assert info.value.domain == ("small", "big")

    def test_empty_name(self):
        with pytest.raises(ValueError):
            Variable("", ("a",))

    def test_duplicate_categories(self):
        with pytest.raises(ValueError, match="duplicate"):
            Variable("X", ("a", "a"))

    def test_dict_round_trip(self):
        var = Variable("A", ("young", "adult", "old"))
        assert Variable.from_dict(var.to_dict()) == var


class TestEnums:
    def test_query_types(self):
        assert QueryType.OBSERVATIONAL == "observational"
        assert QueryType.INTERVENTIONAL == "interventional"
        assert QueryType.COUNTERFACTUAL == "counterfactual"

    def test_capabilities_are_strings(self):
        assert CausalCapability.D_SEPARATION.value == "d_separation"
        assert CausalCapability("intervention") is CausalCapability.INTERVENTION


class TestDataclasses:
    def test_assertion_hashable(self):
        a = IndependenceAssertion("A", "C", frozenset({"B"}), True)
        b = IndependenceAssertion("A", "C", frozenset({"B"}), True)
        assert a == b
        assert len({a, b}) == 1

    def test_query_defaults(self):
        q = CausalQuery(QueryType.OBSERVATIONAL, "T")
        assert q.evidence == {}
        assert q.interventions == {}

    def test_most_likely(self):
        q = CausalQuery(QueryType.OBSERVATIONAL, "T")
        r = QueryResult(q, {"car": 0.6, "train": 0.3, "other": 0.1}, n_samples=100)
        assert r.most_likely == "car"


class TestErrors:
    @pytest.mark.parametrize(
        "err",
        [
            DuplicateVariable("A"),
            UnknownVariable("A"),
            UnknownCategory("A", "x", ("a",)),
            CycleDetected(["A", "B", "A"]),
            ShapeMismatch("bad"),
            InvalidCPT("bad"),
            IncompleteAssignment("E", ["S"]),
            InsufficientData("none"),
            ZeroWeight({"A": "x"}, 10),
        ],
    )
    def test_all_share_base(self, err):
        assert isinstance(err, BayesNetError)

    def test_builtin_bases(self):
        assert isinstance(UnknownVariable("A"), LookupError)
        assert isinstance(CycleDetected(["A", "A"]), ValueError)
        assert isinstance(ZeroWeight({}, 1), ArithmeticError)

    def test_unknown_variable_message_unquoted(self):
        assert str(UnknownVariable("Q")) == "Unknown variable 'Q'"

    def test_cycle_message(self):
        err = CycleDetected(["C", "A", "B", "C"])
        assert str(err) == "Adding edge closes the cycle C -> A -> B -> C"
        assert err.cycle == ["C", "A", "B", "C"]

    def test_incomplete_assignment_sorted(self):
        err = IncompleteAssignment("E", ["S", "A"])
        assert err.missing == ["A", "S"]
        assert "['A', 'S']" in str(err)
