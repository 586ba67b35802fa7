"""Tests for CausalQueryEngine."""

import pytest

from causalbn.config import EngineSettings
from causalbn.dispatch import CausalQueryEngine
from causalbn.types import CausalCapability, CausalQuery, QueryType


@pytest.fixture
def engine(survey_model):
    return CausalQueryEngine(model=survey_model, n_samples=20_000, seed=7)


class TestCapabilities:
    def test_supported(self, engine):
        assert engine.has_capability(CausalCapability.D_SEPARATION)
        assert engine.has_capability(CausalCapability.PROBABILISTIC_INFERENCE)
        assert engine.has_capability(CausalCapability.INTERVENTION)

    def test_counterfactual_not_supported(self, engine):
        assert not engine.has_capability(CausalCapability.COUNTERFACTUAL)


class TestQuery:
    def test_observational(self, engine):
        cq = CausalQuery(QueryType.OBSERVATIONAL, "T", evidence={"E": "uni"})
        result = engine.query(cq)
        assert result.query is cq
        assert set(result.distribution) == {"car", "train", "other"}
        assert sum(result.distribution.values()) == pytest.approx(1.0)
        assert result.n_samples == 20_000
        assert result.capabilities_used == ["probabilistic_inference"]

    def test_interventional(self, engine):
        cq = CausalQuery(QueryType.INTERVENTIONAL, "O", interventions={"E": "uni"})
        result = engine.query(cq)
        assert result.distribution["emp"] == pytest.approx(0.92, abs=0.01)
        assert result.capabilities_used == ["intervention", "probabilistic_inference"]
        assert result.most_likely == "emp"

    def test_interventional_leaves_model_untouched(self, engine, survey_model):
        engine.query(CausalQuery(QueryType.INTERVENTIONAL, "T", interventions={"R": "small"}))
        assert engine.model.parents("R") == ["E"]

    def test_observational_with_interventions_rejected(self, engine):
        cq = CausalQuery(QueryType.OBSERVATIONAL, "T", interventions={"R": "small"})
        with pytest.raises(ValueError, match="interventions"):
            engine.query(cq)

    def test_counterfactual_raises(self, engine):
        cq = CausalQuery(QueryType.COUNTERFACTUAL, "T")
        with pytest.raises(NotImplementedError):
            engine.query(cq)

    def test_seeded_engines_agree(self, survey_model):
        cq = CausalQuery(QueryType.OBSERVATIONAL, "T", evidence={"A": "old"})
        a = CausalQueryEngine(survey_model, n_samples=500, seed=3).query(cq)
        b = CausalQueryEngine(survey_model, n_samples=500, seed=3).query(cq)
        assert a.distribution == b.distribution


class TestHelpers:
    def test_intervention_effects(self, engine):
        effects = engine.intervention_effects("T", "R")
        assert set(effects) == {"small", "big"}
        # P(T=car | do(R=big)) > P(T=car | do(R=small)) in both occupations
        assert effects["big"]["car"] > effects["small"]["car"]

    def test_d_separation(self, engine):
        assertion = engine.is_d_separated("T", "E", {"O", "R"})
        assert assertion.is_independent is True

    def test_from_settings(self, survey_model):
        settings = EngineSettings(n_samples=123, seed=5)
        engine = CausalQueryEngine.from_settings(survey_model, settings)
        assert engine.n_samples == 123
        assert engine.seed == 5
