"""Tests for ancestral sampling."""

import types

import numpy as np
import pytest

from causalbn.model import BayesianNetwork
from causalbn.sampling import draw_category, sample, sample_dataset

from conftest import make_dag


class TestSample:
    def test_returns_lazy_iterator(self, survey_model):
        draws = sample(survey_model, 3, seed=1)
        assert isinstance(draws, types.GeneratorType)
        assert len(list(draws)) == 3

    def test_full_assignments_within_domains(self, survey_model):
        for row in sample(survey_model, 50, seed=3):
            assert set(row) == set(survey_model.nodes)
            for name, value in row.items():
                assert value in survey_model.variable(name).domain

    def test_same_seed_same_draws(self, survey_model):
        first = list(sample(survey_model, 200, seed=11))
        second = list(sample(survey_model, 200, seed=11))
        assert first == second

    def test_different_seed_different_draws(self, survey_model):
        assert list(sample(survey_model, 200, seed=11)) != list(sample(survey_model, 200, seed=12))

    def test_generator_argument(self, survey_model):
        a = list(sample(survey_model, 20, rng=np.random.default_rng(5)))
        b = list(sample(survey_model, 20, seed=5))
        assert a == b

    def test_zero_draws(self, survey_model):
        assert list(sample(survey_model, 0, seed=1)) == []

    def test_negative_n(self, survey_model):
        with pytest.raises(ValueError):
            sample(survey_model, -1)

    def test_deterministic_tables(self):
        dag = make_dag([("A", "B")])
        model = BayesianNetwork.from_tables(dag, {"A": [[0.0, 1.0]], "B": [[1.0, 0.0], [0.0, 1.0]]})
        assert all(row == {"A": "1", "B": "1"} for row in sample(model, 100, seed=0))

    def test_frequencies_match_tables(self, survey_model):
        draws = list(sample(survey_model, 20_000, seed=99))
        freq = sum(row["A"] == "adult" for row in draws) / len(draws)
        assert freq == pytest.approx(0.5, abs=0.02)
        uni = [row for row in draws if row["E"] == "uni"]
        big = sum(row["R"] == "big" for row in uni) / len(uni)
        assert big == pytest.approx(0.8, abs=0.03)


class TestSampleDataset:
    def test_keeps_model_domains(self, survey_model):
        data = sample_dataset(survey_model, 5, seed=1)
        assert data.n_rows == 5
        assert data.columns == survey_model.nodes
        assert data.variable("T").domain == ("car", "train", "other")

    def test_matches_iterator(self, survey_model):
        data = sample_dataset(survey_model, 30, seed=8)
        assert list(data.rows()) == list(sample(survey_model, 30, seed=8))


class TestDrawCategory:
    def test_point_mass(self):
        rng = np.random.default_rng(0)
        assert {draw_category(np.array([0.0, 0.0, 1.0]), rng) for _ in range(50)} == {2}

    def test_never_picks_zero_probability(self):
        rng = np.random.default_rng(0)
        drawn = {draw_category(np.array([0.5, 0.0, 0.5]), rng) for _ in range(500)}
        assert drawn == {0, 2}
