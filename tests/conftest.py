"""Shared fixtures.

Canonical DAGs: chain, fork, collider, and the six-node travel survey
[A][S][E|A,S][O|E][R|E][T|O,R] with hand-specified CPTs.
"""

from __future__ import annotations

import pytest

from causalbn.dag import CausalDAG
from causalbn.dataset import Dataset
from causalbn.model import BayesianNetwork
from causalbn.sampling import sample_dataset
from causalbn.types import Variable

BINARY = ("0", "1")

SURVEY_DOMAINS = {
    "A": ("young", "adult", "old"),
    "S": ("M", "F"),
    "E": ("high", "uni"),
    "O": ("emp", "self"),
    "R": ("small", "big"),
    "T": ("car", "train", "other"),
}

SURVEY_STRING = "[A][S][E|A:S][O|E][R|E][T|O:R]"

# Rows enumerate parent configurations with the first parent varying slowest.
SURVEY_TABLES = {
    "A": [[0.30, 0.50, 0.20]],
    "S": [[0.60, 0.40]],
    "E": [
        [0.75, 0.25],  # young, M
        [0.64, 0.36],  # young, F
        [0.72, 0.28],  # adult, M
        [0.70, 0.30],  # adult, F
        [0.88, 0.12],  # old, M
        [0.90, 0.10],  # old, F
    ],
    "O": [
        [0.96, 0.04],  # high
        [0.92, 0.08],  # uni
    ],
    "R": [
        [0.25, 0.75],  # high
        [0.20, 0.80],  # uni
    ],
    "T": [
        [0.48, 0.42, 0.10],  # emp, small
        [0.58, 0.24, 0.18],  # emp, big
        [0.56, 0.36, 0.08],  # self, small
        [0.70, 0.21, 0.09],  # self, big
    ],
}


def make_dag(edges: list[tuple[str, str]], nodes: list[str] | None = None) -> CausalDAG:
    """Binary-variable DAG from an edge list."""
    names = nodes or sorted({n for e in edges for n in e})
    return CausalDAG.from_edges([Variable(n, BINARY) for n in names], edges)


# =============================================================================
# DAG fixtures
# =============================================================================


@pytest.fixture
def chain_dag() -> CausalDAG:
    """A → B → C"""
    return make_dag([("A", "B"), ("B", "C")])


@pytest.fixture
def fork_dag() -> CausalDAG:
    """B → A, B → C (B is a common cause)"""
    return make_dag([("B", "A"), ("B", "C")])


@pytest.fixture
def collider_dag() -> CausalDAG:
    """A → B, C → B (B is a collider)"""
    return make_dag([("A", "B"), ("C", "B")])


@pytest.fixture
def sprinkler_dag() -> CausalDAG:
    """Season → Rain, Season → Sprinkler, Rain → Wet, Sprinkler → Wet"""
    return make_dag(
        [
            ("Season", "Rain"),
            ("Season", "Sprinkler"),
            ("Rain", "Wet"),
            ("Sprinkler", "Wet"),
        ]
    )


@pytest.fixture
def survey_dag() -> CausalDAG:
    return CausalDAG.from_model_string(SURVEY_STRING, SURVEY_DOMAINS)


# =============================================================================
# Model / data fixtures
# =============================================================================


@pytest.fixture
def survey_model(survey_dag) -> BayesianNetwork:
    return BayesianNetwork.from_tables(survey_dag, SURVEY_TABLES)


@pytest.fixture(scope="session")
def survey_data() -> Dataset:
    """5000 seeded draws from the hand-specified survey network."""
    dag = CausalDAG.from_model_string(SURVEY_STRING, SURVEY_DOMAINS)
    model = BayesianNetwork.from_tables(dag, SURVEY_TABLES)
    return sample_dataset(model, 5000, seed=2024)
