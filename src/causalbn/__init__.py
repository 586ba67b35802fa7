"""causalbn: discrete Bayesian networks as causal models.

Layers, leaf-first:
    CausalDAG            structure + acyclicity (networkx)
    is_d_separated       moralized ancestral graph test
    ConditionalIndependenceTester / DAGRefuter   G-test / chi-squared on data
    CPT + fit_bayesian   Dirichlet-smoothed parameter fitting
    sample               ancestral simulation
    query_distribution   likelihood-weighted inference
    mutilate             do-operator
"""

from .citest import (
    CITestResult,
    ConditionalIndependenceTester,
    DAGRefuter,
    RefutationResult,
)
from .cpt import CPT
from .dag import CausalDAG
from .dataset import Dataset
from .dispatch import CausalQueryEngine
from .dsep import DSeparationEngine, is_d_separated
from .errors import (
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
from .fit import fit, fit_bayesian, fit_mle, refit
from .inference import (
    Distribution,
    predict,
    prediction_accuracy,
    query_distribution,
    query_probability,
)
from .model import BayesianNetwork
from .mutilate import mutilate
from .sampling import sample, sample_dataset
from .types import (
    Assignment,
    CausalCapability,
    CausalQuery,
    IndependenceAssertion,
    QueryResult,
    QueryType,
    Variable,
)

__version__ = "0.1.0"

__all__ = [
    # Data model
    "Variable",
    "Assignment",
    "Dataset",
    "CausalDAG",
    "CPT",
    "BayesianNetwork",
    # Structure queries
    "is_d_separated",
    "DSeparationEngine",
    "IndependenceAssertion",
    # Data tests
    "ConditionalIndependenceTester",
    "CITestResult",
    "DAGRefuter",
    "RefutationResult",
    # Fitting
    "fit",
    "fit_bayesian",
    "fit_mle",
    "refit",
    # Simulation + inference
    "sample",
    "sample_dataset",
    "Distribution",
    "query_distribution",
    "query_probability",
    "predict",
    "prediction_accuracy",
    # Interventions
    "mutilate",
    "CausalQueryEngine",
    "CausalQuery",
    "QueryResult",
    "QueryType",
    "CausalCapability",
    # Errors
    "BayesNetError",
    "DuplicateVariable",
    "UnknownVariable",
    "UnknownCategory",
    "CycleDetected",
    "ShapeMismatch",
    "InvalidCPT",
    "IncompleteAssignment",
    "InsufficientData",
    "ZeroWeight",
]
