"""Graph mutilation: the do-operator on a fitted network.

do(v = x) cuts every edge into v and replaces v's mechanism with a point
mass on x. This changes how data is generated, which is why it is a
different operation from conditioning on v = x as evidence.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .cpt import CPT
from .model import BayesianNetwork

logger = logging.getLogger(__name__)


def mutilate(model: BayesianNetwork, assignment: Mapping[str, str]) -> BayesianNetwork:
    """Return the intervened network for do(assignment).

    The source network is left unchanged; every table in the result is a
    copy.

    Raises:
        UnknownVariable: If an intervened variable is not in the model.
        UnknownCategory: If an intervention value is outside its domain.
    """
    dag = model.dag
    pinned = {name: CPT.point_mass(dag.variable(name), value) for name, value in assignment.items()}
    for name in pinned:
        dag.remove_incoming_edges(name)

    cpts = {
        name: pinned[name] if name in pinned else model.cpt(name).copy()
        for name in model.nodes
    }
    logger.info("Mutilated network: do(%s)", ", ".join(f"{k}={v}" for k, v in assignment.items()))
    return BayesianNetwork(dag, cpts)
