"""Orthant-Wise Limited-memory Quasi-Newton (OWL-QN) for L1-regularized convex problems."""
from owlqn.errors import InvalidMemorySizeError, NonDescentDirectionError, OWLQNError
from owlqn.optimizers.numeric.owlqn import OWLQN, OptimizerState, minimize_lbfgs, minimize_owlqn
from owlqn.optimizers.numeric.termination import RelativeMeanImprovementCriterion, TerminationCriterion
from owlqn.reporting import ConsoleReporter, NullReporter

__all__ = [
    'OWLQN',
    'OptimizerState',
    'minimize_owlqn',
    'minimize_lbfgs',
    'RelativeMeanImprovementCriterion',
    'TerminationCriterion',
    'ConsoleReporter',
    'NullReporter',
    'OWLQNError',
    'InvalidMemorySizeError',
    'NonDescentDirectionError',
]
