from .base import CallableObjective, DifferentiableFunction
from .least_squares import LeastSquaresObjective
from .logistic import LogisticRegressionObjective
from .quadratic import QuadraticObjective
from .generators import make_sparse_problem, split_problem

__all__ = [
    'CallableObjective',
    'DifferentiableFunction',
    'LeastSquaresObjective',
    'LogisticRegressionObjective',
    'QuadraticObjective',
    'make_sparse_problem',
    'split_problem',
]
