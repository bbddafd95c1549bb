from .owlqn import minimize_owlqn as minimize_owlqn
from .owlqn import minimize_lbfgs as minimize_lbfgs

__all__ = [
    'minimize_owlqn',
    'minimize_lbfgs',
]
