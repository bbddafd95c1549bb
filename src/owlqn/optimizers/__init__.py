from .numeric import *

__all__ = []

from owlqn.optimizers.numeric import __all__ as numeric_all
__all__.extend(numeric_all)

# Create a mapping of optimizer names to functions
OPTIMIZERS = {}

# Build the mapping from the imported functions
for name in __all__:
    if name.startswith('minimize_'):
        OPTIMIZERS[name] = globals()[name]

# from owlqn.optimizers import minimize_owlqn, minimize_lbfgs
# Or access the mapping: from owlqn.optimizers import OPTIMIZERS
