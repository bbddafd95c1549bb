import numpy as np
from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class DifferentiableFunction(Protocol):
    """
    Smooth objective evaluated by the optimizer.

    `eval` returns the loss at `x` and writes its gradient into the
    caller-provided `gradient` buffer. Any L1 penalty is added by the
    optimizer and must not be included here.
    """
    def eval(self, x: np.ndarray, gradient: np.ndarray) -> float:
        ...


class CallableObjective:
    """Adapts a loss function and its gradient function to the `eval` protocol."""

    def __init__(self, fun: Callable[[np.ndarray], float], jac: Callable[[np.ndarray], np.ndarray]):
        self.fun = fun
        self.jac = jac

    def eval(self, x, gradient):
        gradient[:] = self.jac(x)
        return float(self.fun(x))
