import numpy as np
from typing import Callable, Annotated, Optional, get_origin, get_args


def tunable_parameters(optimizer: Callable) -> dict:
    """Map each parameter annotated with an Interval to its (base type, Interval, default)."""
    import inspect
    sig = inspect.signature(optimizer)

    tunable = {}
    for param_name, param in sig.parameters.items():
        if param_name in ['fun', 'initial_guess', 'jac']:
            continue
        anno = param.annotation
        if get_origin(anno) is Annotated:
            args = get_args(anno)
            if len(args) >= 2 and isinstance(args[1], Interval):
                tunable[param_name] = (args[0], args[1], param.default)
    return tunable


def check_optimizer_annotations(optimizer: Callable):
    tunable = tunable_parameters(optimizer)
    if not tunable:
        raise ValueError(f"No Annotated parameters with Interval")

    for name, (_, interval, default) in tunable.items():
        if not interval.low <= default <= interval.high:
            raise ValueError(f"Default {default} of {name} lies outside [{interval.low}, {interval.high}]")


def check_optimizer_function(optimizer: Callable):
    from owlqn.objectives import LogisticRegressionObjective, make_sparse_problem

    n_dims = 10
    features, labels, _ = make_sparse_problem(n_samples=100, n_features=n_dims, n_informative=3, seed=0)
    objective = LogisticRegressionObjective(features, labels)
    result_x = optimizer(fun=objective, initial_guess=np.zeros(n_dims))
    result_f = objective.eval(result_x, np.zeros(n_dims))
    assert result_x is not None, f"Returned None"
    assert isinstance(result_x, np.ndarray), f"Didn't return numpy array"
    assert result_x.shape == (n_dims,), f"Returned wrong shape"

    # Check for inf values in result
    assert not np.any(np.isinf(result_x)), f"Returned inf values in x estimate"
    assert not np.any(np.isnan(result_x)), f"Returned NaN values in x estimate"

    # Check function value at result
    assert not np.isinf(result_f), f"Produced solution with inf function value"
    assert not np.isnan(result_f), f"Produced solution with NaN function value"


def finite_diff_grad(
    objective,
    x: np.ndarray,
    eps: Optional[float] = None
) -> np.ndarray:
    """Central-difference approximation of the gradient of `objective.eval`."""
    n = x.size
    grad = np.zeros(n, dtype=float)
    scratch = np.zeros(n, dtype=float)
    if eps is None:
        eps = np.sqrt(np.finfo(float).eps) * (1.0 + np.linalg.norm(x))
    for i in range(n):
        dx = np.zeros_like(x)
        dx[i] = eps
        f_plus = objective.eval(x + dx, scratch)
        f_minus = objective.eval(x - dx, scratch)
        grad[i] = (f_plus - f_minus) / (2 * eps)
    return grad


def check_gradient(objective, x: np.ndarray, eps: Optional[float] = None) -> float:
    """Max-norm difference between the analytic gradient and a finite-difference estimate."""
    x = np.asarray(x, dtype=float)
    analytic = np.zeros_like(x)
    objective.eval(x, analytic)
    return float(np.max(np.abs(analytic - finite_diff_grad(objective, x, eps))))


class Interval:
    """
    Optuna metadata class for use with parameter annotations using typing.Annotated
    Low and high are required, and must be numeric.
    Step is optional, and should be None if log=True.
    """
    def __init__(self, low: int | float, high: int | float, step: int | float | None=None, log: bool=False):
        self.low = low
        self.high = high
        self.step = step
        self.log = log
