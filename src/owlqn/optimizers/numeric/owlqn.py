import numpy as np
import structlog
from typing import Annotated, Callable, Optional

from owlqn.objectives import CallableObjective, DifferentiableFunction
from owlqn.optimizers.numeric.direction import (
    dir_deriv,
    fix_dir_signs,
    get_next_point,
    make_steepest_desc_dir,
    map_dir_by_inverse_hessian,
)
from owlqn.optimizers.numeric.history import CurvatureHistory
from owlqn.optimizers.numeric.line_search import backtracking_line_search
from owlqn.optimizers.numeric.termination import RelativeMeanImprovementCriterion, TerminationCriterion
from owlqn.optimizers.numeric.vector_ops import dot_product
from owlqn.reporting import ConsoleReporter, NullReporter, Reporter
from owlqn.utils import Interval

logger = structlog.get_logger(__name__)


class OptimizerState:
    """
    Working state of one OWL-QN run.

    `x`/`grad` are the last accepted point and its gradient, `new_x`/`new_grad`
    the candidate produced by the line search. The pseudo-gradient is kept in
    the `new_grad` buffer, which is free between the sign fix and the line
    search.

    Parameters
    ----------
    func : DifferentiableFunction
        Smooth part of the objective. Not owned by the state.
    initial : np.ndarray
        Starting point.
    m : int
        L-BFGS memory parameter.
    l1_weight : float
        Weight of the L1 penalty.
    """
    def __init__(self, func: DifferentiableFunction, initial: np.ndarray, m: int, l1_weight: float):
        initial = np.asarray(initial, dtype=float)
        self.dim = initial.size
        self.func = func
        self.l1_weight = l1_weight
        self.history = CurvatureHistory(m, self.dim)
        self.alphas = np.zeros(m, dtype=float)
        self.iteration = 1

        self.x = initial.copy()
        self.new_x = initial.copy()
        self.grad = np.zeros(self.dim, dtype=float)
        self.new_grad = np.zeros(self.dim, dtype=float)
        self.dir = np.zeros(self.dim, dtype=float)

        self.value = self.eval_l1()
        self.grad[:] = self.new_grad

    @property
    def m(self) -> int:
        return self.history.capacity

    @property
    def steepest_desc_dir(self) -> np.ndarray:
        return self.new_grad

    def eval_l1(self) -> float:
        """Evaluate loss + L1 penalty at new_x, filling new_grad with the smooth gradient."""
        value = float(self.func.eval(self.new_x, self.new_grad))
        if self.l1_weight > 0:
            value += self.l1_weight * float(np.sum(np.abs(self.new_x)))
        return value

    def make_steepest_desc_dir(self) -> None:
        make_steepest_desc_dir(self.dir, self.grad, self.x, self.l1_weight)
        self.steepest_desc_dir[:] = self.dir

    def update_dir(self) -> None:
        self.make_steepest_desc_dir()
        map_dir_by_inverse_hessian(self.dir, self.history, self.alphas)
        fix_dir_signs(self.dir, self.steepest_desc_dir, self.l1_weight)

    def is_stationary(self) -> bool:
        """True when zero lies in the subdifferential at x, i.e. the pseudo-gradient vanishes."""
        return not np.any(self.steepest_desc_dir)

    def dir_deriv(self) -> float:
        return dir_deriv(self.dir, self.grad, self.x, self.l1_weight)

    def test_dir_deriv(self):
        """Compare a finite-difference directional derivative with the analytic one."""
        dir_norm = np.sqrt(dot_product(self.dir, self.dir))
        eps = 1.05e-8 / dir_norm
        get_next_point(self.new_x, self.x, self.dir, eps, self.l1_weight)
        val2 = self.eval_l1()
        num_deriv = (val2 - self.value) / eps
        return num_deriv, self.dir_deriv()

    def shift(self) -> None:
        """Record the accepted step in the history and make the candidate the current point."""
        self.history.push(self.new_x, self.x, self.new_grad, self.grad)
        self.x, self.new_x = self.new_x, self.x
        self.grad, self.new_grad = self.new_grad, self.grad
        self.iteration += 1


class OWLQN:
    """
    Orthant-Wise Limited-memory Quasi-Newton minimizer for
    f(x) + l1_weight * |x|_1 with f convex and differentiable.

    Parameters
    ----------
    termination : TerminationCriterion, optional
        Convergence test; defaults to RelativeMeanImprovementCriterion(5).
        A fresh default criterion is created for every run.
    reporter : Reporter, optional
        Receives progress output. Defaults to a ConsoleReporter unless quiet.
    quiet : bool
        Suppress progress output.
    check_gradient : bool
        Compare numeric and analytic directional derivatives every iteration.
    """
    def __init__(self,
                 termination: Optional[TerminationCriterion] = None,
                 reporter: Optional[Reporter] = None,
                 quiet: bool = False,
                 check_gradient: bool = False):
        self.termination = termination
        self.reporter = reporter
        self.quiet = quiet
        self.check_gradient = check_gradient

    def _reporter(self) -> Reporter:
        if self.quiet:
            return NullReporter()
        return self.reporter if self.reporter is not None else ConsoleReporter()

    def minimize(self,
                 function: DifferentiableFunction,
                 initial: np.ndarray,
                 l1_weight: float = 1.0,
                 tol: float = 1e-4,
                 m: int = 10) -> np.ndarray:
        """
        Minimize `function` + l1_weight * |x|_1 starting from `initial`.

        Raises InvalidMemorySizeError when m <= 0 and NonDescentDirectionError
        when the gradient supplied by `function` is inconsistent.
        """
        state = OptimizerState(function, initial, m, l1_weight)
        term_crit = self.termination if self.termination is not None else RelativeMeanImprovementCriterion(5)
        reporter = self._reporter()

        logger.info("owlqn.start", dim=state.dim, l1_weight=l1_weight, m=m, tol=tol, value=state.value)
        reporter.start(state, l1_weight, m, tol)
        term_crit.get_value(state)

        while True:
            state.update_dir()
            if state.is_stationary():
                # every coordinate is optimal; state.x is the minimizer
                logger.info("owlqn.converged", iteration=state.iteration, value=state.value, reason="stationary")
                state.new_x[:] = state.x
                break

            if self.check_gradient:
                num_deriv, deriv = state.test_dir_deriv()
                logger.debug("owlqn.gradient_check", iteration=state.iteration, numeric=num_deriv, analytic=deriv)
                reporter.gradient_check(num_deriv, deriv)

            backtracking_line_search(state, reporter)

            term_crit_val, message = term_crit.get_value(state)
            reporter.iteration(state, message)
            logger.debug("owlqn.iteration", iteration=state.iteration, value=state.value, criterion=term_crit_val)
            if term_crit_val < tol:
                logger.info("owlqn.converged", iteration=state.iteration, value=state.value, criterion=term_crit_val)
                break

            state.shift()

        reporter.finish(state)
        return state.new_x.copy()


def minimize_owlqn(
    fun,
    initial_guess: np.ndarray,
    jac: Optional[Callable[[np.ndarray], np.ndarray]] = None,
    l1_weight: Annotated[float, Interval(low=1e-3, high=10.0, log=True)] = 1.0,
    tol: float = 1e-4,
    m: Annotated[int, Interval(low=2, high=30)] = 10,
    termination: Optional[TerminationCriterion] = None,
    reporter: Optional[Reporter] = None,
    quiet: bool = True,
) -> np.ndarray:
    """
    OWL-QN optimizer for L1-regularized smooth objectives.

    Parameters
    ----------
    fun : DifferentiableFunction or Callable[[np.ndarray], float]
        Smooth part of the objective. Either an object with
        `eval(x, gradient) -> float` or a plain function of x, in which case
        `jac` must be given.
    initial_guess : np.ndarray
        Starting point.
    jac : Callable[[np.ndarray], np.ndarray], optional
        Gradient of `fun` when `fun` is a plain function.
    l1_weight : float
        Weight of the L1 penalty; 0 gives plain L-BFGS.
    tol : float
        Tolerance on the relative mean improvement of the objective.
    m : int
        History size (number of (s,y) pairs to keep).
    termination : TerminationCriterion, optional
        Replaces the default relative mean improvement criterion.
    reporter : Reporter, optional
        Progress output sink, only used when quiet is False.
    quiet : bool
        Suppress progress output.

    Returns
    -------
    x : np.ndarray
        The approximate minimizer.
    """
    if not hasattr(fun, "eval"):
        if jac is None:
            raise TypeError("a gradient function `jac` is required when `fun` is a plain callable")
        fun = CallableObjective(fun, jac)

    optimizer = OWLQN(termination=termination, reporter=reporter, quiet=quiet)
    return optimizer.minimize(fun, initial_guess, l1_weight=l1_weight, tol=tol, m=m)


def minimize_lbfgs(
    fun,
    initial_guess: np.ndarray,
    jac: Optional[Callable[[np.ndarray], np.ndarray]] = None,
    tol: float = 1e-4,
    m: Annotated[int, Interval(low=2, high=30)] = 10,
    quiet: bool = True,
) -> np.ndarray:
    """
    Limited-memory BFGS (L-BFGS) optimizer: OWL-QN without the L1 penalty.
    """
    return minimize_owlqn(fun, initial_guess, jac=jac, l1_weight=0.0, tol=tol, m=m, quiet=quiet)
