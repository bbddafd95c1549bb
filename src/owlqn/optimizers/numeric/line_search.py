import numpy as np

from owlqn.errors import NonDescentDirectionError
from owlqn.optimizers.numeric.direction import dir_deriv, get_next_point
from owlqn.reporting import NullReporter

C1 = 1e-4
BACKOFF = 0.5
FIRST_ITER_BACKOFF = 0.1


def backtracking_line_search(state, reporter=None) -> float:
    """
    Backtracking-Armijo line search along `state.dir` that stays in the
    current orthant:
      find alpha in {alpha0 * backoff^k} such that
      f(P(x + alpha dir)) <= f(x) + c1 * alpha * f'(x; dir)

    On the first iteration there is no curvature information yet, so the
    search starts from a unit-length step and backs off faster.

    Updates state.new_x, state.new_grad and state.value in place and
    returns the accepted step length.
    """
    reporter = reporter or NullReporter()

    orig_dir_deriv = dir_deriv(state.dir, state.grad, state.x, state.l1_weight)
    # the search below cannot terminate from a non-descent direction
    if orig_dir_deriv >= 0:
        raise NonDescentDirectionError(orig_dir_deriv, state.iteration)

    alpha = 1.0
    backoff = BACKOFF
    if state.iteration == 1:
        alpha = 1.0 / np.linalg.norm(state.dir)
        backoff = FIRST_ITER_BACKOFF

    old_value = state.value
    while True:
        get_next_point(state.new_x, state.x, state.dir, alpha, state.l1_weight)
        state.value = state.eval_l1()
        if state.value <= old_value + C1 * orig_dir_deriv * alpha:
            break
        reporter.backtrack()
        alpha *= backoff

    reporter.line_search_done()
    return alpha
