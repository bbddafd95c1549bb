"""
Search direction for OWL-QN.

The direction starts from the orthant-wise pseudo-gradient, is mapped through
the L-BFGS approximation of the inverse Hessian, and is finally constrained
to the orthant the pseudo-gradient selected.
"""
import numpy as np

from owlqn.optimizers.numeric.history import CurvatureHistory
from owlqn.optimizers.numeric.vector_ops import add_mult, add_mult_into, dot_product, scale, scale_into


def make_steepest_desc_dir(direction: np.ndarray, grad: np.ndarray, x: np.ndarray, l1_weight: float) -> None:
    """
    Write the negative pseudo-gradient of loss + l1_weight * |x|_1 into `direction`.

    Away from zero the L1 term is differentiable and contributes
    sign(x_i) * l1_weight. At x_i == 0 the one-sided derivative that allows
    descent is used, or 0 when zero lies in the subdifferential.
    """
    if l1_weight == 0:
        scale_into(direction, grad, -1.0)
        return

    left = -grad + l1_weight   # from the derivative grad - l1_weight
    right = -grad - l1_weight  # from the derivative grad + l1_weight
    at_zero = x == 0
    direction[:] = np.select(
        [x < 0, x > 0, at_zero & (grad < -l1_weight), at_zero & (grad > l1_weight)],
        [left, right, right, left],
        default=0.0,
    )


def map_dir_by_inverse_hessian(direction: np.ndarray, history: CurvatureHistory, alphas: np.ndarray) -> None:
    """
    L-BFGS two-loop recursion applied to `direction` in place.

    rho_i = s_i . y_i is stored uninverted, so it appears as a divisor. The
    alpha coefficients are stored negated.
    """
    count = len(history)
    if count == 0:
        return

    for i in range(count - 1, -1, -1):
        s, y, rho = history[i]
        alphas[i] = -dot_product(s, direction) / rho
        add_mult(direction, y, alphas[i])

    _, last_y, last_rho = history[count - 1]
    scale(direction, last_rho / dot_product(last_y, last_y))

    for i in range(count):
        s, y, rho = history[i]
        beta = dot_product(y, direction) / rho
        add_mult(direction, s, -alphas[i] - beta)


def fix_dir_signs(direction: np.ndarray, steepest_desc_dir: np.ndarray, l1_weight: float) -> None:
    """Zero every component of `direction` that leaves the orthant chosen by the pseudo-gradient."""
    if l1_weight > 0:
        direction[direction * steepest_desc_dir <= 0] = 0.0


def dir_deriv(direction: np.ndarray, grad: np.ndarray, x: np.ndarray, l1_weight: float) -> float:
    """Directional derivative of loss + l1_weight * |x|_1 at `x` along `direction`."""
    if l1_weight == 0:
        return dot_product(direction, grad)

    at_zero = x == 0
    use_left = (x < 0) | (at_zero & (direction < 0))
    use_right = (x > 0) | (at_zero & (direction > 0))
    contributions = np.where(
        use_left,
        direction * (grad - l1_weight),
        np.where(use_right, direction * (grad + l1_weight), 0.0),
    )
    return float(np.sum(contributions[direction != 0]))


def get_next_point(new_x: np.ndarray, x: np.ndarray, direction: np.ndarray, alpha: float, l1_weight: float) -> None:
    """new_x = x + alpha * direction, clamping coordinates that would change sign to exactly 0."""
    add_mult_into(new_x, x, direction, alpha)
    if l1_weight > 0:
        new_x[x * new_x < 0.0] = 0.0
