import numpy as np
from typing import Optional


class QuadraticObjective:
    """
    f(x) = 0.5 * |x - center|^2 + offset

    With an L1 weight `lam` the regularized minimizer is the soft-threshold
    sign(center) * max(|center| - lam, 0).
    """
    def __init__(self, center: Optional[np.ndarray] = None, offset: float = 0.0):
        self.center = None if center is None else np.asarray(center, dtype=float)
        self.offset = offset

    def eval(self, x, gradient):
        diff = x if self.center is None else x - self.center
        gradient[:] = diff
        return 0.5 * float(np.dot(diff, diff)) + self.offset
