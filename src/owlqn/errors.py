class OWLQNError(RuntimeError):
    """Base class for errors that abort an optimization run."""


class InvalidMemorySizeError(OWLQNError, ValueError):
    def __init__(self, m):
        self.m = m
        super().__init__(f"m must be an integer greater than zero, got {m!r}")


class NonDescentDirectionError(OWLQNError):
    """
    Raised when the line search is handed a direction along which the
    objective does not decrease. The most likely cause is a bug in the
    gradient computed by the objective.
    """
    def __init__(self, dir_deriv: float, iteration: int):
        self.dir_deriv = dir_deriv
        self.iteration = iteration
        super().__init__(
            f"L-BFGS chose a non-descent direction at iteration {iteration} "
            f"(directional derivative {dir_deriv:.4e}): check your gradient!"
        )
