import math
from collections import deque
from typing import Protocol, Tuple, runtime_checkable


@runtime_checkable
class TerminationCriterion(Protocol):
    """
    Decides when an optimization run has converged.

    `get_value` is called once with the initial state and then once per
    iteration after the line search. It returns the convergence signal
    (the run stops when it falls below the tolerance) and a short status
    message for the progress table.
    """
    def get_value(self, state) -> Tuple[float, str]:
        ...


class RelativeMeanImprovementCriterion:
    """
    Mean improvement of the objective over a sliding window, relative to the
    current objective value.

    Parameters
    ----------
    num_iters_to_avg : int
        The signal is infinite until more than this many values have been
        recorded. The window holds twice as many values.
    """
    def __init__(self, num_iters_to_avg: int = 5):
        self.num_iters_to_avg = num_iters_to_avg
        self.window_size = 2 * num_iters_to_avg
        self.prev_vals = deque()

    def get_value(self, state) -> Tuple[float, str]:
        value = state.value
        ret_val = math.inf

        if len(self.prev_vals) > self.num_iters_to_avg:
            if len(self.prev_vals) == self.window_size:
                self.prev_vals.popleft()
            average_improvement = (self.prev_vals[0] - value) / len(self.prev_vals)
            if value != 0:
                ret_val = average_improvement / abs(value)
            elif average_improvement == 0:
                ret_val = 0.0
            message = f"  ({ret_val:10.4e}) "
        else:
            message = f"  (wait for {self.num_iters_to_avg} iters) "

        self.prev_vals.append(value)
        return ret_val, message
