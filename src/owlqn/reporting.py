"""Progress reporters written to by the OWL-QN driver loop."""
import click
from typing import Protocol


class Reporter(Protocol):
    def start(self, state, l1_weight: float, m: int, tol: float) -> None: ...

    def backtrack(self) -> None: ...

    def line_search_done(self) -> None: ...

    def gradient_check(self, numeric: float, analytic: float) -> None: ...

    def iteration(self, state, message: str) -> None: ...

    def finish(self, state) -> None: ...


class NullReporter:
    """Discards all progress output."""

    def start(self, state, l1_weight, m, tol):
        pass

    def backtrack(self):
        pass

    def line_search_done(self):
        pass

    def gradient_check(self, numeric, analytic):
        pass

    def iteration(self, state, message):
        pass

    def finish(self, state):
        pass


class ConsoleReporter:
    """
    Prints the iteration table to the terminal.

    Each row shows the objective value after the line search and the
    termination signal; the dots that follow are the backtracking steps of
    the next line search.
    """
    def __init__(self, err: bool = False):
        self.err = err

    def _echo(self, text: str = "", nl: bool = True):
        click.echo(text, nl=nl, err=self.err)

    def start(self, state, l1_weight, m, tol):
        self._echo()
        self._echo(f"Optimizing function of {state.dim} variables with OWL-QN parameters:")
        self._echo(f"   l1 regularization weight: {l1_weight:.4e}.")
        self._echo(f"   L-BFGS memory parameter (m): {m}")
        self._echo(f"   Convergence tolerance: {tol:.4e}")
        self._echo()
        self._echo("Iter    n:  new_value    (conv_crit)   line_search")
        self._echo(f"Iter    0:  {state.value:10.4e}  (***********) ", nl=False)

    def backtrack(self):
        self._echo(".", nl=False)

    def line_search_done(self):
        self._echo()

    def gradient_check(self, numeric, analytic):
        self._echo(f"  Grad check: {numeric:.4e} vs. {analytic:.4e}  ", nl=False)

    def iteration(self, state, message):
        self._echo(f"Iter {state.iteration:4d}:  {state.value:10.4e}{message}", nl=False)

    def finish(self, state):
        self._echo()
