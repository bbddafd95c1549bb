import numpy as np
import structlog
from typing import Iterator, List, Tuple

from owlqn.errors import InvalidMemorySizeError
from owlqn.optimizers.numeric.vector_ops import add_mult_into, dot_product

logger = structlog.get_logger(__name__)


class CurvatureHistory:
    """
    Bounded window of curvature pairs (s, y, rho) ordered oldest to newest.

    Slots are allocated on demand until `capacity` pairs are held; after
    that every new pair overwrites the storage of the oldest one, so the
    memory footprint stays at capacity * dim.

    Parameters
    ----------
    capacity : int
        Maximum number of pairs kept (the L-BFGS memory parameter m).
    dim : int
        Length of every stored vector.
    """
    def __init__(self, capacity: int, dim: int):
        if capacity <= 0:
            raise InvalidMemorySizeError(capacity)
        self.capacity = capacity
        self.dim = dim
        self._s: List[np.ndarray] = []
        self._y: List[np.ndarray] = []
        self._rho: List[float] = []
        self._start = 0  # slot holding the oldest pair

    def __len__(self) -> int:
        return len(self._s)

    def _slot(self, i: int) -> int:
        if not -len(self) <= i < len(self):
            raise IndexError(f"history index {i} out of range")
        return (self._start + i) % len(self._s)

    def __getitem__(self, i: int) -> Tuple[np.ndarray, np.ndarray, float]:
        j = self._slot(i)
        return self._s[j], self._y[j], self._rho[j]

    def __iter__(self) -> Iterator[Tuple[np.ndarray, np.ndarray, float]]:
        for i in range(len(self)):
            yield self[i]

    def s(self, i: int) -> np.ndarray:
        return self._s[self._slot(i)]

    def y(self, i: int) -> np.ndarray:
        return self._y[self._slot(i)]

    def rho(self, i: int) -> float:
        return self._rho[self._slot(i)]

    def _allocate_slot(self) -> int:
        """Return the slot index that will receive the next pair, or -1 if none is available."""
        size = len(self)
        if size < self.capacity:
            try:
                next_s = np.empty(self.dim, dtype=float)
                next_y = np.empty(self.dim, dtype=float)
            except MemoryError:
                logger.warning("history.memory_capped", requested=self.capacity, capped_to=size)
                self.capacity = size
            else:
                self._s.append(next_s)
                self._y.append(next_y)
                self._rho.append(0.0)
                return size

        if size == 0:
            return -1

        # full: recycle the oldest slot, which becomes the newest
        slot = self._start
        self._start = (self._start + 1) % size
        return slot

    def push(self, new_x: np.ndarray, x: np.ndarray, new_grad: np.ndarray, grad: np.ndarray) -> None:
        """Store s = new_x - x, y = new_grad - grad and rho = s . y as the newest pair."""
        slot = self._allocate_slot()
        if slot < 0:
            return
        s, y = self._s[slot], self._y[slot]
        add_mult_into(s, new_x, x, -1.0)
        add_mult_into(y, new_grad, grad, -1.0)
        rho = dot_product(s, y)
        if rho <= 0.0:
            logger.warning("history.nonpositive_curvature", rho=rho)
        self._rho[slot] = rho
