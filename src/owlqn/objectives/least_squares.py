import numpy as np
from scipy import sparse


class LeastSquaresObjective:
    """
    value(w) = 0.5 * (l2_weight * |w|^2 + |A w - b|^2) + 1
    """
    def __init__(self, features, targets, l2_weight: float = 0.0):
        self.features = sparse.csr_matrix(features) if sparse.issparse(features) else np.asarray(features, dtype=float)
        self.targets = np.asarray(targets, dtype=float).ravel()
        if self.targets.size != self.features.shape[0]:
            raise ValueError("number of y-values doesn't match number of instances")
        self.l2_weight = l2_weight

    @property
    def num_feats(self) -> int:
        return self.features.shape[1]

    @property
    def num_instances(self) -> int:
        return self.features.shape[0]

    def eval(self, x, gradient):
        if x.size != self.num_feats:
            raise ValueError(f"input has {x.size} entries, expected {self.num_feats}")
        residual = self.features @ x - self.targets
        value = self.l2_weight * float(np.dot(x, x)) + float(np.dot(residual, residual))
        gradient[:] = self.l2_weight * x + self.features.T @ residual
        return 0.5 * value + 1.0
