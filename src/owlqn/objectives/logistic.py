import numpy as np
from scipy import sparse
from scipy.special import expit


class LogisticRegressionObjective:
    """
    Logistic loss of a linear model with an optional L2 penalty.

    loss(w) = 1 + 0.5 * l2_weight * |w|^2 + sum_i log(1 + exp(-y_i * a_i . w))

    Parameters
    ----------
    features : np.ndarray or scipy.sparse matrix
        Instance-by-feature matrix A.
    labels : np.ndarray
        One label per instance, either +1/-1 or boolean.
    l2_weight : float
        Weight of the L2 penalty.
    """
    def __init__(self, features, labels, l2_weight: float = 0.0):
        self.features = sparse.csr_matrix(features) if sparse.issparse(features) else np.asarray(features, dtype=float)
        labels = np.asarray(labels).ravel()
        if labels.dtype == bool:
            self.labels = np.where(labels, 1.0, -1.0)
        else:
            self.labels = labels.astype(float)
        if not np.all(np.isin(self.labels, (1.0, -1.0))):
            raise ValueError("illegal label: must be 1 or -1")
        if self.labels.size != self.features.shape[0]:
            raise ValueError("number of labels doesn't match number of instances")
        self.l2_weight = l2_weight

    @property
    def num_feats(self) -> int:
        return self.features.shape[1]

    @property
    def num_instances(self) -> int:
        return self.features.shape[0]

    def scores(self, weights: np.ndarray) -> np.ndarray:
        # y_i * (a_i . w)
        return self.labels * (self.features @ weights)

    def eval(self, x, gradient):
        scores = self.scores(x)
        loss = 1.0 + 0.5 * self.l2_weight * float(np.dot(x, x)) + float(np.sum(np.logaddexp(0.0, -scores)))

        # derivative of each instance loss with respect to its margin a_i . w
        mult = -self.labels * (1.0 - expit(scores))
        gradient[:] = self.l2_weight * x + self.features.T @ mult
        return loss
