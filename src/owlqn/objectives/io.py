"""Matrix Market input of training problems and output of weight vectors."""
import os
import numpy as np
from scipy import io as spio
from scipy import sparse

from owlqn.objectives.least_squares import LeastSquaresObjective
from owlqn.objectives.logistic import LogisticRegressionObjective


def read_matrix(path: os.PathLike):
    """Read a Matrix Market file; coordinate files become CSR matrices, array files dense arrays."""
    try:
        matrix = spio.mmread(os.fspath(path))
    except (OSError, ValueError) as e:
        raise ValueError(f"unsupported matrix file format in {path}: {e}") from e
    if sparse.issparse(matrix):
        return sparse.csr_matrix(matrix, dtype=float)
    return np.asarray(matrix, dtype=float)


def read_column(path: os.PathLike, n_rows: int) -> np.ndarray:
    column = read_matrix(path)
    if sparse.issparse(column):
        raise ValueError(f"unsupported label file format in {path}: expected a dense array")
    if column.ndim != 2 or column.shape[1] != 1:
        raise ValueError(f"label matrix may not have more than one column in {path}")
    if column.shape[0] != n_rows:
        raise ValueError(f"number of labels doesn't match number of instances in {path}")
    return column[:, 0]


def load_problem(feature_file: os.PathLike, label_file: os.PathLike, least_squares: bool = False):
    """Return the (features, labels) pair stored in two Matrix Market files."""
    features = read_matrix(feature_file)
    labels = read_column(label_file, features.shape[0])
    if not least_squares and not np.all(np.isin(labels, (1.0, -1.0))):
        raise ValueError(f"illegal label in {label_file}: must be 1 or -1")
    return features, labels


def build_objective(features, labels, least_squares: bool = False, l2_weight: float = 0.0):
    if least_squares:
        return LeastSquaresObjective(features, labels, l2_weight=l2_weight)
    return LogisticRegressionObjective(features, labels, l2_weight=l2_weight)


def write_weights(path: os.PathLike, weights: np.ndarray) -> None:
    """Write `weights` as a 1 x n Matrix Market real array."""
    with open(path, "wb") as f:
        spio.mmwrite(f, np.asarray(weights, dtype=float).reshape(1, -1))
