import numpy as np
from scipy import sparse
from typing import Optional, Tuple


def generate_sparse_weights(n_features: int, n_informative: int, rng: np.random.Generator) -> np.ndarray:
    weight_range = (1.0, 3.0)
    weights = np.zeros(n_features)
    support = rng.choice(n_features, size=min(n_informative, n_features), replace=False)
    magnitudes = rng.uniform(*weight_range, size=support.size)
    weights[support] = magnitudes * rng.choice([-1.0, 1.0], size=support.size)
    return weights


def make_sparse_problem(n_samples: int = 200,
                        n_features: int = 50,
                        n_informative: int = 5,
                        kind: str = "logistic",
                        density: Optional[float] = None,
                        noise: float = 0.1,
                        seed: Optional[int] = None) -> Tuple[object, np.ndarray, np.ndarray]:
    """
    Random linear problem whose ground-truth weights are sparse.

    Parameters
    ----------
    kind : str
        "logistic" draws +1/-1 labels from the logistic model,
        "least_squares" draws real targets with Gaussian noise.
    density : float, optional
        When given, the feature matrix is a scipy CSR matrix with this
        fraction of non-zeros; otherwise it is dense.

    Returns
    -------
    features, labels, true_weights
    """
    rng = np.random.default_rng(seed)
    if density is None:
        features = rng.standard_normal((n_samples, n_features))
    else:
        mask = rng.random((n_samples, n_features)) < density
        features = sparse.csr_matrix(rng.standard_normal((n_samples, n_features)) * mask)
    true_weights = generate_sparse_weights(n_features, n_informative, rng)
    margins = features @ true_weights

    if kind == "logistic":
        prob = 1.0 / (1.0 + np.exp(-margins))
        labels = np.where(rng.random(n_samples) < prob, 1.0, -1.0)
    elif kind == "least_squares":
        labels = margins + noise * rng.standard_normal(n_samples)
    else:
        raise ValueError(f"Unknown problem kind {kind!r}")
    return features, labels, true_weights


def split_problem(features, labels, validation_fraction: float = 0.2, seed: Optional[int] = None):
    """Shuffle instances and split them into (train_features, train_labels, valid_features, valid_labels)."""
    if not 0.0 < validation_fraction < 1.0:
        raise ValueError("validation_fraction must lie strictly between 0 and 1")
    rng = np.random.default_rng(seed)
    n_samples = features.shape[0]
    order = rng.permutation(n_samples)
    n_valid = max(1, int(round(validation_fraction * n_samples)))
    valid, train = order[:n_valid], order[n_valid:]
    labels = np.asarray(labels)
    return features[train], labels[train], features[valid], labels[valid]
