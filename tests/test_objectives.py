"""
Tests for the objective functions and Matrix Market input/output.
"""

import numpy as np
import pytest
from scipy import sparse

from owlqn.objectives import (
    CallableObjective,
    DifferentiableFunction,
    LeastSquaresObjective,
    LogisticRegressionObjective,
    QuadraticObjective,
    make_sparse_problem,
    split_problem,
)
from owlqn.objectives.io import build_objective, load_problem, read_matrix, write_weights
from owlqn.utils import check_gradient


FEATURES_COORDINATE = """%%MatrixMarket matrix coordinate real general
% three instances, four features
3 4 5
1 1 1.0
1 3 -2.0
2 2 0.5
3 1 3.0
3 4 1.5
"""

FEATURES_ARRAY = """%%MatrixMarket matrix array real general
3 2
1.0
2.0
3.0
-1.0
0.0
4.0
"""

LABELS = """%%MatrixMarket matrix array real general
3 1
1
-1
1
"""


def _write(path, text):
    path.write_text(text)
    return path


def test_gradients_match_finite_differences():
    rng = np.random.default_rng(0)
    features, labels, _ = make_sparse_problem(n_samples=50, n_features=6, seed=0)
    targets = rng.standard_normal(50)
    objectives = [
        LogisticRegressionObjective(features, labels, l2_weight=0.3),
        LogisticRegressionObjective(sparse.csr_matrix(features), labels),
        LeastSquaresObjective(features, targets, l2_weight=0.3),
        QuadraticObjective(rng.standard_normal(6), offset=2.0),
    ]
    x = rng.standard_normal(6)
    for objective in objectives:
        assert isinstance(objective, DifferentiableFunction)
        assert check_gradient(objective, x) < 1e-4


def test_logistic_loss_at_origin():
    features = np.array([[1.0, 2.0], [0.0, -1.0]])
    objective = LogisticRegressionObjective(features, np.array([True, False]))
    grad = np.zeros(2)
    value = objective.eval(np.zeros(2), grad)
    assert value == pytest.approx(1.0 + 2 * np.log(2.0))
    # -0.5 * sum_i y_i * a_i
    np.testing.assert_allclose(grad, [-0.5, -1.5])


def test_logistic_loss_is_stable_for_large_margins():
    objective = LogisticRegressionObjective(np.array([[1.0]]), np.array([-1.0]))
    grad = np.zeros(1)
    value = objective.eval(np.array([800.0]), grad)
    assert value == pytest.approx(801.0)
    np.testing.assert_allclose(grad, [1.0])


def test_least_squares_value():
    objective = LeastSquaresObjective(np.eye(2), np.array([1.0, 2.0]), l2_weight=2.0)
    grad = np.zeros(2)
    value = objective.eval(np.array([1.0, 0.0]), grad)
    assert value == pytest.approx(0.5 * (2.0 * 1.0 + 4.0) + 1.0)
    np.testing.assert_allclose(grad, [2.0, -2.0])

    with pytest.raises(ValueError):
        objective.eval(np.zeros(3), np.zeros(3))


def test_invalid_labels():
    with pytest.raises(ValueError, match="must be 1 or -1"):
        LogisticRegressionObjective(np.eye(2), np.array([1.0, 0.0]))
    with pytest.raises(ValueError, match="doesn't match"):
        LogisticRegressionObjective(np.eye(2), np.array([1.0, -1.0, 1.0]))


def test_callable_objective():
    objective = CallableObjective(lambda x: float(np.sum(x ** 2)), lambda x: 2 * x)
    grad = np.zeros(2)
    assert objective.eval(np.array([1.0, 2.0]), grad) == 5.0
    np.testing.assert_array_equal(grad, [2.0, 4.0])


def test_make_sparse_problem_shapes():
    features, labels, weights = make_sparse_problem(n_samples=40, n_features=12, n_informative=3,
                                                   density=0.3, seed=1)
    assert sparse.issparse(features)
    assert features.shape == (40, 12)
    assert np.count_nonzero(weights) == 3
    assert set(np.unique(labels)) <= {-1.0, 1.0}

    with pytest.raises(ValueError):
        make_sparse_problem(kind="poisson")


def test_split_problem():
    features, labels, _ = make_sparse_problem(n_samples=50, n_features=4, seed=2)
    train_x, train_y, valid_x, valid_y = split_problem(features, labels, 0.2, seed=0)
    assert valid_x.shape == (10, 4) and valid_y.shape == (10,)
    assert train_x.shape == (40, 4) and train_y.shape == (40,)


def test_load_coordinate_problem(tmp_path):
    features, labels = load_problem(_write(tmp_path / "x.mtx", FEATURES_COORDINATE),
                                    _write(tmp_path / "y.mtx", LABELS))
    assert sparse.issparse(features)
    np.testing.assert_allclose(features.toarray(), [[1.0, 0.0, -2.0, 0.0],
                                                    [0.0, 0.5, 0.0, 0.0],
                                                    [3.0, 0.0, 0.0, 1.5]])
    np.testing.assert_array_equal(labels, [1.0, -1.0, 1.0])
    assert build_objective(features, labels).num_feats == 4


def test_load_array_problem(tmp_path):
    features, labels = load_problem(_write(tmp_path / "x.mtx", FEATURES_ARRAY),
                                    _write(tmp_path / "y.mtx", LABELS), least_squares=True)
    # array files are stored column by column
    np.testing.assert_allclose(features, [[1.0, -1.0], [2.0, 0.0], [3.0, 4.0]])
    assert isinstance(build_objective(features, labels, least_squares=True), LeastSquaresObjective)


def test_load_rejects_bad_labels(tmp_path):
    features = _write(tmp_path / "x.mtx", FEATURES_ARRAY)
    bad_labels = _write(tmp_path / "y.mtx", LABELS.replace("-1", "2"))
    with pytest.raises(ValueError, match="must be 1 or -1"):
        load_problem(features, bad_labels)
    # real-valued targets are fine for least squares
    load_problem(features, bad_labels, least_squares=True)

    short_labels = _write(tmp_path / "short.mtx", "%%MatrixMarket matrix array real general\n2 1\n1\n-1\n")
    with pytest.raises(ValueError, match="doesn't match"):
        load_problem(features, short_labels)

    wide_labels = _write(tmp_path / "wide.mtx", "%%MatrixMarket matrix array real general\n3 2\n1\n-1\n1\n1\n-1\n1\n")
    with pytest.raises(ValueError, match="more than one column"):
        load_problem(features, wide_labels)


def test_write_weights(tmp_path):
    path = tmp_path / "weights.mtx"
    write_weights(path, np.array([0.0, 1.5, -2.0]))
    assert path.read_text().startswith("%%MatrixMarket matrix array real general")
    np.testing.assert_allclose(read_matrix(path), [[0.0, 1.5, -2.0]])
