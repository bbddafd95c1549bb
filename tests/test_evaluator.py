"""
Tests for the command line interface and the tuning and regularization path helpers.
"""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest
from click.testing import CliRunner
from scipy import io as spio

from owlqn.evaluator import cli, regularization_path, tune_minimizer
from owlqn.objectives import LogisticRegressionObjective, make_sparse_problem, split_problem
from owlqn.optimizers.numeric.owlqn import minimize_owlqn


@pytest.fixture
def problem_files(tmp_path):
    features, labels, _ = make_sparse_problem(n_samples=120, n_features=8, n_informative=3, seed=3)
    feature_file = tmp_path / "features.mtx"
    label_file = tmp_path / "labels.mtx"
    spio.mmwrite(str(feature_file), features)
    spio.mmwrite(str(label_file), labels.reshape(-1, 1))
    return feature_file, label_file


def test_train_writes_weights(problem_files, tmp_path):
    feature_file, label_file = problem_files
    output_file = tmp_path / "weights.mtx"
    result = CliRunner().invoke(cli, ["train", str(feature_file), str(label_file), "1.0", str(output_file)])
    assert result.exit_code == 0, result.output
    assert "called with arguments" in result.output
    assert "Iter    0:" in result.output
    assert "non-zero weights." in result.output

    weights = spio.mmread(str(output_file))
    assert weights.shape == (1, 8)


def test_train_quiet(problem_files, tmp_path):
    feature_file, label_file = problem_files
    output_file = tmp_path / "weights.mtx"
    result = CliRunner().invoke(cli, ["train", str(feature_file), str(label_file), "1.0", str(output_file),
                                      "--quiet", "--tol", "1e-6", "-m", "5"])
    assert result.exit_code == 0, result.output
    assert "Iter" not in result.output
    assert output_file.exists()


def test_train_rejects_bad_arguments(problem_files, tmp_path):
    feature_file, label_file = problem_files
    output_file = tmp_path / "weights.mtx"
    runner = CliRunner()

    result = runner.invoke(cli, ["train", str(feature_file), str(label_file), "-1.0", str(output_file)])
    assert result.exit_code != 0

    # the feature matrix is not a valid set of +1/-1 labels
    result = runner.invoke(cli, ["train", str(feature_file), str(feature_file), "1.0", str(output_file)])
    assert result.exit_code != 0
    assert not output_file.exists()


def test_list_optimizers():
    result = CliRunner().invoke(cli, ["list-optimizers"])
    assert result.exit_code == 0
    assert "minimize_owlqn" in result.output
    assert "(LBFGS)" in result.output
    assert "Total: 2 optimizers" in result.output


def test_regpath_saves_plot(problem_files, tmp_path):
    feature_file, label_file = problem_files
    plot_file = tmp_path / "path.png"
    result = CliRunner().invoke(cli, ["regpath", str(feature_file), str(label_file), "--n-weights", "4",
                                      "--save-path", str(plot_file)])
    assert result.exit_code == 0, result.output
    assert result.output.count("non-zero:") == 4
    assert plot_file.exists()


def test_tune_command(problem_files):
    feature_file, label_file = problem_files
    result = CliRunner().invoke(cli, ["tune", str(feature_file), str(label_file), "--n-trials", "3", "--seed", "0"])
    assert result.exit_code == 0, result.output
    assert "Best parameters found for minimize_owlqn:" in result.output
    assert "l1_weight:" in result.output
    assert "Validation loss:" in result.output


def test_regularization_path_gets_denser():
    features, labels, _ = make_sparse_problem(n_samples=200, n_features=12, n_informative=3, seed=8)
    objective = LogisticRegressionObjective(features, labels)
    results = regularization_path(objective, [0.01, 100.0, 1.0])

    assert [r['l1_weight'] for r in results] == [100.0, 1.0, 0.01]
    assert results[-1]['non_zero'] > results[0]['non_zero']


def test_tune_minimizer_stays_in_bounds():
    features, labels, _ = make_sparse_problem(n_samples=150, n_features=6, seed=9)
    train_x, train_y, valid_x, valid_y = split_problem(features, labels, 0.3, seed=0)
    best_params, best_value = tune_minimizer(minimize_owlqn,
                                             LogisticRegressionObjective(train_x, train_y),
                                             LogisticRegressionObjective(valid_x, valid_y),
                                             n_trials=4, seed=1)
    assert 1e-3 <= best_params['l1_weight'] <= 10.0
    assert 2 <= best_params['m'] <= 30
    assert np.isfinite(best_value)
