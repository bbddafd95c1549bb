import sys
from typing import Callable, Optional

import click
import matplotlib.pyplot as plt
import numpy as np
import optuna

from owlqn.errors import OWLQNError
from owlqn.logging_setup import configure_logging
from owlqn.objectives import split_problem
from owlqn.objectives.io import build_objective, load_problem, write_weights
from owlqn.optimizers import OPTIMIZERS
from owlqn.optimizers.numeric.owlqn import OWLQN, minimize_owlqn
from owlqn.utils import tunable_parameters


def validation_loss(minimizer: Callable, train_objective, valid_objective, **kwargs) -> float:
    """Fit on the training objective and return the smooth loss on the validation objective."""
    weights = minimizer(fun=train_objective, initial_guess=np.zeros(train_objective.num_feats), **kwargs)
    return valid_objective.eval(weights, np.zeros_like(weights))


def make_optuna_objective(minimizer_to_test: Callable, train_objective, valid_objective) -> Callable:
    tunable = tunable_parameters(minimizer_to_test)

    # The term "trial" is magic used by Optuna
    def optuna_loss(trial):
        kwargs = {}
        for name, (base_type, meta, _) in tunable.items():
            if base_type is int:
                if meta.log:
                    step = None
                else:
                    step = meta.step if meta.step is not None else 1
                kwargs[name] = trial.suggest_int(name, meta.low, meta.high, step=step, log=meta.log)
            else:
                if meta.log:
                    step = None
                else:
                    step = meta.step if meta.step is not None else (meta.high - meta.low) / 100
                kwargs[name] = trial.suggest_float(name, meta.low, meta.high, step=step, log=meta.log)

        return validation_loss(minimizer_to_test, train_objective, valid_objective, **kwargs)

    return optuna_loss


def tune_minimizer(minimizer_to_test: Callable, train_objective, valid_objective,
                   n_trials: int = 50, seed: Optional[int] = None):
    """
    Tune the annotated hyperparameters of a minimizer using Optuna.

    :param minimizer_to_test: The minimizer function to tune.
    :param train_objective: Objective the minimizer is fit on.
    :param valid_objective: Held-out objective whose smooth loss is minimized.
    :param n_trials: Number of trials for tuning.
    :return: The best parameters and the best validation loss.
    """
    objective = make_optuna_objective(minimizer_to_test, train_objective, valid_objective)
    sampler = optuna.samplers.TPESampler(seed=seed)
    study = optuna.create_study(direction="minimize", sampler=sampler)
    study.optimize(objective, n_trials=n_trials)
    return study.best_params, study.best_value


def regularization_path(objective, l1_weights, tol: float = 1e-4, m: int = 10) -> list[dict]:
    """
    Fit the objective for each L1 weight, warm-starting from the previous solution.

    Returns one record per weight with the number of non-zero weights and the
    regularized objective value.
    """
    results = []
    weights = np.zeros(objective.num_feats)
    for l1_weight in sorted(l1_weights, reverse=True):
        weights = minimize_owlqn(objective, weights, l1_weight=l1_weight, tol=tol, m=m)
        value = objective.eval(weights, np.zeros_like(weights)) + l1_weight * np.sum(np.abs(weights))
        results.append({
            'l1_weight': l1_weight,
            'non_zero': int(np.count_nonzero(weights)),
            'value': float(value),
            'weights': weights,
        })
    return results


def create_regularization_plot(results, save_path: str | None = None):
    """Plot the number of non-zero weights and the objective against the L1 weight."""
    l1_weights = [r['l1_weight'] for r in results]
    non_zero = [r['non_zero'] for r in results]
    values = [r['value'] for r in results]

    fig, ax_nnz = plt.subplots(figsize=(12, 8))
    ax_nnz.plot(l1_weights, non_zero, 'o-', label='Non-zero weights')
    ax_nnz.set_xscale('log')
    ax_nnz.set_xlabel('L1 regularization weight')
    ax_nnz.set_ylabel('Non-zero weights')
    ax_nnz.grid(True, alpha=0.3)

    ax_value = ax_nnz.twinx()
    ax_value.plot(l1_weights, values, 'r--', alpha=0.7, label='Objective value')
    ax_value.set_ylabel('Objective value')

    plt.title('Regularization Path\n(Sparsity vs. L1 weight)')
    fig.tight_layout()
    if save_path is not None:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')
        print(f"Plot saved as '{save_path}'")
        plt.close(fig)
    else:
        plt.show()


def _load_objective(feature_file, label_file, least_squares, l2weight):
    try:
        features, labels = load_problem(feature_file, label_file, least_squares=least_squares)
    except ValueError as e:
        raise click.ClickException(str(e))
    return build_objective(features, labels, least_squares=least_squares, l2_weight=l2weight)


@click.group()
def cli():
    """Orthant-Wise Limited-memory Quasi-Newton trainer for L1-regularized models."""
    pass


@cli.command()
@click.argument('feature_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('label_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('reg_weight', type=click.FloatRange(min=0.0))
@click.argument('output_file', type=click.Path(dir_okay=False, writable=True))
@click.option('--ls', 'least_squares', is_flag=True, help='Use least squares formulation (logistic regression is default)')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output')
@click.option('--tol', default=1e-4, type=click.FloatRange(min=0.0, min_open=True), help='Convergence tolerance')
@click.option('-m', 'm', default=10, type=click.IntRange(min=1), help='L-BFGS memory parameter')
@click.option('--l2weight', default=0.0, type=click.FloatRange(min=0.0), help='L2 regularization weight')
@click.option('--check-gradient', is_flag=True, help='Compare numeric and analytic directional derivatives')
@click.option('-v', '--verbose', is_flag=True, help='Emit debug log events')
def train(feature_file, label_file, reg_weight, output_file, least_squares, quiet, tol, m, l2weight,
          check_gradient, verbose):
    """Train an L1-regularized logistic regression or least-squares model.

    FEATURE_FILE and LABEL_FILE are Matrix Market files (instances in rows,
    labels in a single column). The weight vector is written to OUTPUT_FILE
    as a 1 x n Matrix Market array.
    """
    configure_logging(verbose=verbose)
    if not quiet:
        click.echo(f"{sys.argv[0]} called with arguments ")
        click.echo(f"   {feature_file} {label_file} {reg_weight} {output_file}")

    objective = _load_objective(feature_file, label_file, least_squares, l2weight)
    optimizer = OWLQN(quiet=quiet, check_gradient=check_gradient)
    try:
        weights = optimizer.minimize(objective, np.zeros(objective.num_feats), l1_weight=reg_weight, tol=tol, m=m)
    except OWLQNError as e:
        raise click.ClickException(str(e))

    if not quiet:
        non_zero = int(np.count_nonzero(weights))
        click.echo(f"Finished with optimization.  {non_zero}/{weights.size} non-zero weights.")

    write_weights(output_file, weights)


@cli.command()
@click.argument('feature_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('label_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--ls', 'least_squares', is_flag=True, help='Use least squares formulation')
@click.option('--n-trials', default=50, help='Number of trials for hyperparameter tuning')
@click.option('--validation-fraction', default=0.2, type=click.FloatRange(0.0, 1.0, min_open=True, max_open=True),
              help='Fraction of instances held out for scoring')
@click.option('--l2weight', default=0.0, type=click.FloatRange(min=0.0), help='L2 regularization weight')
@click.option('--seed', default=None, type=int, help='Random seed for reproducibility')
def tune(feature_file, label_file, least_squares, n_trials, validation_fraction, l2weight, seed):
    """Tune the L1 weight and memory size on a held-out split."""
    configure_logging()
    try:
        features, labels = load_problem(feature_file, label_file, least_squares=least_squares)
    except ValueError as e:
        raise click.ClickException(str(e))
    train_x, train_y, valid_x, valid_y = split_problem(features, labels, validation_fraction, seed=seed)
    train_objective = build_objective(train_x, train_y, least_squares=least_squares, l2_weight=l2weight)
    valid_objective = build_objective(valid_x, valid_y, least_squares=least_squares)

    best_params, best_value = tune_minimizer(minimize_owlqn, train_objective, valid_objective,
                                             n_trials=n_trials, seed=seed)

    click.echo("Best parameters found for minimize_owlqn:")
    for param, value in best_params.items():
        click.echo(f"  {param}: {value}")
    click.echo(f"Validation loss: {best_value:.6g}")


@cli.command()
@click.argument('feature_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('label_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--ls', 'least_squares', is_flag=True, help='Use least squares formulation')
@click.option('--n-weights', default=10, type=click.IntRange(min=1), help='Number of L1 weights on the path')
@click.option('--max-weight', default=10.0, type=click.FloatRange(min=0.0, min_open=True), help='Largest L1 weight')
@click.option('--min-weight', default=1e-3, type=click.FloatRange(min=0.0, min_open=True), help='Smallest L1 weight')
@click.option('--l2weight', default=0.0, type=click.FloatRange(min=0.0), help='L2 regularization weight')
@click.option('--save-path', default=None, help='Path to save the plot')
def regpath(feature_file, label_file, least_squares, n_weights, max_weight, min_weight, l2weight, save_path):
    """Compute the regularization path and plot sparsity against the L1 weight."""
    configure_logging()
    objective = _load_objective(feature_file, label_file, least_squares, l2weight)
    l1_weights = np.geomspace(min_weight, max_weight, n_weights)
    try:
        results = regularization_path(objective, l1_weights)
    except OWLQNError as e:
        raise click.ClickException(str(e))

    for result in results:
        click.echo(f"{result['l1_weight']:12.4e} | non-zero: {result['non_zero']:6d} | value: {result['value']:12.6g}")
    create_regularization_plot(results, save_path=save_path)


@cli.command()
def list_optimizers():
    """List all available optimizers."""
    click.echo("Available optimizers:")
    click.echo("-" * 40)
    for i, name in enumerate(sorted(OPTIMIZERS.keys()), 1):
        # Extract the algorithm name from the function name
        algo_name = name.replace('minimize_', '').replace('_', ' ').upper()
        click.echo(f"{i:2d}. {name:25} ({algo_name})")
    click.echo(f"\nTotal: {len(OPTIMIZERS)} optimizers")


if __name__ == '__main__':
    cli()
