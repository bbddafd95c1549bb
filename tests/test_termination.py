"""
Tests for the relative mean improvement termination criterion.
"""

import math
from types import SimpleNamespace

from owlqn.optimizers.numeric.termination import RelativeMeanImprovementCriterion, TerminationCriterion


def _feed(criterion, values):
    return [criterion.get_value(SimpleNamespace(value=v)) for v in values]


def test_infinite_for_first_six_values():
    criterion = RelativeMeanImprovementCriterion()
    results = _feed(criterion, [100.0 - k for k in range(7)])
    assert all(math.isinf(value) for value, _ in results[:6])
    assert "wait" in results[0][1]
    assert math.isfinite(results[6][0])


def test_relative_mean_improvement_values():
    criterion = RelativeMeanImprovementCriterion()
    values = [64.0, 32.0, 16.0, 8.0, 4.0, 2.0, 1.0]
    results = _feed(criterion, values)
    # six stored values, oldest 64
    assert results[6][0] == (64.0 - 1.0) / 6 / 1.0


def test_full_window_drops_oldest_before_computing():
    criterion = RelativeMeanImprovementCriterion()
    values = [float(20 - k) for k in range(11)]  # 20, 19, ..., 10
    results = _feed(criterion, values)
    # window held 20..11; 20 is dropped, leaving nine values starting at 19
    assert results[10][0] == (19.0 - 10.0) / 9 / 10.0
    assert len(criterion.prev_vals) == 10


def test_signal_shrinks_as_values_converge():
    criterion = RelativeMeanImprovementCriterion()
    values = [1.0 + 2.0 ** -k for k in range(20)]
    signals = [value for value, _ in _feed(criterion, values)][6:]
    assert all(b < a for a, b in zip(signals, signals[1:]))


def test_zero_objective_value():
    criterion = RelativeMeanImprovementCriterion()
    assert _feed(criterion, [0.0] * 7)[6][0] == 0.0


def test_satisfies_protocol():
    assert isinstance(RelativeMeanImprovementCriterion(), TerminationCriterion)
