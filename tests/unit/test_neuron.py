from __future__ import annotations

import numpy as np
import pytest

from textlearn.activation import identity, sigmoid, signum
from textlearn.neuron import Neuron
from textlearn.optimization import DeltaRule, DeltaRuleGradientDescent, GradientDescent, Perceptron

BIPOLAR_INPUTS = np.array([[-1.0, -1.0], [-1.0, 1.0], [1.0, -1.0], [1.0, 1.0]])
AND_TARGETS = np.array([-1.0, -1.0, -1.0, 1.0])
XOR_TARGETS = np.array([-1.0, 1.0, 1.0, -1.0])

SEPARABLE = np.array([[-2.0, 0.5], [-1.0, -0.5], [-1.5, 0.0], [1.0, 0.5], [2.0, -0.5], [1.5, 0.0]])
SEPARABLE_TARGETS = np.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0])


def _threshold(probability: float) -> float:
    return 1.0 if probability > 0.5 else 0.0


def test_perceptron_learns_logical_and() -> None:
    neuron = Neuron.with_features(2, signum, Perceptron(0.2, 100), random_state=4)

    report = neuron.train(BIPOLAR_INPUTS, AND_TARGETS)

    assert report.epochs < 100
    assert report.squared_error == 0.0
    assert [neuron.output(row) for row in BIPOLAR_INPUTS] == AND_TARGETS.tolist()


def test_perceptron_gives_up_on_xor() -> None:
    neuron = Neuron.with_features(2, signum, Perceptron(0.2, 25), random_state=4)

    report = neuron.train(BIPOLAR_INPUTS, XOR_TARGETS)

    assert report.epochs == 25
    assert report.squared_error > 0


def test_perceptron_requires_bipolar_targets() -> None:
    neuron = Neuron.with_features(2, signum, Perceptron())

    with pytest.raises(ValueError):
        neuron.train(BIPOLAR_INPUTS, [0.0, 0.0, 0.0, 1.0])


def test_delta_rule_fits_linear_function() -> None:
    inputs = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0], [2.0, 1.0]])
    targets = 2.0 * inputs[:, 0] - inputs[:, 1] + 0.5
    neuron = Neuron(np.zeros(3), identity, DeltaRule(0.05, 20_000, tolerance=1e-3))

    report = neuron.train(inputs, targets)

    assert report.epochs < 20_000
    assert neuron.weights.tolist() == pytest.approx([2.0, -1.0, 0.5], abs=1e-2)
    assert neuron.output([3.0, 2.0]) == pytest.approx(4.5, abs=0.1)


def test_delta_rule_with_sigmoid_classifies_separable_data() -> None:
    neuron = Neuron(
        np.zeros(3), sigmoid, DeltaRule(0.5, 500, tolerance=1e-3), quantization=_threshold
    )

    neuron.train(SEPARABLE, SEPARABLE_TARGETS)

    assert [neuron.output(row) for row in SEPARABLE] == SEPARABLE_TARGETS.tolist()


def test_gradient_descent_supervisor_trains_sigmoid_neuron() -> None:
    supervisor = DeltaRuleGradientDescent(GradientDescent(0.5, 300, random_state=0))
    neuron = Neuron(np.zeros(3), sigmoid, supervisor, quantization=_threshold)

    report = neuron.train(SEPARABLE, SEPARABLE_TARGETS)

    assert report.epochs == 300
    assert neuron.report is report
    assert [neuron.output(row) for row in SEPARABLE] == SEPARABLE_TARGETS.tolist()


def test_gradient_descent_supervisor_rejects_other_activations() -> None:
    supervisor = DeltaRuleGradientDescent(GradientDescent(0.5, 10))
    neuron = Neuron(np.zeros(3), identity, supervisor)

    with pytest.raises(ValueError):
        neuron.train(SEPARABLE, SEPARABLE_TARGETS)


def test_random_weights_are_reproducible_and_bias_last() -> None:
    first = Neuron.with_features(3, identity, Perceptron(), random_state=9)
    second = Neuron.with_features(3, identity, Perceptron(), random_state=9)

    assert first.features == 3
    assert first.weights.shape == (4,)
    assert first.weights.tolist() == second.weights.tolist()
    assert np.all((first.weights >= -0.5) & (first.weights < 0.5))


def test_invalid_arguments_are_rejected() -> None:
    with pytest.raises(ValueError):
        Neuron([0.5], identity, Perceptron())
    with pytest.raises(ValueError):
        Neuron.with_features(0, identity, Perceptron())
    with pytest.raises(ValueError):
        DeltaRule(tolerance=0.0)
    with pytest.raises(ValueError):
        Neuron(np.zeros(3), identity, Perceptron()).output([1.0])
    with pytest.raises(ValueError):
        Neuron(np.zeros(3), identity, DeltaRule()).train(SEPARABLE, SEPARABLE_TARGETS[:2])
