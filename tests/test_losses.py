import numpy as np
import pytest

from mlpnet.losses import MSE, CategoricalCrossentropy, NAME2LOSS
from mlpnet.utils import one_hot


def test_mse_per_example_gradient():
    loss = MSE()
    pred = np.array([[1.0, 2.0], [0.0, -1.0]])
    true = np.array([[0.0, 2.0], [1.0, 1.0]])
    assert loss.forward(pred, true) == pytest.approx(0.5 * (1.0 + 5.0) / 2)
    np.testing.assert_allclose(loss.backward(), pred - true)


def test_mse_accepts_flat_targets():
    loss = MSE()
    loss.forward(np.array([[1.0], [2.0]]), np.array([0.0, 0.0]))
    np.testing.assert_allclose(loss.backward(), [[1.0], [2.0]])


def test_cce_integer_and_one_hot_agree():
    logits = np.array([[2.0, 0.5, -1.0], [0.0, 0.0, 3.0]])
    labels = np.array([0, 2])
    a, b = CategoricalCrossentropy(), CategoricalCrossentropy()
    assert a.forward(logits, labels) == pytest.approx(b.forward(logits, one_hot(labels, 3)))
    ga, gb = a.backward(), b.backward()
    np.testing.assert_allclose(ga, gb)
    np.testing.assert_allclose(ga.sum(axis=1), 0.0, atol=1e-12)


def test_one_hot():
    np.testing.assert_array_equal(one_hot(np.array([1, 0, 2]), 3), np.eye(3)[[1, 0, 2]])


def test_registry():
    assert NAME2LOSS['cce'] is CategoricalCrossentropy
    assert NAME2LOSS['mse'] is MSE
