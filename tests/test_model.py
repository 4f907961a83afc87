import numpy as np
import pytest

from mlpnet import Model, Dense, Activation, RMSProp
from mlpnet.optim import Optimizer
from mlpnet.schedule import constant


def linear_data(n=64, seed=0):
    rng = np.random.default_rng(seed)
    x = rng.uniform(-1, 1, size=(n, 1))
    return x, 2.0 * x - 1.0


def test_fit_recovers_linear_map():
    x, y = linear_data()
    model = Model([Dense(1, rng=np.random.default_rng(1))])
    model.compile(loss='mse', optimizer='rmsprop', lr=constant(0.02))

    history = model.fit(x, y, epochs=100, batch_size=16, rng=np.random.default_rng(2), verbose=False)

    assert len(history['loss']) == 100
    assert history['loss'][-1] < history['loss'][0]
    assert history['loss'][-1] < 0.01
    assert history['lr'] == [0.02] * 100
    layer = model.layers[0]
    assert layer.weight[0, 0] == pytest.approx(2.0, abs=0.1)
    assert layer.bias[0] == pytest.approx(-1.0, abs=0.1)
    assert model.t == 100 * 4


def test_single_update_descends():
    x, y = linear_data(32)
    model = Model([Dense(4, rng=np.random.default_rng(3)), Activation('tanh'), Dense(1, rng=np.random.default_rng(4))])
    model.compile(loss='mse', optimizer=RMSProp(constant(0.001)))
    model.build((None, 1))
    before = model.loss.forward(model.forward(x), y)
    model.loss.forward(model.forward(x, training=True), y)
    model.backward(model.loss.backward())
    model.update(len(x))
    after = model.loss.forward(model.forward(x), y)
    assert after < before
    for layer in model.layers:
        if layer.trainable:
            assert not layer.weight_grad.any()
            assert layer.weight_moment2.any()


def test_classification_with_integer_labels():
    rng = np.random.default_rng(5)
    x = np.concatenate([rng.normal(-2, 0.5, size=(40, 2)), rng.normal(2, 0.5, size=(40, 2))])
    y = np.array([0] * 40 + [1] * 40)
    model = Model([Dense(8, rng=np.random.default_rng(6)), Activation('relu'), Dense(2, rng=np.random.default_rng(7))])
    model.compile(loss='cce', optimizer='rmsprop', lr=0.01)
    model.fit(x, y, epochs=20, batch_size=8, rng=rng, verbose=False)
    preds = model.predict(x).argmax(axis=1)
    assert (preds == y).mean() > 0.95


def test_one_hot_labels_via_num_classes():
    x = np.array([[0.0], [1.0], [2.0]])
    y = np.array([0, 1, 2])
    model = Model([Dense(3)])
    model.compile(loss='cce', optimizer='rmsprop')
    history = model.fit(x, y, epochs=1, batch_size=2, num_classes=3, verbose=False)
    assert len(history['loss']) == 1
    assert model.t == 2


def test_predict_builds_and_batches():
    model = Model([Dense(3), Activation('sigmoid')])
    out = model.predict(np.zeros((70, 4)), batch_size=32)
    assert out.shape == (70, 3)
    np.testing.assert_allclose(out, 0.5)


def test_custom_optimizer_through_contract():
    calls = []

    class Recorder(Optimizer):
        def update(self, layer, batch_size, step):
            calls.append((layer, batch_size, step))
            layer.zero_grad()

    first, second = Dense(2), Dense(1)
    model = Model([first, Activation('relu'), second]).compile(loss='mse', optimizer=Recorder())
    model.fit(np.ones((5, 3)), np.ones((5, 1)), epochs=1, batch_size=4, shuffle=False, verbose=False)
    assert calls == [(first, 4, 0), (second, 4, 0), (first, 1, 1), (second, 1, 1)]


def test_compile_errors():
    model = Model([Dense(1)])
    with pytest.raises(ValueError, match='loss'):
        model.compile(loss='hinge')
    with pytest.raises(ValueError, match='optimizer'):
        model.compile(loss='mse', optimizer='adam')
    with pytest.raises(ValueError, match='rho'):
        model.compile(loss='mse', optimizer='rmsprop', rho=1.0)
    with pytest.raises(ValueError):
        model.compile(loss='mse', optimizer=RMSProp(), rho=0.5)


def test_fit_and_update_require_compile():
    model = Model([Dense(1)])
    with pytest.raises(RuntimeError):
        model.fit(np.zeros((2, 1)), np.zeros((2, 1)), verbose=False)
    with pytest.raises(RuntimeError):
        model.update(1)


def test_summary(capsys):
    model = Model([Dense(3, input_dim=2), Activation('relu'), Dense(1)])
    model.build((None, 2))
    model.summary()
    out = capsys.readouterr().out
    assert "Dense: params=9" in out
    assert "Total params: 13" in out
