"""Example usage of the mlpnet package: fit a small MLP to a noisy sine wave.

Auto thread configuration occurs when importing mlpnet (sets BLAS threads to cpu cores).
"""
from mlpnet import Model  # triggers auto thread setup before numpy heavy ops
import numpy as np
from mlpnet.layers import Dense, Activation


def build_regressor(hidden=32, lr='linear(0.01, 2000, 0.001)'):
    """Two hidden tanh layers sharing a single RMSProp instance."""
    model = Model([
        Dense(hidden), Activation('tanh'),
        Dense(hidden), Activation('tanh'),
        Dense(1)
    ])
    model.compile(loss='mse', optimizer='rmsprop', lr=lr, rho=0.9, eps=1e-6)
    return model


def main():
    rng = np.random.default_rng(0)
    x = rng.uniform(-np.pi, np.pi, size=(2048, 1))
    y = np.sin(x) + 0.05 * rng.standard_normal(x.shape)

    model = build_regressor()
    history = model.fit(x, y, epochs=30, batch_size=32, rng=rng, verbose=True)
    model.summary()
    print(f"Optimizer: {model.optimizer}")
    print(f"Final loss: {history['loss'][-1]:.5f} (lr={history['lr'][-1]:.5f})")

    grid = np.linspace(-np.pi, np.pi, 9)[:, None]
    for xi, pi in zip(grid[:, 0], model.predict(grid)[:, 0]):
        print(f"sin({xi:+.2f}) = {np.sin(xi):+.3f}  predicted {pi:+.3f}")


if __name__ == '__main__':
    main()
