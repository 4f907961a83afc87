"""Layer definitions for the mlpnet package.
Pure NumPy implementations; every buffer is float64.
"""
from __future__ import annotations
import numpy as np
from typing import Optional, Tuple

# Helper weight initializer functions

def glorot_uniform(shape, rng: np.random.Generator):
    fan_out, fan_in = shape
    limit = np.sqrt(6.0 / (fan_in + fan_out))
    return rng.uniform(-limit, limit, size=shape)


class Layer:
    """Abstract layer base class."""
    def __init__(self):
        self.built = False
        self.trainable = True

    def build(self, input_shape: Tuple[int, ...]):
        self.input_shape = input_shape
        self.output_shape = input_shape
        self.built = True

    def forward(self, x: np.ndarray, training: bool = False) -> np.ndarray:
        raise NotImplementedError

    def backward(self, grad: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class Dense(Layer):
    """Fully connected layer ``y = x @ weight.T + bias``.

    The layer owns every buffer the optimizer touches:

    - ``weight`` (n, p) and ``bias`` (n,): the parameters.
    - ``weight_grad`` and ``bias_grad``: raw gradients summed over the current
      mini-batch by :meth:`backward`. They hold the descent direction (the
      negated loss gradient) and are cleared by the optimizer after each update.
    - ``weight_moment2`` and ``bias_moment2``: RMSProp running averages of the
      squared gradient. Zero at build time and kept for the whole run.

    Args:
        units: Output width ``n``.
        input_dim: Input width ``p``. When given the layer is built immediately,
            otherwise :meth:`build` is called by the model.
        rng: Generator for the Glorot-uniform weight init.
    """
    def __init__(self, units: int, input_dim: Optional[int] = None, rng: Optional[np.random.Generator] = None):
        super().__init__()
        if int(units) != units or units <= 0:
            raise ValueError(f"units must be a positive integer, got {units!r}")
        self.units = int(units)
        self.rng = rng or np.random.default_rng()
        if input_dim is not None:
            self.build((None, input_dim))

    @property
    def n(self) -> int:
        return self.units

    @property
    def p(self) -> int:
        if not self.built:
            raise RuntimeError("Dense layer has not been built yet")
        return self.weight.shape[1]

    def build(self, input_shape):
        in_features = input_shape[-1]
        if in_features is None or int(in_features) != in_features or in_features <= 0:
            raise ValueError(f"input width must be a positive integer, got {in_features!r}")
        in_features = int(in_features)
        self.input_shape = input_shape
        self.weight = glorot_uniform((self.units, in_features), self.rng).astype(np.float64)
        self.bias = np.zeros((self.units,), dtype=np.float64)
        self.weight_grad = np.zeros_like(self.weight)
        self.bias_grad = np.zeros_like(self.bias)
        self.weight_moment2 = np.zeros_like(self.weight)
        self.bias_moment2 = np.zeros_like(self.bias)
        self.output_shape = (*input_shape[:-1], self.units)
        self.built = True

    def check_buffers(self):
        """Raise ValueError unless all six buffers agree on (n, p)."""
        if not self.built:
            raise RuntimeError("Dense layer has not been built yet")
        n, p = self.units, self.weight.shape[1]
        expected = {
            'weight': (n, p), 'weight_grad': (n, p), 'weight_moment2': (n, p),
            'bias': (n,), 'bias_grad': (n,), 'bias_moment2': (n,),
        }
        for name, shape in expected.items():
            buf = getattr(self, name)
            if buf.shape != shape:
                raise ValueError(f"{name} has shape {buf.shape}, expected {shape}")
            if buf.dtype != np.float64:
                raise ValueError(f"{name} must be float64, got {buf.dtype}")

    def forward(self, x, training=False):
        self.last_x = x
        return x @ self.weight.T + self.bias

    def backward(self, grad):
        # grad holds dLoss/dy per example; accumulate its negation summed over the batch
        x = self.last_x
        self.weight_grad -= grad.T @ x
        self.bias_grad -= grad.sum(axis=0)
        return grad @ self.weight

    def zero_grad(self):
        self.weight_grad.fill(0.0)
        self.bias_grad.fill(0.0)


class Activation(Layer):
    def __init__(self, func: str = 'relu'):
        super().__init__()
        if func not in ('linear', 'relu', 'sigmoid', 'tanh'):
            raise ValueError(f"Unknown activation {func}")
        self.func = func
        self.trainable = False

    def forward(self, x, training=False):
        self.last_x = x
        if self.func == 'relu':
            return np.maximum(0, x)
        if self.func == 'sigmoid':
            return 1 / (1 + np.exp(-x))
        if self.func == 'tanh':
            return np.tanh(x)
        return x

    def backward(self, grad):
        x = self.last_x
        if self.func == 'relu':
            return grad * (x > 0)
        if self.func == 'sigmoid':
            s = 1 / (1 + np.exp(-x))
            return grad * s * (1 - s)
        if self.func == 'tanh':
            t = np.tanh(x)
            return grad * (1 - t**2)
        return grad

