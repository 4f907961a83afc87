"""Model class implementing training and prediction."""
from __future__ import annotations
import warnings
import numpy as np
from typing import List, Optional, Dict, Union
from .layers import Layer
from .losses import Loss, NAME2LOSS
from .optim import Optimizer, NAME2OPT
from . import utils
from tqdm import tqdm


class Model:
    """Sequential stack of layers trained one mini-batch at a time.

    ``t`` counts optimizer updates and is the step handed to the learning-rate
    schedule.
    """
    def __init__(self, layers: Optional[List[Layer]] = None):
        self.layers: List[Layer] = layers or []
        self.built = False
        self.loss: Optional[Loss] = None
        self.optimizer: Optional[Optimizer] = None
        self.t = 0

    def add(self, layer: Layer):
        self.layers.append(layer)
        self.built = False

    def build(self, input_shape):
        # propagate shapes
        if isinstance(input_shape, int):
            input_shape = (None, input_shape)
        shape = tuple(input_shape)
        for layer in self.layers:
            if not layer.built:
                layer.build(shape)
            shape = (shape[0],) + tuple(layer.output_shape[1:])
        self.built = True

    def forward(self, x, training=False):
        x = np.asarray(x, dtype=np.float64)
        for layer in self.layers:
            x = layer.forward(x, training=training)
        return x

    def backward(self, grad):
        for layer in reversed(self.layers):
            grad = layer.backward(grad)
        return grad

    def predict(self, x, batch_size: int = 32):
        x = np.asarray(x, dtype=np.float64)
        if not self.built:
            self.build(x.shape)
        outs = []
        for i in range(0, x.shape[0], batch_size):
            outs.append(self.forward(x[i:i+batch_size], training=False))
        return np.concatenate(outs, axis=0)

    def compile(self, loss: Union[str, Loss] = 'mse', optimizer: Union[str, Optimizer] = 'rmsprop', **opt_kwargs):
        if isinstance(loss, Loss):
            self.loss = loss
        elif loss in NAME2LOSS:
            self.loss = NAME2LOSS[loss]()
        else:
            raise ValueError(f"Unknown loss {loss!r}, expected one of {sorted(NAME2LOSS)}")
        if isinstance(optimizer, Optimizer):
            if opt_kwargs:
                raise ValueError("optimizer keyword arguments need an optimizer name, not an instance")
            self.optimizer = optimizer
        elif optimizer in NAME2OPT:
            self.optimizer = NAME2OPT[optimizer](**opt_kwargs)
        else:
            raise ValueError(f"Unknown optimizer {optimizer!r}, expected one of {sorted(NAME2OPT)}")
        return self

    def update(self, batch_size: int):
        """Apply the optimizer to every trainable layer, then advance the step."""
        if self.optimizer is None:
            raise RuntimeError("Model must be compiled before it can be updated")
        for layer in self.layers:
            if layer.trainable:
                self.optimizer.update(layer, batch_size, self.t)
        self.t += 1

    def fit(self, x, y, epochs: int = 1, batch_size: int = 32, shuffle: bool = True,
            rng: Optional[np.random.Generator] = None, num_classes: Optional[int] = None,
            verbose: bool = True) -> Dict[str, list]:
        if self.loss is None or self.optimizer is None:
            raise RuntimeError("Model must be compiled before fit")
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y)
        if len(x) != len(y):
            raise ValueError(f"x and y must have same length, got {len(x)} and {len(y)}")
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if num_classes is not None and y.ndim == 1:
            y = utils.one_hot(y, num_classes)
        elif np.issubdtype(y.dtype, np.floating):
            y = y.astype(np.float64)
        if not self.built:
            self.build((None,) + x.shape[1:])
        rng = rng or np.random.default_rng()
        n = len(x)
        history: Dict[str, list] = {'loss': [], 'lr': []}
        for epoch in range(epochs):
            idx = rng.permutation(n) if shuffle else np.arange(n)
            pbar = tqdm(
                range(0, n, batch_size),
                total=(n + batch_size - 1) // batch_size,
                desc=f"Epoch {epoch+1}/{epochs}",
                disable=not verbose,
            )
            losses: List[float] = []
            for start in pbar:
                batch = idx[start:start+batch_size]
                out = self.forward(x[batch], training=True)
                loss_val = self.loss.forward(out, y[batch])
                if not np.isfinite(loss_val):
                    warnings.warn(f"Non-finite loss {loss_val} at step {self.t}", RuntimeWarning)
                self.backward(self.loss.backward())
                self.update(len(batch))
                losses.append(loss_val)
                pbar.set_postfix(loss=np.mean(losses))
            history['loss'].append(float(np.mean(losses)))
            schedule = getattr(self.optimizer, 'schedule', None)
            history['lr'].append(float(schedule(self.t - 1)) if schedule is not None else None)
        return history

    def summary(self):
        print("Model summary:")
        total = 0
        for layer in self.layers:
            params = 0
            if layer.trainable and layer.built:
                params = layer.weight.size + layer.bias.size
            total += params
            print(f"{layer.__class__.__name__}: params={params}")
        print(f"Total params: {total}")
