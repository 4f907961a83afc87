"""Loss functions.

``forward`` returns the batch-mean loss for reporting. ``backward`` returns the
gradient of each example's loss with respect to the network output, without
dividing by the batch size: layers sum it over the batch and the optimizer
takes the mean.
"""
from __future__ import annotations
import numpy as np


class Loss:
    def forward(self, y_pred, y_true):
        raise NotImplementedError

    def backward(self):
        raise NotImplementedError


class CategoricalCrossentropy(Loss):
    """Softmax cross-entropy on logits; labels are integers or one-hot rows."""

    def forward(self, y_pred, y_true):
        y_pred = np.asarray(y_pred)
        y_true = np.asarray(y_true)
        probs = y_pred - np.max(y_pred, axis=1, keepdims=True)
        probs = np.exp(probs)
        probs /= np.sum(probs, axis=1, keepdims=True)
        self.probs = probs
        self.y_true = y_true
        if y_true.ndim == 1 or (y_true.ndim == 2 and y_true.shape[1] == 1):
            # integer labels
            log_likelihood = -np.log(probs[np.arange(len(y_true)), y_true.reshape(-1)] + 1e-12)
            return float(np.mean(log_likelihood))
        return float(-np.mean(np.sum(y_true * np.log(probs + 1e-12), axis=1)))

    def backward(self):
        y_true = self.y_true
        if y_true.ndim == 1 or (y_true.ndim == 2 and y_true.shape[1] == 1):
            grad = self.probs.copy()
            grad[np.arange(len(y_true)), y_true.reshape(-1)] -= 1
            return grad
        return self.probs - y_true


class MSE(Loss):
    """Half squared error summed over outputs, averaged over the batch."""

    def forward(self, y_pred, y_true):
        self.y_pred = np.asarray(y_pred)
        self.y_true = np.asarray(y_true).reshape(self.y_pred.shape)
        return float(0.5 * np.mean(np.sum((self.y_pred - self.y_true)**2, axis=-1)))

    def backward(self):
        return self.y_pred - self.y_true


NAME2LOSS = {
    'categorical_crossentropy': CategoricalCrossentropy,
    'cce': CategoricalCrossentropy,
    'mse': MSE
}
