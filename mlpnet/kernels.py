"""Numba-compiled elementwise kernels used by the optimizers."""
from __future__ import annotations
import math
import numpy as np
from numba import njit


@njit(cache=False)
def rmsprop_update(param, grad, moment2, m, rho, eps, eta):
    """Apply one RMSProp step in place over matching 2-D float64 buffers.

    For every element: average the summed gradient over ``m`` examples, fold
    its square into ``moment2``, normalize by ``sqrt(eps + moment2)``, add
    ``eta`` times the result to ``param`` and clear the gradient. Vectors are
    passed as ``(n, 1)`` views.
    """
    rho1 = 1.0 - rho
    rows, cols = grad.shape
    for i in range(rows):
        for j in range(cols):
            g = grad[i, j] / m
            v = rho * moment2[i, j] + rho1 * g * g
            moment2[i, j] = v
            param[i, j] += eta * g / math.sqrt(eps + v)
            grad[i, j] = 0.0


def as_column(vec: np.ndarray) -> np.ndarray:
    """View a 1-D buffer as an (n, 1) matrix sharing its memory."""
    return vec[:, np.newaxis]
