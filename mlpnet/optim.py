"""Optimizers (numpy buffers, numba kernels).

An optimizer is a stateless update policy. Everything that has to survive
between updates (the RMSProp second moments) lives in the layer it belongs
to, so one optimizer instance can drive any number of layers.
"""
from __future__ import annotations
from numbers import Integral, Real

from .kernels import rmsprop_update, as_column
from .schedule import ScheduleLike, as_schedule, constant


class Optimizer:
    """Update rule applied to one trainable layer per mini-batch."""

    def update(self, layer, batch_size: int, step: int) -> None:
        """Apply the accumulated gradient of ``layer`` to its parameters.

        Args:
            layer: A built trainable layer whose gradient buffers hold the sum of
                per-example gradients over the batch.
            batch_size: Number of examples summed into the gradient buffers.
            step: Current training step, passed to the learning-rate schedule.
        """
        raise NotImplementedError


def _check_batch_and_step(batch_size, step):
    if isinstance(batch_size, bool) or not isinstance(batch_size, Integral) or batch_size < 1:
        raise ValueError(f"batch_size must be an integer >= 1, got {batch_size!r}")
    if isinstance(step, bool) or not isinstance(step, Integral) or step < 0:
        raise ValueError(f"step must be an integer >= 0, got {step!r}")


class RMSProp(Optimizer):
    """RMSProp with a scheduled learning rate.

    Each gradient element is averaged over the batch, folded into a running
    mean of squared gradients and divided by its root before being applied,
    so large persistent gradients take damped steps and small ones are
    amplified.

    Args:
        lr: Learning-rate schedule. A number or schedule string is accepted
            too (see :func:`mlpnet.schedule.as_schedule`).
        rho: Decay of the squared-gradient average, in ``[0, 1)``.
        eps: Stabilizer added under the square root, ``> 0``.
    """

    def __init__(self, lr: ScheduleLike = constant(0.001), rho: float = 0.9, eps: float = 1e-6):
        if isinstance(rho, bool) or not isinstance(rho, Real) or not 0.0 <= rho < 1.0:
            raise ValueError(f"rho must be in [0, 1), got {rho!r}")
        if isinstance(eps, bool) or not isinstance(eps, Real) or not eps > 0.0:
            raise ValueError(f"eps must be > 0, got {eps!r}")
        self._schedule = as_schedule(lr)
        self._rho = float(rho)
        self._eps = float(eps)

    @property
    def schedule(self):
        return self._schedule

    @property
    def rho(self) -> float:
        return self._rho

    @property
    def eps(self) -> float:
        return self._eps

    def __repr__(self) -> str:
        return f"RMSProp({self._schedule!r}, {self._rho:f}, {self._eps:f})"

    def update(self, layer, batch_size: int, step: int) -> None:
        _check_batch_and_step(batch_size, step)
        # the kernel does no bounds checking, so the layer's shapes must agree
        layer.check_buffers()
        # undivided rate: the normalization already absorbs gradient scale
        eta = float(self._schedule(step))

        m = float(batch_size)
        rmsprop_update(layer.weight, layer.weight_grad, layer.weight_moment2, m, self._rho, self._eps, eta)
        rmsprop_update(as_column(layer.bias), as_column(layer.bias_grad), as_column(layer.bias_moment2),
                       m, self._rho, self._eps, eta)


NAME2OPT = {'rmsprop': RMSProp}
