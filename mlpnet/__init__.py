"""mlpnet - Minimal feed-forward network trained with RMSProp, built on numpy.

Provides:
- Dense and Activation layers owning their weights, raw gradients and RMSProp moments
- Optimizer contract and the RMSProp optimizer (numba-compiled elementwise kernel)
- Learning-rate schedules (constant, piecewise, polynomial, inverse, exp) and a string parser
- Losses (mse, categorical crossentropy)
- Sequential Model with compile, fit (tqdm progress), predict

Quick Start:
    from mlpnet import Model, Dense, Activation

    model = Model([Dense(16), Activation('tanh'), Dense(1)])
    model.compile(loss='mse', optimizer='rmsprop', lr='linear(0.01, 1000, 0.001)')
    history = model.fit(x, y, epochs=20, batch_size=32)
"""
from __future__ import annotations
import os as _os

__version__: str = "1.0.0"


def _auto_configure_threads() -> None:
    """Set BLAS / OpenMP thread counts to all available CPU cores if user
    hasn't specified them. Must run before NumPy loads heavy backends.

    Environment vars respected (won't override if already set):
    OMP_NUM_THREADS, OPENBLAS_NUM_THREADS, MKL_NUM_THREADS, NUMEXPR_NUM_THREADS.
    Disable by setting MLPNET_DISABLE_AUTO_THREADS=1.
    """
    if _os.environ.get('MLPNET_DISABLE_AUTO_THREADS') == '1':
        return
    cores: int = _os.cpu_count() or 1
    for var in ['OMP_NUM_THREADS', 'OPENBLAS_NUM_THREADS', 'MKL_NUM_THREADS', 'NUMEXPR_NUM_THREADS']:
        if var not in _os.environ:
            _os.environ[var] = str(cores)


_auto_configure_threads()

from . import layers, losses, optim, schedule, kernels, model, utils  # noqa: E402
from .model import Model  # noqa: E402
from .layers import Layer, Dense, Activation  # noqa: E402
from .optim import Optimizer, RMSProp  # noqa: E402
from .schedule import Schedule, parse_schedule  # noqa: E402

__all__ = [
    # Main classes
    'Model', 'Layer', 'Dense', 'Activation', 'Optimizer', 'RMSProp', 'Schedule', 'parse_schedule',
    # Submodules
    'layers', 'losses', 'optim', 'schedule', 'kernels', 'model', 'utils',
]
