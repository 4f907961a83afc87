"""Utility helpers."""
from __future__ import annotations
import numpy as np


def one_hot(labels: np.ndarray, num_classes: int) -> np.ndarray:
    """Convert integer labels to one-hot float64 rows."""
    labels = np.asarray(labels).reshape(-1)
    y = np.zeros((labels.size, num_classes), dtype=np.float64)
    y[np.arange(labels.size), labels] = 1
    return y
