"""Learning-rate schedules.

A schedule maps an integer training step to a scalar learning rate. Schedules
are pure: they hold only their constructor arguments, so a single instance can
be queried from any number of layer updates at once.
"""
from __future__ import annotations
import math
import re
from bisect import bisect_left
from numbers import Real
from typing import Any, Callable, Sequence, Union

ScheduleLike = Union['Schedule', Callable[[int], float], float, str]


def _positive(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"{name} must be a real number, got {value!r}")
    value = float(value)
    if not value > 0:
        raise ValueError(f"{name} must be > 0, got {value}")
    return value


def _non_negative(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"{name} must be a real number, got {value!r}")
    value = float(value)
    if not value >= 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


def _steps(name: str, value: Any) -> int:
    if isinstance(value, bool) or int(value) != value or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return int(value)


class Schedule:
    """Base class for learning-rate schedules."""

    def __call__(self, step: int) -> float:
        raise NotImplementedError


class Constant(Schedule):
    def __init__(self, rate: float):
        self.rate = _positive('rate', rate)

    def __call__(self, step: int) -> float:
        return self.rate

    def __repr__(self) -> str:
        return f"constant({self.rate})"


class Piecewise(Schedule):
    """Piecewise constant rate.

    ``values[i]`` applies while ``step <= boundaries[i]``; ``values[-1]`` applies
    after the last boundary.
    """

    def __init__(self, boundaries: Sequence[int], values: Sequence[float]):
        if len(values) != len(boundaries) + 1:
            raise ValueError(
                f"piecewise needs len(values) == len(boundaries) + 1, got {len(values)} and {len(boundaries)}"
            )
        self.boundaries = [int(b) for b in boundaries]
        if any(a >= b for a, b in zip(self.boundaries, self.boundaries[1:])):
            raise ValueError(f"piecewise boundaries must be strictly increasing, got {self.boundaries}")
        self.values = [_positive('value', v) for v in values]

    def __call__(self, step: int) -> float:
        return self.values[bisect_left(self.boundaries, step)]

    def __repr__(self) -> str:
        bounds = ' '.join(str(b) for b in self.boundaries)
        values = ' '.join(str(v) for v in self.values)
        return f"piecewise({bounds}, {values})"


class Polynomial(Schedule):
    """Polynomial decay from ``initial`` to ``end`` over ``decay_steps``.

    With ``cycle`` the decay horizon is stretched to the next multiple of
    ``decay_steps`` instead of holding at ``end``.
    """

    def __init__(self, degree: float, initial: float, decay_steps: int, end: float = 0.0001, cycle: bool = False):
        self.degree = _positive('degree', degree)
        self.initial = _positive('initial', initial)
        self.decay_steps = _steps('decay_steps', decay_steps)
        self.end = _non_negative('end', end)
        self.cycle = bool(cycle)

    def __call__(self, step: int) -> float:
        if self.cycle:
            horizon = self.decay_steps * max(1, math.ceil(step / self.decay_steps))
            t = step
        else:
            horizon = self.decay_steps
            t = min(step, self.decay_steps)
        return (self.initial - self.end) * (1.0 - t / horizon) ** self.degree + self.end

    def __repr__(self) -> str:
        if self.degree == 1.0 and not self.cycle:
            return f"linear({self.initial}, {self.decay_steps}, {self.end})"
        return f"polynomial({self.degree}, {self.initial}, {self.decay_steps}, {self.end}, {self.cycle})"


class Inverse(Schedule):
    """``initial / (1 + decay_rate * step / decay_steps)``."""

    def __init__(self, initial: float, decay_steps: int, decay_rate: float = 1.0, staircase: bool = False):
        self.initial = _positive('initial', initial)
        self.decay_steps = _steps('decay_steps', decay_steps)
        self.decay_rate = _positive('decay_rate', decay_rate)
        self.staircase = bool(staircase)

    def __call__(self, step: int) -> float:
        t = step / self.decay_steps
        if self.staircase:
            t = math.floor(t)
        return self.initial / (1.0 + self.decay_rate * t)

    def __repr__(self) -> str:
        return f"inverse({self.initial}, {self.decay_steps}, {self.decay_rate}, {self.staircase})"


class Exponential(Schedule):
    """``initial * decay_rate ** (step / decay_steps)``."""

    def __init__(self, initial: float, decay_steps: int, decay_rate: float, staircase: bool = False):
        self.initial = _positive('initial', initial)
        self.decay_steps = _steps('decay_steps', decay_steps)
        self.decay_rate = _positive('decay_rate', decay_rate)
        self.staircase = bool(staircase)

    def __call__(self, step: int) -> float:
        t = step / self.decay_steps
        if self.staircase:
            t = math.floor(t)
        return self.initial * self.decay_rate ** t

    def __repr__(self) -> str:
        return f"exp({self.initial}, {self.decay_steps}, {self.decay_rate}, {self.staircase})"


def constant(rate: float) -> Constant:
    return Constant(rate)


def piecewise(boundaries: Sequence[int], values: Sequence[float]) -> Piecewise:
    return Piecewise(boundaries, values)


def linear(initial: float, decay_steps: int, end: float) -> Polynomial:
    return Polynomial(1.0, initial, decay_steps, end)


def polynomial(degree: float, initial: float, decay_steps: int, end: float = 0.0001, cycle: bool = False) -> Polynomial:
    return Polynomial(degree, initial, decay_steps, end, cycle)


def inverse(initial: float, decay_steps: int, decay_rate: float = 1.0, staircase: bool = False) -> Inverse:
    return Inverse(initial, decay_steps, decay_rate, staircase)


def exp(initial: float, decay_steps: int, decay_rate: float, staircase: bool = False) -> Exponential:
    return Exponential(initial, decay_steps, decay_rate, staircase)


NAME2SCHEDULE = {
    'constant': constant,
    'piecewise': piecewise,
    'linear': linear,
    'polynomial': polynomial,
    'inverse': inverse,
    'exp': exp,
}

_CALL = re.compile(r'^\s*([a-z]+)\s*\((.*)\)\s*$')


def _parse_arg(token: str):
    token = token.strip()
    lowered = token.lower()
    if lowered in ('true', 'false'):
        return lowered == 'true'
    try:
        return int(token)
    except ValueError:
        pass
    try:
        return float(token)
    except ValueError:
        raise ValueError(f"invalid schedule argument: {token!r}") from None


def parse_schedule(text: str) -> Schedule:
    """Build a schedule from its string form.

    Args:
        text: e.g. ``"constant(0.01)"``, ``"linear(0.01, 10000, 0.001)"``,
            ``"piecewise(1000 2000, 0.01 0.005 0.001)"`` or a bare number.

    Returns:
        The matching schedule.

    Raises:
        ValueError: If the name is unknown or the arguments are malformed.
    """
    try:
        rate = float(text)
    except ValueError:
        rate = None
    if rate is not None:
        return Constant(rate)
    match = _CALL.match(text)
    if match is None:
        raise ValueError(f"invalid schedule: {text!r}")
    name, body = match.group(1), match.group(2)
    if name not in NAME2SCHEDULE:
        raise ValueError(f"unknown schedule {name!r}, expected one of {sorted(NAME2SCHEDULE)}")
    parts = body.split(',')
    if name == 'piecewise':
        if len(parts) != 2:
            raise ValueError(f"piecewise expects 'boundaries, values', got {text!r}")
        boundaries = [int(_parse_arg(b)) for b in parts[0].split()]
        values = [float(_parse_arg(v)) for v in parts[1].split()]
        return piecewise(boundaries, values)
    if not body.strip():
        raise ValueError(f"{name} needs arguments, got {text!r}")
    args = [_parse_arg(p) for p in parts]
    try:
        return NAME2SCHEDULE[name](*args)
    except TypeError as e:
        raise ValueError(f"wrong arguments for {name}: {text!r} ({e})") from e


def as_schedule(value: ScheduleLike) -> Callable[[int], float]:
    """Coerce a schedule, callable, positive number or schedule string into a callable schedule."""
    if isinstance(value, Schedule):
        return value
    if isinstance(value, str):
        return parse_schedule(value)
    if isinstance(value, Real) and not isinstance(value, bool):
        return Constant(value)
    if callable(value):
        return value
    raise TypeError(f"cannot use {value!r} as a learning-rate schedule")
