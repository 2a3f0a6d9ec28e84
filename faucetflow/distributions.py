"""
Scalar probability distributions used throughout the flow parameters.

Each distribution is a small frozen dataclass with a ``sample(rng)`` method
taking a ``numpy.random.Generator``.  Parameters are validated on
construction so a bad distribution fails before any simulation starts.

Includes helpers to build a log-normal from a median and multiplicative
spread, and to convert distributions to/from plain dicts for JSON configs.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Any, Dict, Union

import numpy as np

from .errors import ConfigurationError


def _require_finite(name: str, value: float) -> None:
    if not isinstance(value, numbers.Real) or not math.isfinite(value):
        raise ConfigurationError(f"{name} must be a finite number, got {value!r}")


def _require_positive(name: str, value: float) -> None:
    _require_finite(name, value)
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {value!r}")


# ---------------------------------------------------------------------------
# Distributions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Normal:
    """Gaussian with the given mean and standard deviation."""
    mean: float
    std_dev: float

    def __post_init__(self):
        _require_finite("Normal.mean", self.mean)
        _require_positive("Normal.std_dev", self.std_dev)

    def sample(self, rng: np.random.Generator) -> float:
        return float(rng.normal(self.mean, self.std_dev))


@dataclass(frozen=True)
class LogNormal:
    """exp() of a draw from the nested normal, so always strictly positive."""
    norm: Normal

    def __post_init__(self):
        if not isinstance(self.norm, Normal):
            raise ConfigurationError(f"LogNormal.norm must be a Normal, got {self.norm!r}")

    def sample(self, rng: np.random.Generator) -> float:
        return math.exp(self.norm.sample(rng))


@dataclass(frozen=True)
class Exp:
    """Exponential with mean ``lambda_inverse`` (rate 1 / lambda_inverse)."""
    lambda_inverse: float

    def __post_init__(self):
        _require_positive("Exp.lambda_inverse", self.lambda_inverse)

    def sample(self, rng: np.random.Generator) -> float:
        return float(rng.exponential(self.lambda_inverse))


@dataclass(frozen=True)
class Constant:
    """Degenerate distribution that always yields ``value``.

    Draws nothing from the generator.
    """
    value: float

    def __post_init__(self):
        _require_finite("Constant.value", self.value)

    def sample(self, rng: np.random.Generator) -> float:
        return float(self.value)


Distribution = Union[Normal, LogNormal, Exp, Constant]

DISTRIBUTION_TYPES = (Normal, LogNormal, Exp, Constant)


def sample(dist: Distribution, rng: np.random.Generator) -> float:
    """Draw one scalar from *dist*."""
    return dist.sample(rng)


def log_dist(center: float, mult_spread: float) -> LogNormal:
    """Log-normal with median *center* and multiplicative spread *mult_spread*.

    One standard deviation multiplies or divides the median by
    *mult_spread*, so it must be greater than 1.
    """
    _require_positive("log_dist center", center)
    _require_positive("log_dist mult_spread", mult_spread)
    if mult_spread <= 1.0:
        raise ConfigurationError(f"log_dist mult_spread must be > 1, got {mult_spread!r}")
    return LogNormal(Normal(math.log(center), math.log(mult_spread)))


# ── dict conversion ──────────────────────────────────────────────────────

def distribution_to_dict(dist: Distribution) -> Dict[str, Any]:
    if isinstance(dist, Normal):
        return {"kind": "normal", "mean": dist.mean, "std_dev": dist.std_dev}
    if isinstance(dist, LogNormal):
        return {"kind": "lognormal", "mean": dist.norm.mean, "std_dev": dist.norm.std_dev}
    if isinstance(dist, Exp):
        return {"kind": "exp", "mean": dist.lambda_inverse}
    if isinstance(dist, Constant):
        return {"kind": "constant", "value": dist.value}
    raise TypeError(f"Not a distribution: {dist!r}")


def distribution_from_dict(data: Dict[str, Any]) -> Distribution:
    """Build a distribution from a ``{"kind": ..., ...}`` mapping.

    Log-normals may be given either as the underlying normal
    (``mean``/``std_dev``) or as ``center``/``mult_spread``.
    """
    if not isinstance(data, dict) or "kind" not in data:
        raise ConfigurationError(f"Distribution must be a dict with a 'kind', got {data!r}")
    kind = str(data["kind"]).lower()
    try:
        if kind == "normal":
            return Normal(data["mean"], data["std_dev"])
        if kind == "lognormal":
            if "center" in data:
                return log_dist(data["center"], data["mult_spread"])
            return LogNormal(Normal(data["mean"], data["std_dev"]))
        if kind == "exp":
            return Exp(data["mean"])
        if kind == "constant":
            return Constant(data["value"])
    except KeyError as exc:
        raise ConfigurationError(f"Distribution '{kind}' is missing field {exc}") from exc
    raise ConfigurationError(
        f"Unknown distribution kind '{kind}'. Available: normal, lognormal, exp, constant"
    )
