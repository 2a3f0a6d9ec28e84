"""
Flow parameters.

A single immutable record holding everything a run needs: canvas size,
seed, force and faucet counts, and the distributions every random
quantity is drawn from.  Validated once at construction; the simulation
never re-checks it.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import math
import numbers
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .distributions import (
    DISTRIBUTION_TYPES,
    Constant,
    Distribution,
    Exp,
    LogNormal,
    Normal,
    distribution_from_dict,
    distribution_to_dict,
    log_dist,
)
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

FORCE_KINDS = ("inward", "outward", "linear")
FAUCET_PLACEMENTS = ("center", "uniform")

_COUNT_FIELDS = ("size", "seed", "num_forces", "num_faucets", "num_streams")
_DIST_FIELDS = (
    "force_strength_dist",
    "force_spread_dist",
    "faucet_color_center_dist",
    "faucet_color_spread_dist",
    "faucet_position_spread_dist",
    "faucet_velocity_spread_dist",
    "decay_dist",
)


@dataclass(frozen=True)
class FlowParams:
    """All knobs of a run.

    Defaults reproduce the classic 1000 px, 100k stream image.

    Attributes:
        size:             Canvas side in pixels (the canvas is square).
        seed:             Initialiser for the run's random stream.
        max_decay_factor: Upper clamp on each stream's decay factor; one
                          unit of decay factor buys ``size`` pixels of travel.
        velocity_cap:     Per-axis velocity saturation (px / step).
        color_cap:        Per-channel colour saturation.
        fade_efolds:      Intensity lost (in e-folds) over a full lifetime.
        faucet_placement: ``"center"`` or ``"uniform"``.
        force_kinds:      Kinds forces are drawn from.
    """
    size: int = 1000
    seed: int = 0

    # Forces
    num_forces: int = 200
    force_strength_dist: Distribution = log_dist(10.0, 2.0)
    force_spread_dist: Distribution = log_dist(200.0, 2.0)
    force_kinds: Tuple[str, ...] = FORCE_KINDS

    # Faucets
    num_faucets: int = 40
    faucet_color_center_dist: Distribution = Normal(0.0, 0.03)
    faucet_color_spread_dist: Distribution = Exp(0.03)
    faucet_position_spread_dist: Distribution = Exp(80.0)
    faucet_velocity_spread_dist: Distribution = Exp(1.0)
    faucet_placement: str = "center"

    # Streams
    num_streams: int = 100000
    stream_position_jitter: float = 2.0
    stream_velocity_jitter: float = 0.25
    decay_dist: Distribution = Exp(1.0)
    max_decay_factor: float = 10.0
    fade_efolds: float = 10.0
    velocity_cap: float = 40.0
    color_cap: float = 2.0

    def __post_init__(self):
        for name in _COUNT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 0:
                raise ConfigurationError(f"{name} must be a non-negative integer, got {value!r}")
        if self.size < 1:
            raise ConfigurationError("size must be at least 1 pixel")
        if self.num_streams > 0 and self.num_faucets < 1:
            raise ConfigurationError("num_faucets must be at least 1 when streams are requested")

        for name in _DIST_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, DISTRIBUTION_TYPES):
                raise ConfigurationError(f"{name} must be a distribution, got {value!r}")
        if not _always_positive(self.force_spread_dist):
            raise ConfigurationError(
                "force_spread_dist must only yield positive spreads "
                f"(lognormal, exp or a positive constant), got {self.force_spread_dist!r}"
            )

        for name in ("velocity_cap", "color_cap", "fade_efolds"):
            _check_real(name, getattr(self, name), minimum=0.0, inclusive=False)
        for name in ("max_decay_factor", "stream_position_jitter", "stream_velocity_jitter"):
            _check_real(name, getattr(self, name), minimum=0.0, inclusive=True)

        if self.faucet_placement not in FAUCET_PLACEMENTS:
            raise ConfigurationError(
                f"faucet_placement must be one of {', '.join(FAUCET_PLACEMENTS)}, "
                f"got {self.faucet_placement!r}"
            )
        kinds = tuple(self.force_kinds)
        if not kinds or any(k not in FORCE_KINDS for k in kinds):
            raise ConfigurationError(
                f"force_kinds must be a non-empty subset of {', '.join(FORCE_KINDS)}, "
                f"got {self.force_kinds!r}"
            )
        object.__setattr__(self, "force_kinds", kinds)

    # ── derived ───────────────────────────────────────────────────────────

    @property
    def center(self) -> Tuple[float, float]:
        half = self.size / 2.0
        return (half, half)

    def replace(self, **changes: Any) -> "FlowParams":
        """Validated copy with *changes* applied."""
        return dataclasses.replace(self, **changes)

    # ── serialisation ─────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if f.name in _DIST_FIELDS:
                value = distribution_to_dict(value)
            elif f.name == "force_kinds":
                value = list(value)
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FlowParams":
        """Build parameters from a (possibly partial) dict.

        Missing keys keep their defaults; unknown keys are rejected.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown parameter(s): {', '.join(unknown)}")
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key in _DIST_FIELDS and isinstance(value, dict):
                value = distribution_from_dict(value)
            elif key == "force_kinds":
                value = tuple(value)
            kwargs[key] = value
        return cls(**kwargs)


def _always_positive(dist: Distribution) -> bool:
    if isinstance(dist, Constant):
        return dist.value > 0
    return isinstance(dist, (LogNormal, Exp))


def _check_real(name: str, value: Any, minimum: float, inclusive: bool) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not math.isfinite(value):
        raise ConfigurationError(f"{name} must be a finite number, got {value!r}")
    if value < minimum or (not inclusive and value == minimum):
        op = ">=" if inclusive else ">"
        raise ConfigurationError(f"{name} must be {op} {minimum}, got {value!r}")


def load_params(path: str, **defaults: Any) -> FlowParams:
    """Load flow parameters from a JSON file.

    Keys in the file win over *defaults*; anything in neither keeps the
    ``FlowParams`` default.
    """
    logger.info("Loading parameters from %s", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.error("Parameter file not found: %s", path)
        raise
    except json.JSONDecodeError:
        logger.error("Invalid JSON in parameter file: %s", path)
        raise
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a JSON object at top level")
    merged = dict(defaults)
    merged.update(data)
    return FlowParams.from_dict(merged)


def save_params(params: FlowParams, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(params.to_dict(), f, indent=2)
    logger.info("Saved parameters to %s", path)
