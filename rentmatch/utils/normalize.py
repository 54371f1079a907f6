"""Normalization helpers shared by the scoring and insight code."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class Bounds:
    minimum: float
    maximum: float

    def clamp(self, value: float) -> float:
        return max(self.minimum, min(self.maximum, value))


SCORE_BOUNDS = Bounds(0.0, 100.0)


def saturating(value: Optional[float], divisor: float, cap: float) -> float:
    """Linear ramp ``value / divisor`` capped at ``cap``; missing or negative input gives 0."""

    if value is None or divisor <= 0 or not np.isfinite(value) or value <= 0:
        return 0.0
    return float(min(cap, value / divisor))


def ratio(value: float, reference: Optional[float]) -> Optional[float]:
    """Return ``value / reference`` or None when the reference is unusable."""

    if reference is None or not np.isfinite(reference) or reference <= 0:
        return None
    return float(value / reference)


def normalise_key(value: Optional[str]) -> str:
    """Lowercase, fold `_` and `-` into spaces and collapse whitespace."""

    if value is None:
        return ""
    text = str(value).strip().lower().replace("_", " ").replace("-", " ")
    return " ".join(text.split())


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, matching cash rounding."""

    return int(np.floor(value + 0.5))


__all__ = ["Bounds", "SCORE_BOUNDS", "normalise_key", "saturating", "ratio", "round_half_up"]
