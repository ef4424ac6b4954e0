"""Configuration helpers for diagram construction."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass

from .errors import ValidationError


@dataclass
class TolerancePolicy:
    """Single home for floating-point degeneracy comparisons."""

    eps: float = 1e-9

    def is_zero(self, value: float) -> bool:
        return abs(value) <= self.eps

    def is_close(self, a: float, b: float) -> bool:
        return math.isclose(a, b, rel_tol=0.0, abs_tol=self.eps)

    def sign(self, value: float) -> int:
        if value > self.eps:
            return 1
        if value < -self.eps:
            return -1
        return 0


@dataclass
class VoronoiOptions:
    """Construction options."""

    box_margin: float = 1.0
    validate: bool = True

    def __post_init__(self) -> None:
        if not (math.isfinite(self.box_margin) and self.box_margin > 0.0):
            raise ValidationError(f"box_margin must be a positive finite number, got {self.box_margin!r}")


_TOLERANCE_POLICY = TolerancePolicy()


def get_tolerance_policy() -> TolerancePolicy:
    return copy.deepcopy(_TOLERANCE_POLICY)


def set_tolerance_policy(policy: TolerancePolicy) -> None:
    global _TOLERANCE_POLICY
    _TOLERANCE_POLICY = copy.deepcopy(policy)


__all__ = [
    "TolerancePolicy",
    "VoronoiOptions",
    "get_tolerance_policy",
    "set_tolerance_policy",
]
