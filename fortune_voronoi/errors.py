"""Exceptions raised while building a Voronoi diagram."""

from __future__ import annotations

from typing import Optional


class VoronoiError(RuntimeError):
    """Base class for construction faults."""


class ValidationError(VoronoiError, ValueError):
    """Raised when the input sites violate a precondition."""


class InvariantViolation(VoronoiError):
    """Raised when an internal invariant is broken; indicates a bug."""


class EmptyQueueError(InvariantViolation):
    """Raised when popping from an exhausted event queue."""


class UnresolvedOriginError(VoronoiError):
    """Raised when a half-edge is left without an origin after finalization."""

    def __init__(self, message: str, edge: Optional[int] = None):
        super().__init__(message)
        self.edge = edge


class UnsupportedGeometryError(VoronoiError):
    """Raised for configurations the bounding box cannot splice."""


__all__ = [
    "VoronoiError",
    "ValidationError",
    "InvariantViolation",
    "EmptyQueueError",
    "UnresolvedOriginError",
    "UnsupportedGeometryError",
]
