"""Rectangle that terminates the unbounded edges of a diagram."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .config import TolerancePolicy, get_tolerance_policy
from .dcel import EdgeKind, Mesh, VertexKind
from .errors import InvariantViolation, UnsupportedGeometryError
from .geometry import Point, Vector

logger = logging.getLogger(__name__)

Ray = Tuple[Point, Vector]

# growth of a struck side per fitting round, as a fraction of the margin
_GROWTH_STEP = 0.3819660112501051
_FIT_ATTEMPTS = 8


class BoxSide(str, Enum):
    BOTTOM = "bottom"
    RIGHT = "right"
    TOP = "top"
    LEFT = "left"


_SIDE_ORDER = (BoxSide.BOTTOM, BoxSide.RIGHT, BoxSide.TOP, BoxSide.LEFT)


class BoxCornerError(UnsupportedGeometryError):
    """A ray leaves the box through a corner; ``side`` is the side to push outward."""

    def __init__(self, message: str, side: BoxSide):
        super().__init__(message)
        self.side = side


@dataclass(frozen=True)
class BoxExtent:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def contains(self, point: Point) -> bool:
        return self.min_x < point.x < self.max_x and self.min_y < point.y < self.max_y

    def grown(self, side: BoxSide, amount: float) -> "BoxExtent":
        if side is BoxSide.BOTTOM:
            return replace(self, min_y=self.min_y - amount)
        if side is BoxSide.RIGHT:
            return replace(self, max_x=self.max_x + amount)
        if side is BoxSide.TOP:
            return replace(self, max_y=self.max_y + amount)
        return replace(self, min_x=self.min_x - amount)

    def exit(self, origin: Point, direction: Vector, tol: TolerancePolicy) -> Tuple[Point, BoxSide]:
        """Return where the ray from ``origin`` along ``direction`` leaves the extent."""

        if not self.contains(origin):
            raise InvariantViolation(f"ray origin {origin} lies outside the bounding box")
        dx, dy = direction
        if tol.is_zero(dx) and tol.is_zero(dy):
            raise UnsupportedGeometryError(f"ray from {origin} has no direction")

        tx = math.inf
        if dx > 0.0:
            tx = (self.max_x - origin.x) / dx
        elif dx < 0.0:
            tx = (self.min_x - origin.x) / dx
        ty = math.inf
        if dy > 0.0:
            ty = (self.max_y - origin.y) / dy
        elif dy < 0.0:
            ty = (self.min_y - origin.y) / dy

        x_side = BoxSide.RIGHT if dx > 0.0 else BoxSide.LEFT
        y_side = BoxSide.TOP if dy > 0.0 else BoxSide.BOTTOM
        corner = f"ray from {origin} along {direction} hits a bounding box corner"
        if math.isfinite(tx) and math.isfinite(ty) and tol.is_close(tx, ty):
            raise BoxCornerError(corner, x_side)

        if tx < ty:
            hit = Point(self.max_x if dx > 0.0 else self.min_x, origin.y + tx * dy)
            if tol.is_close(hit.y, self.min_y) or tol.is_close(hit.y, self.max_y):
                raise BoxCornerError(corner, x_side)
            return hit, x_side
        hit = Point(origin.x + ty * dx, self.max_y if dy > 0.0 else self.min_y)
        if tol.is_close(hit.x, self.min_x) or tol.is_close(hit.x, self.max_x):
            raise BoxCornerError(corner, y_side)
        return hit, y_side


def fit_extent(
    points: Sequence[Point],
    margin: float,
    rays: Iterable[Ray] = (),
    tolerance: Optional[TolerancePolicy] = None,
) -> BoxExtent:
    """Extent holding ``points`` with ``margin`` clearance, grown until no ray leaves through a corner."""

    if margin <= 0.0:
        raise ValueError("bounding box margin must be positive")
    if not points:
        raise ValueError("bounding box needs at least one point")
    tol = tolerance or get_tolerance_policy()
    rays = list(rays)
    coords = np.array([point.as_tuple() for point in points], dtype=float)
    lo = coords.min(axis=0)
    hi = coords.max(axis=0)
    extent = BoxExtent(
        float(lo[0]) - margin,
        float(lo[1]) - margin,
        float(hi[0]) + margin,
        float(hi[1]) + margin,
    )

    attempt = 0
    while True:
        struck = set()
        for origin, direction in rays:
            try:
                extent.exit(origin, direction, tol)
            except BoxCornerError as exc:
                struck.add(exc.side)
        if not struck:
            return extent
        if attempt == _FIT_ATTEMPTS:
            raise UnsupportedGeometryError(
                f"no bounding box within {_FIT_ATTEMPTS} growth steps avoids every corner"
            )
        attempt += 1
        step = margin * _GROWTH_STEP * attempt
        logger.debug("Growing box sides %s by %g to clear corners", sorted(side.value for side in struck), step)
        for side in struck:
            extent = extent.grown(side, step)


class BoundingBox:
    """Axis-aligned box with an inner (counter-clockwise) and outer boundary cycle.

    The inner cycle faces the diagram and ends up split among the cells; the
    outer cycle is the inner component of the mesh's unbounded face.
    """

    def __init__(
        self,
        mesh: Mesh,
        min_x: float,
        min_y: float,
        max_x: float,
        max_y: float,
        tolerance: Optional[TolerancePolicy] = None,
    ) -> None:
        if not (min_x < max_x and min_y < max_y):
            raise ValueError(f"degenerate bounding box ({min_x}, {min_y}) - ({max_x}, {max_y})")
        self.extent = BoxExtent(float(min_x), float(min_y), float(max_x), float(max_y))
        self.tolerance = tolerance or get_tolerance_policy()
        self._mesh = mesh

        corners = [
            Point(self.min_x, self.min_y),
            Point(self.max_x, self.min_y),
            Point(self.max_x, self.max_y),
            Point(self.min_x, self.max_y),
        ]
        self.corners: List[int] = [mesh.add_vertex(corner, VertexKind.BOX) for corner in corners]

        self._sides: Dict[int, BoxSide] = {}
        inner_edges: List[int] = []
        outer_edges: List[int] = []
        for idx, side in enumerate(_SIDE_ORDER):
            start = corners[idx]
            end = corners[(idx + 1) % 4]
            inner, outer = mesh.add_edge_pair(EdgeKind.BOUNDARY, (end.x - start.x, end.y - start.y))
            mesh.set_origin(inner, self.corners[idx])
            mesh.set_origin(outer, self.corners[(idx + 1) % 4])
            mesh.set_face(outer, mesh.unbounded_face, claim_outer=False)
            mesh.vertices[self.corners[idx]].edge = inner
            self._sides[inner] = side
            inner_edges.append(inner)
            outer_edges.append(outer)

        for idx in range(4):
            mesh.link(inner_edges[idx], inner_edges[(idx + 1) % 4])
            mesh.link(outer_edges[(idx + 1) % 4], outer_edges[idx])

        self.inner_edge = inner_edges[0]
        self.outer_edge = outer_edges[0]
        mesh.faces[mesh.unbounded_face].inner.append(self.outer_edge)

    @classmethod
    def from_points(
        cls,
        mesh: Mesh,
        points: Sequence[Point],
        margin: float,
        tolerance: Optional[TolerancePolicy] = None,
        rays: Iterable[Ray] = (),
    ) -> "BoundingBox":
        """Box enclosing ``points`` with at least ``margin`` of clearance that no ray in ``rays`` leaves through a corner."""

        extent = fit_extent(points, margin, rays, tolerance)
        logger.debug(
            "Bounding box x=[%g, %g] y=[%g, %g]", extent.min_x, extent.max_x, extent.min_y, extent.max_y
        )
        return cls(mesh, extent.min_x, extent.min_y, extent.max_x, extent.max_y, tolerance=tolerance)

    @property
    def min_x(self) -> float:
        return self.extent.min_x

    @property
    def min_y(self) -> float:
        return self.extent.min_y

    @property
    def max_x(self) -> float:
        return self.extent.max_x

    @property
    def max_y(self) -> float:
        return self.extent.max_y

    def contains(self, point: Point) -> bool:
        return self.extent.contains(point)

    def side_of(self, edge: int) -> BoxSide:
        """Side of the box that the inner half-edge ``edge`` runs along."""

        return self._sides[edge]

    def intersect(self, origin: Point, direction: Vector) -> Tuple[Point, int]:
        """Return where the ray from ``origin`` leaves the box and the inner half-edge it strikes."""

        hit, side = self.extent.exit(origin, direction, self.tolerance)
        return hit, self._edge_containing(self._mesh, hit, side)

    def connect(self, mesh: Mesh, origin_point: Point, open_edge: int) -> int:
        """Terminate ``open_edge`` at the box and splice it into the boundary cycle.

        ``open_edge`` must already have its origin; its twin receives the new
        box vertex as origin. Returns the new vertex handle.
        """

        hit, struck = self.intersect(origin_point, mesh.edges[open_edge].direction)
        twin = mesh.twin(open_edge)
        vertex = mesh.add_vertex(hit, VertexKind.BOX, edge=twin)
        mesh.set_origin(twin, vertex)
        self.splice(mesh, open_edge, vertex, struck)
        return vertex

    def splice(self, mesh: Mesh, arriving: int, vertex: int, inner: int) -> None:
        """Split the inner box edge ``inner`` at ``vertex`` and route ``arriving`` and its twin through it."""

        side = self._sides[inner]
        outer = mesh.twin(inner)
        far = mesh.edges[outer].origin

        tail, tail_twin = mesh.add_edge_pair(EdgeKind.BOUNDARY, mesh.edges[inner].direction)
        mesh.set_origin(tail, vertex)
        mesh.set_origin(tail_twin, far)
        mesh.set_origin(outer, vertex)
        mesh.edges[tail].face = mesh.edges[inner].face
        mesh.edges[tail_twin].face = mesh.edges[outer].face

        following = mesh.edges[inner].next
        before = mesh.edges[outer].prev
        if following is None or before is None:
            raise InvariantViolation(f"box edge e{inner} is not linked into its cycles")

        mesh.link(tail, following)
        mesh.link(inner, mesh.twin(arriving))
        mesh.link(arriving, tail)

        mesh.link(before, tail_twin)
        mesh.link(tail_twin, outer)

        if far is not None and mesh.vertices[far].edge == outer:
            mesh.vertices[far].edge = tail_twin
        self._sides[tail] = side
        logger.debug(
            "Spliced e%d into %s box edge e%d at %s", arriving, side.value, inner, mesh.vertices[vertex].point
        )

    def wire_single_face(self, mesh: Mesh, face: int) -> None:
        """Make the whole inner cycle the boundary of ``face``."""

        for edge in mesh.cycle(self.inner_edge):
            mesh.edges[edge].face = face
        mesh.faces[face].outer = self.inner_edge

    def _edge_containing(self, mesh: Mesh, point: Point, side: BoxSide) -> int:
        horizontal = side in (BoxSide.BOTTOM, BoxSide.TOP)
        coord = point.x if horizontal else point.y
        tol = self.tolerance
        for edge, edge_side in self._sides.items():
            if edge_side is not side:
                continue
            start = mesh.origin_point(edge)
            end = mesh.destination_point(edge)
            if start is None or end is None:
                raise InvariantViolation(f"box edge e{edge} has an unresolved endpoint")
            a, b = (start.x, end.x) if horizontal else (start.y, end.y)
            lo, hi = min(a, b), max(a, b)
            if tol.is_close(coord, lo) or tol.is_close(coord, hi):
                raise UnsupportedGeometryError(f"box point {point} coincides with an existing box vertex")
            if lo < coord < hi:
                return edge
        raise InvariantViolation(f"no {side.value} box edge contains {point}")


__all__ = ["BoundingBox", "BoxCornerError", "BoxExtent", "BoxSide", "fit_extent"]
