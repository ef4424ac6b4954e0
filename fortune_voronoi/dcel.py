"""Doubly connected edge list stored as an arena of records.

Vertices, half-edges and faces are addressed by integer handles into the
lists owned by :class:`Mesh`. Records never hold references to each other,
only handles, so twin/next/prev cycles are plain integers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .errors import InvariantViolation
from .geometry import Point, Vector

logger = logging.getLogger(__name__)


class EdgeKind(str, Enum):
    INTERIOR = "interior"
    BOUNDARY = "boundary"


class VertexKind(str, Enum):
    VORONOI = "voronoi"
    BOX = "box"


@dataclass
class Vertex:
    point: Point
    kind: VertexKind = VertexKind.VORONOI
    edge: Optional[int] = None


@dataclass
class HalfEdge:
    twin: int
    kind: EdgeKind
    direction: Vector = (0.0, 0.0)
    origin: Optional[int] = None
    next: Optional[int] = None
    prev: Optional[int] = None
    face: Optional[int] = None


@dataclass
class Face:
    """A cell of the subdivision; ``site`` is ``None`` for the unbounded face."""

    site: Optional[Point] = None
    outer: Optional[int] = None
    inner: List[int] = field(default_factory=list)

    @property
    def bounded(self) -> bool:
        return self.site is not None


class Mesh:
    """Arena owning every vertex, half-edge and face of a subdivision."""

    def __init__(self) -> None:
        self.vertices: List[Vertex] = []
        self.edges: List[HalfEdge] = []
        self.faces: List[Face] = [Face()]
        self.unbounded_face = 0

    # -- construction -------------------------------------------------
    def add_vertex(self, point: Point, kind: VertexKind = VertexKind.VORONOI, edge: Optional[int] = None) -> int:
        self.vertices.append(Vertex(point=point, kind=kind, edge=edge))
        return len(self.vertices) - 1

    def add_face(self, site: Point) -> int:
        self.faces.append(Face(site=site))
        return len(self.faces) - 1

    def add_edge_pair(self, kind: EdgeKind, direction: Vector = (0.0, 0.0)) -> Tuple[int, int]:
        """Create two half-edges that are each other's twin; the second runs against ``direction``."""

        first = len(self.edges)
        second = first + 1
        dx, dy = direction
        self.edges.append(HalfEdge(twin=second, kind=kind, direction=(dx, dy)))
        self.edges.append(HalfEdge(twin=first, kind=kind, direction=(-dx, -dy)))
        return first, second

    def link(self, edge: int, following: int) -> None:
        """Make ``following`` the successor of ``edge`` on their shared cycle."""

        self.edges[edge].next = following
        self.edges[following].prev = edge

    def set_origin(self, edge: int, vertex: int) -> None:
        self.edges[edge].origin = vertex

    def set_face(self, edge: int, face: int, *, claim_outer: bool = True) -> None:
        self.edges[edge].face = face
        record = self.faces[face]
        if claim_outer and record.bounded and record.outer is None:
            record.outer = edge

    # -- queries ------------------------------------------------------
    def twin(self, edge: int) -> int:
        return self.edges[edge].twin

    def origin_point(self, edge: int) -> Optional[Point]:
        origin = self.edges[edge].origin
        if origin is None:
            return None
        return self.vertices[origin].point

    def destination_point(self, edge: int) -> Optional[Point]:
        return self.origin_point(self.edges[edge].twin)

    def bounded_faces(self) -> List[int]:
        return [idx for idx, face in enumerate(self.faces) if face.bounded]

    def interior_edge_pairs(self) -> List[Tuple[int, int]]:
        pairs = []
        for idx, edge in enumerate(self.edges):
            if edge.kind is EdgeKind.INTERIOR and idx < edge.twin:
                pairs.append((idx, edge.twin))
        return pairs

    def voronoi_vertices(self) -> List[int]:
        return [idx for idx, vertex in enumerate(self.vertices) if vertex.kind is VertexKind.VORONOI]

    def coordinates(self) -> np.ndarray:
        """Vertex coordinates as an ``(n, 2)`` array in handle order."""

        if not self.vertices:
            return np.zeros((0, 2), dtype=float)
        return np.array([vertex.point.as_tuple() for vertex in self.vertices], dtype=float)

    def cycle(self, start: int) -> Iterator[int]:
        """Yield the half-edges of the cycle through ``start`` by following ``next``."""

        edge = start
        for _ in range(len(self.edges)):
            yield edge
            following = self.edges[edge].next
            if following is None:
                raise InvariantViolation(f"half-edge e{edge} has no successor")
            if following == start:
                return
            edge = following
        raise InvariantViolation(f"cycle through half-edge e{start} does not close")

    def face_cycle(self, face: int) -> List[int]:
        outer = self.faces[face].outer
        if outer is None:
            return []
        return list(self.cycle(outer))

    def face_polygon(self, face: int) -> List[Point]:
        points = []
        for edge in self.face_cycle(face):
            point = self.origin_point(edge)
            if point is None:
                raise InvariantViolation(f"half-edge e{edge} on face f{face} has no origin")
            points.append(point)
        return points

    # -- finalization -------------------------------------------------
    def propagate_faces(self) -> None:
        """Complete incident-face assignment along every cycle that touches a bounded face."""

        assigned = 0
        visited = set()
        for idx, edge in enumerate(self.edges):
            if idx in visited or edge.face is None or not self.faces[edge.face].bounded:
                continue
            for member in self.cycle(idx):
                visited.add(member)
                if self.edges[member].face is None:
                    self.edges[member].face = edge.face
                    assigned += 1
        logger.debug("Face propagation assigned %d half-edges", assigned)


def _vertex_name(mesh: Mesh, vertex: Optional[int]) -> str:
    if vertex is None:
        return "nil"
    prefix = "b" if mesh.vertices[vertex].kind is VertexKind.BOX else "v"
    return f"{prefix}{vertex}"


def _edge_name(edge: Optional[int]) -> str:
    return "nil" if edge is None else f"e{edge}"


def _face_name(mesh: Mesh, face: Optional[int]) -> str:
    if face is None:
        return "nil"
    return f"f{face}" if mesh.faces[face].bounded else "uf"


def format_mesh(mesh: Mesh) -> str:
    """Render the vertex, face and half-edge tables in textbook DCEL layout."""

    lines = ["Vertex  Coordinates  IncidentEdge"]
    for idx, vertex in enumerate(mesh.vertices):
        lines.append(
            f"{_vertex_name(mesh, idx)}  ({vertex.point.x:.6g}, {vertex.point.y:.6g})  {_edge_name(vertex.edge)}"
        )
    lines.append("")
    lines.append("Face  OuterComponent  InnerComponents")
    for idx, face in enumerate(mesh.faces):
        if not face.inner:
            inner = "nil"
        elif len(face.inner) == 1:
            inner = _edge_name(face.inner[0])
        else:
            inner = "[" + "; ".join(_edge_name(edge) for edge in face.inner) + "]"
        lines.append(f"{_face_name(mesh, idx)}  {_edge_name(face.outer)}  {inner}")
    lines.append("")
    lines.append("HalfEdge  Origin  Twin  IncidentFace  Next  Prev")
    for idx, edge in enumerate(mesh.edges):
        lines.append(
            "  ".join(
                [
                    _edge_name(idx),
                    _vertex_name(mesh, edge.origin),
                    _edge_name(edge.twin),
                    _face_name(mesh, edge.face),
                    _edge_name(edge.next),
                    _edge_name(edge.prev),
                ]
            )
        )
    return "\n".join(lines)


__all__ = [
    "EdgeKind",
    "Face",
    "HalfEdge",
    "Mesh",
    "Vertex",
    "VertexKind",
    "format_mesh",
]
