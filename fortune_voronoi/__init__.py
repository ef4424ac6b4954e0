from .beachline import ArcQuery, ArcSegment, BeachLine, Breakpoint, SweepContext
from .bounding_box import BoundingBox, BoxCornerError, BoxExtent, BoxSide, fit_extent
from .config import TolerancePolicy, VoronoiOptions, get_tolerance_policy, set_tolerance_policy
from .consistency import MeshWarning, check_mesh, euler_characteristic
from .dcel import EdgeKind, Face, HalfEdge, Mesh, Vertex, VertexKind, format_mesh
from .errors import (
    EmptyQueueError,
    InvariantViolation,
    UnresolvedOriginError,
    UnsupportedGeometryError,
    ValidationError,
    VoronoiError,
)
from .events import CircleEvent, EventQueue, Site, SiteEvent
from .geometry import Circle, Point, circumcircle, midpoint, orientation, parabola_intersection
from .sweep import VoronoiDiagram, build_voronoi
from .validate import validate_sites

__all__ = [
    'ArcQuery',
    'ArcSegment',
    'BeachLine',
    'Breakpoint',
    'SweepContext',
    'BoundingBox',
    'BoxSide',
    'BoxCornerError',
    'BoxExtent',
    'fit_extent',
    'TolerancePolicy',
    'VoronoiOptions',
    'get_tolerance_policy',
    'set_tolerance_policy',
    'MeshWarning',
    'check_mesh',
    'euler_characteristic',
    'EdgeKind',
    'Face',
    'HalfEdge',
    'Mesh',
    'Vertex',
    'VertexKind',
    'format_mesh',
    'EmptyQueueError',
    'InvariantViolation',
    'UnresolvedOriginError',
    'UnsupportedGeometryError',
    'ValidationError',
    'VoronoiError',
    'CircleEvent',
    'EventQueue',
    'Site',
    'SiteEvent',
    'Circle',
    'Point',
    'circumcircle',
    'midpoint',
    'orientation',
    'parabola_intersection',
    'VoronoiDiagram',
    'build_voronoi',
    'validate_sites',
]
