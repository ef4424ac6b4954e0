"""Fortune's sweep: event loop, site/circle handlers and finalization."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from .beachline import ArcSegment, BeachLine, Breakpoint, SweepContext, heads_right
from .bounding_box import BoundingBox, Ray
from .config import VoronoiOptions, get_tolerance_policy
from .dcel import EdgeKind, Mesh, VertexKind
from .errors import InvariantViolation, UnresolvedOriginError
from .events import CircleEvent, Event, EventQueue, Site, SiteEvent, event_key
from .geometry import circumcircle, orientation, perpendicular_direction
from .logging_utils import apply_debug_logging
from .validate import coerce_sites, validate_sites

logger = logging.getLogger(__name__)


class VoronoiDiagram:
    """One construction of a Voronoi diagram.

    The instance owns the event queue, beach line, live breakpoints and the
    mesh being assembled; nothing is shared between instances.
    """

    def __init__(self, sites: Iterable[object], options: Optional[VoronoiOptions] = None) -> None:
        self.options = options or VoronoiOptions()
        points = coerce_sites(sites)
        if self.options.validate:
            validate_sites(points)

        self.context = SweepContext(tolerance=get_tolerance_policy())
        self.mesh = Mesh()
        self.sites: List[Site] = []
        for point in sorted(points, key=lambda p: (-p.y, p.x)):
            self.sites.append(Site(point=point, face=self.mesh.add_face(point)))

        self.queue = EventQueue(SiteEvent(site) for site in self.sites)
        self.beach_line = BeachLine(self.context)
        # insertion-ordered so finalization is reproducible
        self.breakpoints: Dict[Breakpoint, None] = {}
        self.box: Optional[BoundingBox] = None

        self.site_events = 0
        self.circle_events = 0
        self.cancelled_events = 0
        self._built = False

    def build(self) -> Mesh:
        if self._built:
            return self.mesh
        self._built = True

        if not self.sites:
            logger.info("No sites given; returning an empty mesh")
            return self.mesh

        logger.info("Building Voronoi diagram for %d sites", len(self.sites))
        while self.queue:
            event = self.queue.pop_min()
            self.context.advance(event.y)
            self.dispatch(event)

        self.finalize()
        logger.info(
            "Processed %d site and %d circle events (%d cancelled); mesh has %d vertices, %d half-edges, %d faces",
            self.site_events,
            self.circle_events,
            self.cancelled_events,
            len(self.mesh.vertices),
            len(self.mesh.edges),
            len(self.mesh.faces),
        )
        return self.mesh

    def dispatch(self, event: Event) -> None:
        if isinstance(event, CircleEvent):
            self.handle_circle_event(event)
        elif isinstance(event, SiteEvent):
            self.handle_site_event(event)
        else:
            raise InvariantViolation(f"non-event element {event!r} in the queue")

    # -- site events --------------------------------------------------
    def handle_site_event(self, event: SiteEvent) -> None:
        self.site_events += 1
        site = event.site

        if not self.beach_line:
            self.beach_line.insert_first(ArcSegment(site))
            return

        alpha = self.beach_line.locate_above(site.x)
        self._cancel_circle_event(alpha)

        edge1, edge2 = self.mesh.add_edge_pair(
            EdgeKind.INTERIOR, perpendicular_direction(alpha.site.point, site.point)
        )

        if self.context.on_first_row():
            # both parabolas are still vertical rays: one breakpoint, no centre arc
            if alpha.site.x < site.x:
                breakpoint = Breakpoint(alpha.site, site)
                arcs = [ArcSegment(alpha.site, alpha.left, breakpoint), ArcSegment(site, breakpoint, alpha.right)]
            else:
                breakpoint = Breakpoint(site, alpha.site)
                arcs = [ArcSegment(site, alpha.left, breakpoint), ArcSegment(alpha.site, breakpoint, alpha.right)]
            self._trace(breakpoint, edge1, edge2)
            self._register(breakpoint)
            self.beach_line.replace(alpha, arcs)
            return

        new_left = Breakpoint(alpha.site, site)
        new_right = Breakpoint(site, alpha.site)
        self._trace(new_left, edge1, edge2)
        self._trace(new_right, edge1, edge2)

        left_arc = ArcSegment(alpha.site, alpha.left, new_left)
        center_arc = ArcSegment(site, new_left, new_right)
        right_arc = ArcSegment(alpha.site, new_right, alpha.right)

        self._register(new_left)
        self._register(new_right)
        self.beach_line.replace(alpha, [left_arc, center_arc, right_arc])

        self._check_circle_event(left_arc)
        self._check_circle_event(right_arc)

    def _trace(self, breakpoint: Breakpoint, edge1: int, edge2: int) -> None:
        """Pick the half-edge running with ``breakpoint`` and assign faces to the pair.

        The traced edge has the right focus's cell on its left, its twin the
        left focus's cell.
        """

        moving_right = breakpoint.heads_right()
        edge1_right = heads_right(self.mesh.edges[edge1].direction)
        if moving_right and edge1_right:
            traced = edge1
        elif moving_right:
            traced = edge2
        elif edge1_right:
            traced = edge2
        else:
            traced = edge1

        breakpoint.traced = traced
        self.mesh.set_face(traced, breakpoint.right.face)
        self.mesh.set_face(self.mesh.twin(traced), breakpoint.left.face)

    # -- circle events ------------------------------------------------
    def handle_circle_event(self, event: CircleEvent) -> None:
        self.circle_events += 1
        alpha = event.arc
        if not alpha.on_beach_line or alpha.circle_event is not event:
            raise InvariantViolation(f"stale circle event for {alpha!r} was not cancelled")
        alpha.circle_event = None

        left_arc = alpha.prev
        right_arc = alpha.next
        if left_arc is None or right_arc is None:
            raise InvariantViolation(f"vanishing {alpha!r} lacks a neighbour")
        self.beach_line.remove(alpha, hint=event.x)

        old_left = left_arc.right
        old_right = right_arc.left
        if old_left is None or old_right is None or old_left.traced is None or old_right.traced is None:
            raise InvariantViolation(f"vanishing {alpha!r} is not bounded by traced breakpoints")
        self._retire(old_left)
        self._retire(old_right)

        mesh = self.mesh
        edge1, edge2 = mesh.add_edge_pair(
            EdgeKind.INTERIOR, perpendicular_direction(left_arc.site.point, right_arc.site.point)
        )
        breakpoint = Breakpoint(left_arc.site, right_arc.site)
        self._trace(breakpoint, edge1, edge2)

        left_traced = old_left.traced
        right_traced = old_right.traced
        new_traced = breakpoint.traced
        vertex = mesh.add_vertex(event.circle.center, VertexKind.VORONOI, edge=new_traced)

        mesh.set_origin(mesh.twin(left_traced), vertex)
        mesh.set_origin(mesh.twin(right_traced), vertex)
        mesh.set_origin(new_traced, vertex)

        mesh.link(left_traced, mesh.twin(right_traced))
        mesh.link(right_traced, new_traced)
        mesh.link(mesh.twin(new_traced), mesh.twin(left_traced))

        left_arc.right = breakpoint
        right_arc.left = breakpoint
        self._register(breakpoint)

        self._cancel_circle_event(left_arc)
        self._cancel_circle_event(right_arc)
        self._check_circle_event(left_arc)
        self._check_circle_event(right_arc)

    def _check_circle_event(self, arc: ArcSegment) -> None:
        if arc.left is None or arc.right is None:
            return
        p1 = arc.left.left.point
        p2 = arc.site.point
        p3 = arc.right.right.point
        # only a clockwise turn means the two breakpoints converge
        if orientation(p1, p2, p3, eps=self.context.tolerance.eps) >= 0:
            return
        circle = circumcircle(p1, p2, p3)
        event = CircleEvent(circle=circle, arc=arc)
        self.queue.insert(event)
        arc.circle_event = event
        logger.debug("Scheduled circle event at %s for %r", event_key(event), arc)

    def _cancel_circle_event(self, arc: ArcSegment) -> None:
        event = arc.circle_event
        if event is None:
            return
        self.queue.remove(event)
        arc.circle_event = None
        self.cancelled_events += 1

    def _register(self, breakpoint: Breakpoint) -> None:
        self.breakpoints[breakpoint] = None

    def _retire(self, breakpoint: Breakpoint) -> None:
        traced = breakpoint.traced
        if self.mesh.edges[traced].origin is None and self.mesh.edges[self.mesh.twin(traced)].origin is None:
            # neither end known yet; the open end is connected during finalization
            return
        self.breakpoints.pop(breakpoint, None)

    # -- finalization -------------------------------------------------
    def finalize(self) -> None:
        mesh = self.mesh
        spread = [site.point for site in self.sites]
        spread.extend(mesh.vertices[idx].point for idx in mesh.voronoi_vertices())

        bounded = mesh.bounded_faces()
        rays = self.open_rays() if len(bounded) > 1 else []
        self.box = BoundingBox.from_points(
            mesh, spread, self.options.box_margin, tolerance=self.context.tolerance, rays=rays
        )

        if len(bounded) == 1:
            self.box.wire_single_face(mesh, bounded[0])
            return

        for breakpoint in list(self.breakpoints):
            self._connect(breakpoint)

        for idx, edge in enumerate(mesh.edges):
            if edge.origin is None:
                raise UnresolvedOriginError(
                    f"half-edge e{idx} has no origin after connecting the bounding box", edge=idx
                )
        mesh.propagate_faces()

    def open_rays(self) -> List[Ray]:
        """Rays along which the still-open half-edges will run into the bounding box."""

        mesh = self.mesh
        rays: List[Ray] = []
        seen = set()
        for breakpoint in self.breakpoints:
            traced = breakpoint.traced
            twin = mesh.twin(traced)
            if min(traced, twin) in seen:
                continue
            seen.add(min(traced, twin))
            traced_origin = mesh.origin_point(traced)
            twin_origin = mesh.origin_point(twin)
            if traced_origin is None and twin_origin is None:
                origin = breakpoint.midpoint()
                rays.append((origin, mesh.edges[traced].direction))
                rays.append((origin, mesh.edges[twin].direction))
            elif twin_origin is None:
                rays.append((traced_origin, mesh.edges[traced].direction))
            elif traced_origin is None:
                rays.append((twin_origin, mesh.edges[twin].direction))
        return rays

    def _connect(self, breakpoint: Breakpoint) -> None:
        mesh = self.mesh
        traced = breakpoint.traced
        twin = mesh.twin(traced)
        traced_origin = mesh.edges[traced].origin
        twin_origin = mesh.edges[twin].origin

        if traced_origin is not None and twin_origin is not None:
            return
        if traced_origin is None and twin_origin is None:
            self._connect_full_line(breakpoint)
        elif traced_origin is not None:
            self.box.connect(mesh, mesh.vertices[traced_origin].point, traced)
        else:
            self.box.connect(mesh, mesh.vertices[twin_origin].point, twin)

    def _connect_full_line(self, breakpoint: Breakpoint) -> None:
        """Clip an edge with no Voronoi vertex at either end to the box on both sides."""

        mesh = self.mesh
        box = self.box
        traced = breakpoint.traced
        twin = mesh.twin(traced)
        origin = breakpoint.midpoint()

        ahead, ahead_edge = box.intersect(origin, mesh.edges[traced].direction)
        ahead_vertex = mesh.add_vertex(ahead, VertexKind.BOX, edge=twin)
        mesh.set_origin(twin, ahead_vertex)
        box.splice(mesh, traced, ahead_vertex, ahead_edge)

        behind, behind_edge = box.intersect(origin, mesh.edges[twin].direction)
        behind_vertex = mesh.add_vertex(behind, VertexKind.BOX, edge=traced)
        mesh.set_origin(traced, behind_vertex)
        box.splice(mesh, twin, behind_vertex, behind_edge)


def build_voronoi(sites: Iterable[object], options: Optional[VoronoiOptions] = None) -> Mesh:
    """Return the box-clipped Voronoi mesh of ``sites``."""

    return VoronoiDiagram(sites, options).build()


apply_debug_logging(globals(), logger=logger, skip={"VoronoiDiagram.dispatch"})


__all__ = ["VoronoiDiagram", "build_voronoi"]
