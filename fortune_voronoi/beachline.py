"""Beach line: the ordered run of parabolic arcs above the sweep line.

Arc order depends on the sweep position, so arcs are kept in an explicit
doubly linked list (which owns adjacency) and looked up through a plain
list index that is bisected at the current position. Splices after a
locate and removals update the index in place; anything else marks it
stale and it is rebuilt from the linked list on the next lookup.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from .config import TolerancePolicy, get_tolerance_policy
from .errors import InvariantViolation
from .events import CircleEvent, Site
from .geometry import Point, Vector, midpoint, parabola_intersection, parabola_y

logger = logging.getLogger(__name__)


@dataclass
class SweepContext:
    """Per-construction sweep state read by every breakpoint computation."""

    position: float = math.inf
    first_position: Optional[float] = None
    tolerance: TolerancePolicy = field(default_factory=get_tolerance_policy)

    def advance(self, position: float) -> None:
        self.position = position
        if self.first_position is None:
            self.first_position = position

    def on_first_row(self) -> bool:
        """``True`` while the sweep still sits at the height of the first event."""

        if self.first_position is None:
            return False
        return self.tolerance.is_close(self.position, self.first_position)


def heads_right(direction: Vector) -> bool:
    """Half-plane test shared by breakpoints and half-edges; exactly one of ``v`` and ``-v`` passes."""

    dx, dy = direction
    return dx > 0.0 or (dx == 0.0 and dy > 0.0)


class Breakpoint:
    """Meeting point of the arcs of ``left`` and ``right``; traces one half-edge."""

    def __init__(self, left: Site, right: Site, traced: Optional[int] = None) -> None:
        self.left = left
        self.right = right
        self.traced = traced
        self._cached_position: Optional[float] = None
        self._cached_point: Optional[Point] = None

    def __repr__(self) -> str:
        return f"Breakpoint({self.left!r} | {self.right!r}, traced=e{self.traced})"

    def travel_direction(self) -> Vector:
        """Direction the breakpoint moves along its bisector as the sweep descends."""

        return (self.right.y - self.left.y, self.left.x - self.right.x)

    def heads_right(self) -> bool:
        return heads_right(self.travel_direction())

    def midpoint(self) -> Point:
        return midpoint(self.left.point, self.right.point)

    def coordinates(self, context: SweepContext) -> Point:
        position = context.position
        if self._cached_point is not None and self._cached_position == position:
            return self._cached_point

        left = self.left.point
        right = self.right.point
        tol = context.tolerance
        left_flat = tol.is_close(left.y, position)
        right_flat = tol.is_close(right.y, position)

        if left_flat and right_flat:
            point = Point((left.x + right.x) * 0.5, math.inf)
        elif left_flat:
            point = Point(left.x, parabola_y(right, position, left.x))
        elif right_flat:
            point = Point(right.x, parabola_y(left, position, right.x))
        else:
            roots = parabola_intersection(left, right, position)
            if len(roots) == 1:
                x = roots[0]
            elif left.y < right.y:
                x = roots[-1]
            else:
                x = roots[0]
            point = Point(x, parabola_y(left, position, x))

        self._cached_position = position
        self._cached_point = point
        return point

    def x(self, context: SweepContext) -> float:
        return self.coordinates(context).x


class ArcSegment:
    """Piece of the parabola of ``site`` between two breakpoints (``None`` = unbounded)."""

    def __init__(self, site: Site, left: Optional[Breakpoint] = None, right: Optional[Breakpoint] = None) -> None:
        self.site = site
        self.left = left
        self.right = right
        self.prev: Optional[ArcSegment] = None
        self.next: Optional[ArcSegment] = None
        self.circle_event: Optional[CircleEvent] = None
        self.on_beach_line = False

    def __repr__(self) -> str:
        return f"ArcSegment({self.site!r})"

    def bounds(self, context: SweepContext) -> Tuple[float, float]:
        lo = -math.inf if self.left is None else self.left.x(context)
        hi = math.inf if self.right is None else self.right.x(context)
        return lo, hi

    def contains(self, x: float, context: SweepContext) -> bool:
        lo, hi = self.bounds(context)
        return lo <= x < hi

    def compare(self, other: "ArcSegment", context: SweepContext) -> int:
        """Order two arcs by their intervals at the current sweep position."""

        if other is self:
            return 0
        lo, hi = self.bounds(context)
        other_lo, other_hi = other.bounds(context)
        if lo == other_lo and hi == other_hi:
            return 0
        if lo >= other_hi:
            return 1
        if hi <= other_lo:
            return -1
        # overlapping zero-width intervals: fall back to the interval centres
        mine = (lo + hi) * 0.5
        theirs = (other_lo + other_hi) * 0.5
        return (mine > theirs) - (mine < theirs)


class ArcQuery:
    """Probe that compares equal to the one arc whose interval holds ``x``."""

    def __init__(self, x: float) -> None:
        self.x = x

    def compare(self, arc: ArcSegment, context: SweepContext) -> int:
        lo, hi = arc.bounds(context)
        if self.x < lo:
            return -1
        if self.x >= hi:
            return 1
        return 0


class BeachLine:
    def __init__(self, context: SweepContext) -> None:
        self.context = context
        self._head: Optional[ArcSegment] = None
        self._tail: Optional[ArcSegment] = None
        self._size = 0
        self._index: Optional[List[ArcSegment]] = []
        self._last_hit: Optional[Tuple[ArcSegment, int]] = None
        self.index_rebuilds = 0

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def __iter__(self) -> Iterator[ArcSegment]:
        arc = self._head
        while arc is not None:
            yield arc
            arc = arc.next

    @property
    def first(self) -> Optional[ArcSegment]:
        return self._head

    @property
    def last(self) -> Optional[ArcSegment]:
        return self._tail

    def left_neighbor(self, arc: ArcSegment) -> Optional[ArcSegment]:
        return arc.prev

    def right_neighbor(self, arc: ArcSegment) -> Optional[ArcSegment]:
        return arc.next

    def insert_first(self, arc: ArcSegment) -> None:
        if self._head is not None:
            raise InvariantViolation("beach line already has arcs")
        self._head = self._tail = arc
        arc.prev = arc.next = None
        arc.on_beach_line = True
        self._size = 1
        self._index = [arc]

    def replace(self, old: ArcSegment, arcs: Sequence[ArcSegment]) -> None:
        """Splice ``arcs`` (left to right) into the place of ``old``."""

        if not old.on_beach_line:
            raise InvariantViolation(f"{old!r} is not on the beach line")
        if not arcs:
            raise ValueError("replace needs at least one arc")

        before, after = old.prev, old.next
        for left, right in zip(arcs, arcs[1:]):
            left.next = right
            right.prev = left
        arcs[0].prev = before
        arcs[-1].next = after
        if before is None:
            self._head = arcs[0]
        else:
            before.next = arcs[0]
        if after is None:
            self._tail = arcs[-1]
        else:
            after.prev = arcs[-1]
        for arc in arcs:
            arc.on_beach_line = True
        old.prev = old.next = None
        old.on_beach_line = False
        self._size += len(arcs) - 1

        hit = self._last_hit
        if self._index is not None and hit is not None and hit[0] is old:
            self._index[hit[1] : hit[1] + 1] = list(arcs)
        else:
            self._index = None
        self._last_hit = None

    def remove(self, arc: ArcSegment, hint: Optional[float] = None) -> None:
        """Unlink ``arc``; ``hint`` is an x near the arc that speeds up finding its index slot."""

        if not arc.on_beach_line:
            raise InvariantViolation(f"{arc!r} is not on the beach line")
        if self._index is not None:
            slot = self._slot_of(arc, hint)
            if slot is None:
                self._index = None
            else:
                del self._index[slot]

        before, after = arc.prev, arc.next
        if before is None:
            self._head = after
        else:
            before.next = after
        if after is None:
            self._tail = before
        else:
            after.prev = before
        arc.prev = arc.next = None
        arc.on_beach_line = False
        self._size -= 1
        self._last_hit = None

    def locate_above(self, x: float) -> ArcSegment:
        """Return the arc directly above ``x`` at the current sweep position."""

        if self._head is None:
            raise InvariantViolation("locate on an empty beach line")
        index = self._ensure_index()
        slot, found = self._bisect(index, x)
        if found:
            self._last_hit = (index[slot], slot)
            return index[slot]

        logger.debug("Bisect found no arc above x=%r; scanning the beach line", x)
        matches = self.matching(x)
        if len(matches) != 1:
            raise InvariantViolation(
                f"{len(matches)} arcs match x={x!r} at sweep position {self.context.position!r}"
            )
        self._index = None
        self._last_hit = None
        return matches[0]

    def matching(self, x: float) -> List[ArcSegment]:
        query = ArcQuery(x)
        return [arc for arc in self if query.compare(arc, self.context) == 0]

    def is_ordered(self) -> bool:
        """Check that neighbours share their breakpoint and their intervals do not cross."""

        previous: Optional[ArcSegment] = None
        for arc in self:
            if previous is not None:
                if previous.right is None or previous.right is not arc.left:
                    return False
                if previous.compare(arc, self.context) > 0:
                    return False
            previous = arc
        if self._head is not None and (self._head.left is not None or self._tail.right is not None):
            return False
        return True

    def _bisect(self, index: List[ArcSegment], x: float) -> Tuple[int, bool]:
        query = ArcQuery(x)
        lo, hi = 0, len(index)
        while lo < hi:
            mid = (lo + hi) // 2
            order = query.compare(index[mid], self.context)
            if order == 0:
                return mid, True
            if order < 0:
                hi = mid
            else:
                lo = mid + 1
        return lo, False

    def _slot_of(self, arc: ArcSegment, hint: Optional[float]) -> Optional[int]:
        index = self._index
        if hint is not None:
            # a vanishing arc has zero width, so look around where the hint lands
            near, _ = self._bisect(index, hint)
            for slot in range(max(near - 2, 0), min(near + 3, len(index))):
                if index[slot] is arc:
                    return slot
        try:
            return index.index(arc)
        except ValueError:
            return None

    def _ensure_index(self) -> List[ArcSegment]:
        if self._index is None:
            self._index = list(self)
            self.index_rebuilds += 1
        return self._index


__all__ = [
    "ArcQuery",
    "ArcSegment",
    "BeachLine",
    "Breakpoint",
    "SweepContext",
    "heads_right",
]
