"""Sweep events and the priority queue that orders them."""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple, Union

from .errors import EmptyQueueError, InvariantViolation
from .geometry import Circle, Point

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .beachline import ArcSegment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Site:
    """Input point together with the handle of the face it seeds."""

    point: Point
    face: int

    @property
    def x(self) -> float:
        return self.point.x

    @property
    def y(self) -> float:
        return self.point.y

    def __repr__(self) -> str:
        return f"Site({self.point.x:.6g}, {self.point.y:.6g}, f{self.face})"


@dataclass(eq=False)
class SiteEvent:
    site: Site
    queued: bool = field(default=False, repr=False)
    cancelled: bool = field(default=False, repr=False)

    @property
    def x(self) -> float:
        return self.site.x

    @property
    def y(self) -> float:
        return self.site.y


@dataclass(eq=False)
class CircleEvent:
    """Predicted disappearance of ``arc`` at the bottom of ``circle``."""

    circle: Circle
    arc: "ArcSegment"
    queued: bool = field(default=False, repr=False)
    cancelled: bool = field(default=False, repr=False)

    @property
    def x(self) -> float:
        return self.circle.center.x

    @property
    def y(self) -> float:
        return self.circle.bottom


Event = Union[SiteEvent, CircleEvent]


def event_key(event: Event) -> Tuple[float, float]:
    """Sort key: higher events first, then left to right."""

    return (-event.y, event.x)


class EventQueue:
    """Min-queue over :func:`event_key` with lazy cancellation.

    Cancelled entries stay in the heap and are discarded when they reach the
    top. Equal keys pop in insertion order.
    """

    def __init__(self, events: Iterable[Event] = ()) -> None:
        self._heap: List[Tuple[float, float, int, Event]] = []
        self._counter = itertools.count()
        self._live = 0
        for event in events:
            self.insert(event)

    def __len__(self) -> int:
        return self._live

    def __bool__(self) -> bool:
        return self._live > 0

    def insert(self, event: Event) -> None:
        if not isinstance(event, (SiteEvent, CircleEvent)):
            raise InvariantViolation(f"non-event object {event!r} offered to the event queue")
        if event.queued:
            raise InvariantViolation(f"{event!r} is already scheduled")
        if event.cancelled:
            raise InvariantViolation(f"{event!r} was cancelled and cannot be rescheduled")
        neg_y, x = event_key(event)
        heapq.heappush(self._heap, (neg_y, x, next(self._counter), event))
        event.queued = True
        self._live += 1

    def remove(self, event: Event) -> None:
        """Cancel a scheduled event; it will never be returned by :meth:`pop_min`."""

        if not event.queued:
            raise InvariantViolation(f"{event!r} is not scheduled")
        event.queued = False
        event.cancelled = True
        self._live -= 1

    def pop_min(self) -> Event:
        self._discard_cancelled()
        if not self._heap:
            raise EmptyQueueError("pop from an empty event queue")
        event = heapq.heappop(self._heap)[3]
        event.queued = False
        self._live -= 1
        return event

    def peek(self) -> Optional[Event]:
        self._discard_cancelled()
        if not self._heap:
            return None
        return self._heap[0][3]

    def _discard_cancelled(self) -> None:
        while self._heap and self._heap[0][3].cancelled:
            heapq.heappop(self._heap)


__all__ = [
    "CircleEvent",
    "Event",
    "EventQueue",
    "Site",
    "SiteEvent",
    "event_key",
]
