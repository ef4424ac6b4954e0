import math

import pytest

from fortune_voronoi.beachline import ArcSegment, BeachLine, Breakpoint, SweepContext, heads_right
from fortune_voronoi.errors import InvariantViolation
from fortune_voronoi.events import Site
from fortune_voronoi.geometry import Point, parabola_y

_UPPER = Site(Point(0, 4), 1)
_LOWER = Site(Point(-3, 0), 2)


def _context(position):
    context = SweepContext()
    context.advance(position)
    return context


def _split_line(context):
    """Beach line ``upper | lower | upper`` after the lower site split the upper arc."""

    left_bp = Breakpoint(_UPPER, _LOWER)
    right_bp = Breakpoint(_LOWER, _UPPER)
    beach_line = BeachLine(context)
    first = ArcSegment(_UPPER)
    beach_line.insert_first(first)
    arcs = [
        ArcSegment(_UPPER, None, left_bp),
        ArcSegment(_LOWER, left_bp, right_bp),
        ArcSegment(_UPPER, right_bp, None),
    ]
    beach_line.replace(first, arcs)
    return beach_line, arcs


def test_heads_right_splits_opposite_directions():
    for vector in [(1.0, 0.0), (0.0, 1.0), (2.0, -3.0), (-1.0, 5.0)]:
        opposite = (-vector[0], -vector[1])
        assert heads_right(vector) != heads_right(opposite)


def test_breakpoint_picks_root_by_focus_height():
    context = _context(-1.0)
    left = Breakpoint(_UPPER, _LOWER)
    right = Breakpoint(_LOWER, _UPPER)

    assert math.isclose(left.x(context), (-30 - math.sqrt(500)) / 8, rel_tol=1e-12)
    assert math.isclose(right.x(context), (-30 + math.sqrt(500)) / 8, rel_tol=1e-12)
    assert not left.heads_right()
    assert right.heads_right()


def test_breakpoint_coordinates_are_memoised_per_sweep_position():
    context = _context(-1.0)
    breakpoint = Breakpoint(_UPPER, _LOWER)

    first = breakpoint.coordinates(context)
    assert breakpoint.coordinates(context) is first

    context.advance(-2.0)
    moved = breakpoint.coordinates(context)
    assert moved is not first
    assert moved.x < first.x


def test_breakpoint_with_focus_on_sweep_line():
    context = _context(0.0)
    breakpoint = Breakpoint(_UPPER, _LOWER)

    point = breakpoint.coordinates(context)

    assert point.x == -3.0
    assert math.isclose(point.y, parabola_y(_UPPER.point, 0.0, -3.0))
    assert math.isclose(point.y, 25.0 / 8.0)


def test_breakpoint_with_both_foci_on_sweep_line():
    context = _context(0.0)
    breakpoint = Breakpoint(Site(Point(-2, 0), 1), Site(Point(4, 0), 2))

    point = breakpoint.coordinates(context)

    assert point.x == 1.0
    assert point.y == math.inf


def test_locate_above_finds_the_single_covering_arc():
    context = _context(-1.0)
    beach_line, (outer_left, middle, outer_right) = _split_line(context)

    assert beach_line.locate_above(-10.0) is outer_left
    assert beach_line.locate_above(-3.0) is middle
    assert beach_line.locate_above(0.0) is outer_right
    for x in [-20.0, -6.6, -6.5, -2.0, -0.96, -0.95, 1.0, 20.0]:
        assert len(beach_line.matching(x)) == 1
    assert beach_line.is_ordered()


def test_breakpoint_x_belongs_to_the_right_arc():
    context = _context(-1.0)
    beach_line, (_, middle, outer_right) = _split_line(context)

    assert beach_line.matching(middle.left.x(context)) == [middle]
    assert beach_line.matching(middle.right.x(context)) == [outer_right]


def test_arc_compare_orders_neighbours():
    context = _context(-1.0)
    _, (outer_left, middle, outer_right) = _split_line(context)

    assert outer_left.compare(middle, context) == -1
    assert outer_right.compare(middle, context) == 1
    assert middle.compare(middle, context) == 0


def test_replace_keeps_linked_order():
    context = _context(-1.0)
    beach_line, arcs = _split_line(context)

    assert list(beach_line) == arcs
    assert len(beach_line) == 3
    assert beach_line.first is arcs[0]
    assert beach_line.last is arcs[2]
    assert beach_line.left_neighbor(arcs[1]) is arcs[0]
    assert beach_line.right_neighbor(arcs[1]) is arcs[2]


def test_locate_with_no_covering_arc_raises():
    context = _context(-1.0)
    beach_line, (_, middle, _) = _split_line(context)

    # dropping the middle arc without merging its breakpoints leaves a gap
    beach_line.remove(middle)

    assert not beach_line.is_ordered()
    with pytest.raises(InvariantViolation):
        beach_line.locate_above(-3.0)


def test_empty_beach_line_rejects_queries():
    beach_line = BeachLine(_context(0.0))
    with pytest.raises(InvariantViolation):
        beach_line.locate_above(0.0)

    beach_line.insert_first(ArcSegment(_UPPER))
    with pytest.raises(InvariantViolation):
        beach_line.insert_first(ArcSegment(_LOWER))


def test_on_first_row_tracks_the_first_event_height():
    context = SweepContext()
    assert not context.on_first_row()
    context.advance(3.0)
    assert context.on_first_row()
    context.advance(3.0)
    assert context.on_first_row()
    context.advance(2.0)
    assert not context.on_first_row()


def test_remove_updates_a_fresh_index_in_place():
    context = _context(-1.0)
    beach_line, (outer_left, middle, outer_right) = _split_line(context)
    assert beach_line.locate_above(-3.0) is middle
    rebuilds = beach_line.index_rebuilds

    beach_line.remove(middle, hint=-3.0)

    assert beach_line.locate_above(-10.0) is outer_left
    assert beach_line.locate_above(5.0) is outer_right
    assert beach_line.index_rebuilds == rebuilds
    assert list(beach_line) == [outer_left, outer_right]


def test_remove_without_hint_still_finds_the_slot():
    context = _context(-1.0)
    beach_line, (outer_left, middle, outer_right) = _split_line(context)
    beach_line.locate_above(-3.0)
    rebuilds = beach_line.index_rebuilds

    beach_line.remove(outer_right)

    assert beach_line.locate_above(-3.0) is middle
    assert beach_line.locate_above(-10.0) is outer_left
    assert beach_line.index_rebuilds == rebuilds
    assert beach_line.last is middle
