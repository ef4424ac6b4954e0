import pytest

from fortune_voronoi import bounding_box
from fortune_voronoi.bounding_box import BoundingBox, BoxCornerError, BoxExtent, BoxSide, fit_extent
from fortune_voronoi.config import get_tolerance_policy
from fortune_voronoi.dcel import EdgeKind, Mesh, VertexKind
from fortune_voronoi.errors import InvariantViolation, UnsupportedGeometryError
from fortune_voronoi.geometry import Point


def _box(size=2.0):
    mesh = Mesh()
    box = BoundingBox(mesh, -size, -size, size, size)
    return mesh, box


def _open_edge(mesh, start, direction):
    vertex = mesh.add_vertex(start)
    edge, twin = mesh.add_edge_pair(EdgeKind.INTERIOR, direction)
    mesh.set_origin(edge, vertex)
    return edge, twin


def test_box_has_two_closed_boundary_cycles():
    mesh, box = _box()

    inner = list(mesh.cycle(box.inner_edge))
    outer = list(mesh.cycle(box.outer_edge))

    assert len(inner) == 4
    assert len(outer) == 4
    assert [mesh.origin_point(edge) for edge in inner] == [
        Point(-2, -2),
        Point(2, -2),
        Point(2, 2),
        Point(-2, 2),
    ]
    assert all(mesh.vertices[idx].kind is VertexKind.BOX for idx in box.corners)
    assert mesh.faces[mesh.unbounded_face].inner == [box.outer_edge]
    assert all(mesh.edges[edge].face == mesh.unbounded_face for edge in outer)


def test_from_points_adds_margin():
    mesh = Mesh()
    box = BoundingBox.from_points(mesh, [Point(0, 0), Point(4, 1)], margin=0.5)
    assert (box.min_x, box.min_y, box.max_x, box.max_y) == (-0.5, -0.5, 4.5, 1.5)


@pytest.mark.parametrize("margin, points", [(0.0, [Point(0, 0)]), (1.0, [])])
def test_from_points_rejects_bad_arguments(margin, points):
    with pytest.raises(ValueError):
        BoundingBox.from_points(Mesh(), points, margin=margin)


def test_intersect_reports_point_and_struck_edge():
    _, box = _box(1.0)

    point, edge = box.intersect(Point(0, 0), (1.0, 0.5))
    assert point == Point(1, 0.5)
    assert box.side_of(edge) is BoxSide.RIGHT

    point, edge = box.intersect(Point(0, 0), (0.0, -3.0))
    assert point == Point(0, -1)
    assert edge == box.inner_edge

    point, edge = box.intersect(Point(0.5, 0), (-1.0, 1.0))
    assert point == Point(-0.5, 1)
    assert box.side_of(edge) is BoxSide.TOP


def test_intersect_finds_the_sub_edge_after_a_splice():
    mesh, box = _box()
    edge, _ = _open_edge(mesh, Point(0, 0), (0.0, -1.0))
    box.connect(mesh, Point(0, 0), edge)

    _, struck = box.intersect(Point(1, 0), (0.0, -1.0))

    assert struck == mesh.edges[edge].next
    assert mesh.origin_point(struck) == Point(0, -2)


def test_intersect_through_corner_is_unsupported():
    _, box = _box(1.0)
    with pytest.raises(UnsupportedGeometryError):
        box.intersect(Point(0, 0), (1.0, 1.0))


def test_intersect_rejects_outside_origin_and_zero_direction():
    _, box = _box(1.0)
    with pytest.raises(InvariantViolation):
        box.intersect(Point(2, 0), (1.0, 0.0))
    with pytest.raises(UnsupportedGeometryError):
        box.intersect(Point(0, 0), (0.0, 0.0))


def test_connect_splits_the_box_edge():
    mesh, box = _box()
    edge, twin = _open_edge(mesh, Point(0, 0), (0.0, -1.0))

    vertex = box.connect(mesh, Point(0, 0), edge)

    assert mesh.vertices[vertex].point == Point(0, -2)
    assert mesh.vertices[vertex].kind is VertexKind.BOX
    assert mesh.edges[twin].origin == vertex

    tail = mesh.edges[edge].next
    assert mesh.origin_point(tail) == Point(0, -2)
    assert mesh.destination_point(tail) == Point(2, -2)
    assert mesh.edges[box.inner_edge].next == twin
    assert mesh.destination_point(box.inner_edge) == Point(0, -2)

    outer = list(mesh.cycle(box.outer_edge))
    assert len(outer) == 5
    for member in outer:
        assert mesh.edges[mesh.edges[member].next].origin == mesh.edges[mesh.twin(member)].origin


def test_second_splice_on_the_same_side_finds_the_sub_edge():
    mesh, box = _box()
    first, _ = _open_edge(mesh, Point(0, 0), (0.0, -1.0))
    second, second_twin = _open_edge(mesh, Point(1, 0), (0.0, -1.0))
    box.connect(mesh, Point(0, 0), first)

    box.connect(mesh, Point(1, 0), second)

    first_tail = mesh.edges[first].next
    assert mesh.destination_point(first_tail) == Point(1, -2)
    assert mesh.edges[first_tail].next == second_twin
    assert mesh.destination_point(mesh.edges[second].next) == Point(2, -2)
    assert len(list(mesh.cycle(box.outer_edge))) == 6


def test_splice_onto_existing_box_vertex_is_unsupported():
    mesh, box = _box()
    first, _ = _open_edge(mesh, Point(0, 0), (0.0, -1.0))
    again, _ = _open_edge(mesh, Point(0, 1), (0.0, -1.0))
    box.connect(mesh, Point(0, 0), first)

    with pytest.raises(UnsupportedGeometryError):
        box.connect(mesh, Point(0, 1), again)


def test_wire_single_face_claims_the_inner_cycle():
    mesh, box = _box()
    face = mesh.add_face(Point(0, 0))

    box.wire_single_face(mesh, face)

    assert mesh.faces[face].outer == box.inner_edge
    assert all(mesh.edges[edge].face == face for edge in mesh.cycle(box.inner_edge))


def test_corner_error_names_the_side_to_push():
    extent = BoxExtent(-1.0, -1.0, 1.0, 1.0)
    tol = get_tolerance_policy()

    with pytest.raises(BoxCornerError) as excinfo:
        extent.exit(Point(0, 0), (-1.0, -1.0), tol)
    assert excinfo.value.side is BoxSide.LEFT

    with pytest.raises(BoxCornerError) as excinfo:
        extent.exit(Point(0, 0), (1.0, -1.0), tol)
    assert excinfo.value.side is BoxSide.RIGHT


@pytest.mark.parametrize(
    "side, expected",
    [
        (BoxSide.BOTTOM, BoxExtent(0.0, -0.5, 1.0, 1.0)),
        (BoxSide.RIGHT, BoxExtent(0.0, 0.0, 1.5, 1.0)),
        (BoxSide.TOP, BoxExtent(0.0, 0.0, 1.0, 1.5)),
        (BoxSide.LEFT, BoxExtent(-0.5, 0.0, 1.0, 1.0)),
    ],
)
def test_extent_grows_one_side(side, expected):
    assert BoxExtent(0.0, 0.0, 1.0, 1.0).grown(side, 0.5) == expected


def test_fit_extent_without_rays_is_spread_plus_margin():
    extent = fit_extent([Point(0, 0), Point(2, 2)], 1.0)
    assert extent == BoxExtent(-1.0, -1.0, 3.0, 3.0)


def test_fit_extent_grows_away_from_a_struck_corner():
    ray = (Point(1, 1), (1.0, 1.0))

    extent = fit_extent([Point(0, 0), Point(2, 2)], 1.0, rays=[ray])

    assert extent.max_x > 3.0
    assert (extent.min_x, extent.min_y, extent.max_y) == (-1.0, -1.0, 3.0)
    hit, side = extent.exit(ray[0], ray[1], get_tolerance_policy())
    assert side is BoxSide.TOP
    assert hit == Point(3, 3)


def test_fit_extent_gives_up_after_the_attempt_budget(monkeypatch):
    monkeypatch.setattr(bounding_box, "_FIT_ATTEMPTS", 0)
    with pytest.raises(UnsupportedGeometryError):
        fit_extent([Point(0, 0), Point(2, 2)], 1.0, rays=[(Point(1, 1), (1.0, 1.0))])


def test_from_points_box_accepts_every_ray():
    mesh = Mesh()
    rays = [(Point(1, 1), (1.0, 1.0)), (Point(1, 1), (-1.0, -1.0))]

    box = BoundingBox.from_points(mesh, [Point(0, 0), Point(2, 2)], margin=1.0, rays=rays)

    for origin, direction in rays:
        point, edge = box.intersect(origin, direction)
        assert box.side_of(edge) in (BoxSide.TOP, BoxSide.BOTTOM)
