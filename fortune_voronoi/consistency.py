"""Structural checks on a finished mesh."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
from scipy.spatial import cKDTree

from .dcel import Mesh
from .errors import InvariantViolation
from .geometry import cross


@dataclass
class MeshWarning:
    kind: str
    message: str
    edge: Optional[int] = None
    face: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover - trivial string formatting
        return self.message


def euler_characteristic(mesh: Mesh) -> float:
    """``V - E + F`` with ``E`` counted as half-edge pairs and every face included."""

    return len(mesh.vertices) - len(mesh.edges) / 2 + len(mesh.faces)


def _scene_scale(mesh: Mesh) -> float:
    coords = mesh.coordinates()
    if coords.size == 0:
        return 1.0
    span = coords.max(axis=0) - coords.min(axis=0)
    return max(float(np.hypot(span[0], span[1])), 1.0)


def _check_records(mesh: Mesh) -> List[MeshWarning]:
    warnings: List[MeshWarning] = []
    for idx, edge in enumerate(mesh.edges):
        if mesh.edges[edge.twin].twin != idx:
            warnings.append(MeshWarning('twin', f'twin of e{edge.twin} is not e{idx}', edge=idx))
        for attr in ('origin', 'next', 'prev', 'face'):
            if getattr(edge, attr) is None:
                warnings.append(MeshWarning(attr, f'half-edge e{idx} has no {attr}', edge=idx))
        if edge.next is not None and mesh.edges[edge.next].prev != idx:
            warnings.append(MeshWarning('next', f'prev of e{edge.next} is not e{idx}', edge=idx))
        if edge.next is not None and edge.origin is not None:
            if mesh.edges[edge.next].origin != mesh.edges[edge.twin].origin:
                warnings.append(
                    MeshWarning('next', f'e{edge.next} does not start where e{idx} ends', edge=idx)
                )
    return warnings


def _check_cycles(mesh: Mesh, scale: float) -> List[MeshWarning]:
    warnings: List[MeshWarning] = []
    seen: Dict[int, int] = {}
    starts = []
    for face_idx, face in enumerate(mesh.faces):
        if face.bounded:
            if face.outer is None:
                warnings.append(MeshWarning('face', f'face f{face_idx} has no outer component', face=face_idx))
                continue
            starts.append((face_idx, face.outer))
        starts.extend((face_idx, edge) for edge in face.inner)

    for face_idx, start in starts:
        try:
            cycle = list(mesh.cycle(start))
        except InvariantViolation as exc:
            warnings.append(MeshWarning('cycle', str(exc), edge=start, face=face_idx))
            continue
        for edge in cycle:
            seen[edge] = seen.get(edge, 0) + 1
            if mesh.edges[edge].face != face_idx:
                warnings.append(
                    MeshWarning('face', f'e{edge} lies on the cycle of f{face_idx} but not in it', edge=edge)
                )
        if mesh.faces[face_idx].bounded and len(mesh.bounded_faces()) > 1:
            warnings.extend(_check_convex(mesh, face_idx, cycle, scale))

    for idx in range(len(mesh.edges)):
        count = seen.get(idx, 0)
        if count != 1:
            warnings.append(MeshWarning('cycle', f'e{idx} appears {count} times on face cycles', edge=idx))
    return warnings


def _check_convex(mesh: Mesh, face_idx: int, cycle: List[int], scale: float) -> List[MeshWarning]:
    points = [mesh.origin_point(edge) for edge in cycle]
    if any(point is None for point in points):
        return []
    eps = 1e-9 * scale * scale
    count = len(points)
    for idx in range(count):
        turn = cross(points[idx], points[(idx + 1) % count], points[(idx + 2) % count])
        if turn < -eps:
            return [MeshWarning('convexity', f'face f{face_idx} turns clockwise at {points[(idx + 1) % count]}', face=face_idx)]
    return []


def _check_nearest_sites(mesh: Mesh, scale: float) -> List[MeshWarning]:
    bounded = mesh.bounded_faces()
    if not bounded:
        return []
    sites = np.array([mesh.faces[idx].site.as_tuple() for idx in bounded], dtype=float)
    tree = cKDTree(sites)
    tol = 1e-6 * scale
    warnings: List[MeshWarning] = []
    for slot, face_idx in enumerate(bounded):
        own = sites[slot]
        for point in mesh.face_polygon(face_idx):
            nearest, _ = tree.query(point.as_tuple())
            own_distance = math.hypot(point.x - own[0], point.y - own[1])
            if own_distance > nearest + tol:
                warnings.append(
                    MeshWarning('nearest', f'{point} on f{face_idx} is closer to another site', face=face_idx)
                )
    return warnings


def check_mesh(mesh: Mesh) -> List[MeshWarning]:
    """Return every structural problem found in ``mesh`` (empty when consistent)."""

    if not mesh.edges:
        return []
    scale = _scene_scale(mesh)
    warnings = _check_records(mesh)
    if warnings:
        return warnings
    warnings.extend(_check_cycles(mesh, scale))
    euler = euler_characteristic(mesh)
    if euler != 2:
        warnings.append(MeshWarning('euler', f'V - E + F = {euler:g}, expected 2'))
    if not warnings:
        warnings.extend(_check_nearest_sites(mesh, scale))
    return warnings
