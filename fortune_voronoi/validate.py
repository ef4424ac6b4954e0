import math
from typing import Iterable, List, Sequence

from .errors import ValidationError
from .geometry import Point


def coerce_point(value: object, idx: int) -> Point:
    if isinstance(value, Point):
        return value
    # tuples, lists and numpy rows
    if isinstance(value, str) or not hasattr(value, '__len__') or len(value) != 2:
        raise ValidationError(f'[site {idx}] expected an (x, y) pair, got {value!r}')
    try:
        return Point(float(value[0]), float(value[1]))
    except (TypeError, ValueError) as exc:
        raise ValidationError(f'[site {idx}] coordinates must be numeric, got {value!r}') from exc


def coerce_sites(values: Iterable[object]) -> List[Point]:
    return [coerce_point(value, idx) for idx, value in enumerate(values)]


def validate_sites(points: Sequence[Point]) -> None:
    seen = {}
    for idx, p in enumerate(points):
        if not (math.isfinite(p.x) and math.isfinite(p.y)):
            raise ValidationError(f'[site {idx}] coordinates must be finite, got {p}')
        key = (p.x, p.y)
        if key in seen:
            raise ValidationError(f'[site {idx}] duplicates site {seen[key]} at {p}')
        seen[key] = idx
