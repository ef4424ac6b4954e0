import argparse
import logging
import re
from typing import List, Optional, Sequence

from fortune_voronoi import (
    Point,
    ValidationError,
    VoronoiError,
    VoronoiOptions,
    build_voronoi,
    check_mesh,
    format_mesh,
)

logger = logging.getLogger(__name__)

_SEPARATOR_RE = re.compile(r"[,\s]+")


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def parse_sites(text: str) -> List[Point]:
    """Parse one ``x y`` (or ``x,y``) pair per line; ``#`` starts a comment."""

    sites: List[Point] = []
    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        parts = [part for part in _SEPARATOR_RE.split(line) if part]
        if len(parts) != 2:
            raise ValidationError(f"[line {line_no}] expected two coordinates, got {raw.strip()!r}")
        try:
            sites.append(Point(float(parts[0]), float(parts[1])))
        except ValueError as exc:
            raise ValidationError(f"[line {line_no}] invalid coordinate in {raw.strip()!r}") from exc
    return sites


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Build a Voronoi diagram with Fortune's sweep")
    parser.add_argument("path", help="File with one site per line")
    parser.add_argument(
        "--margin",
        type=float,
        default=1.0,
        help="Clearance between the sites and the bounding box (default: 1.0)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Run mesh consistency checks and exit non-zero on problems",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print element counts instead of the full DCEL tables",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    with open(args.path, encoding="utf-8") as fin:
        text = fin.read()

    logger.info("Reading sites from %s", args.path)
    try:
        sites = parse_sites(text)
        mesh = build_voronoi(sites, VoronoiOptions(box_margin=args.margin))
    except VoronoiError as exc:
        logger.error("Construction failed: %s", exc)
        raise SystemExit(1) from exc

    if args.summary:
        print(
            f"sites={len(mesh.bounded_faces())} vertices={len(mesh.vertices)} "
            f"voronoi_vertices={len(mesh.voronoi_vertices())} half_edges={len(mesh.edges)} "
            f"interior_edges={len(mesh.interior_edge_pairs())}"
        )
    else:
        print(format_mesh(mesh))

    if args.check:
        warnings = check_mesh(mesh)
        for warning in warnings:
            logger.warning("Consistency warning: %s", warning)
        if warnings:
            raise SystemExit(1)
        logger.info("Mesh passed consistency checks")


if __name__ == "__main__":
    main()
