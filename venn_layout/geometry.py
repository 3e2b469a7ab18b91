"""Circle intersection geometry and boundary path serialization."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from .types import Circle, Point

SMALL = 1e-10


@dataclass(frozen=True)
class IntersectionPoint:
    x: float
    y: float
    parents: Tuple[int, ...]

    @property
    def point(self) -> Point:
        return (self.x, self.y)


class SegmentKind(enum.Enum):
    ARC = "arc"
    NONE = "none"


@dataclass(frozen=True)
class BoundarySegment:
    """Piece of a region boundary between two consecutive inner points."""

    kind: SegmentKind
    p1: Point
    p2: Point
    circle_index: Optional[int] = None
    circle: Optional[Circle] = None
    width: float = 0.0


@dataclass
class IntersectionStats:
    area: float = 0.0
    arc_area: float = 0.0
    polygon_area: float = 0.0
    arcs: List[BoundarySegment] = field(default_factory=list)
    inner_points: List[IntersectionPoint] = field(default_factory=list)
    intersection_points: List[IntersectionPoint] = field(default_factory=list)


def distance(p1: Point, p2: Point) -> float:
    return math.hypot(p1[0] - p2[0], p1[1] - p2[1])


def circle_area(r: float, width: float) -> float:
    """Area of the circular segment of height ``width`` cut from a circle of radius ``r``."""

    return r * r * math.acos(max(-1.0, min(1.0, 1.0 - width / r))) - (r - width) * math.sqrt(
        max(width * (2.0 * r - width), 0.0)
    )


def circle_overlap(r1: float, r2: float, d: float) -> float:
    """Lens area of two circles with radii ``r1``/``r2`` and centres ``d`` apart."""

    if d >= r1 + r2:
        return 0.0
    if d <= abs(r1 - r2):
        smaller = min(r1, r2)
        return math.pi * smaller * smaller
    w1 = r1 - (d * d - r2 * r2 + r1 * r1) / (2.0 * d)
    w2 = r2 - (d * d - r1 * r1 + r2 * r2) / (2.0 * d)
    return circle_area(r1, w1) + circle_area(r2, w2)


def circle_overlap_derivative(r1: float, r2: float, d: float) -> float:
    """d(lens area)/dd, i.e. minus the length of the common chord."""

    if d >= r1 + r2 or d <= abs(r1 - r2):
        return 0.0
    a = (r1 * r1 - r2 * r2 + d * d) / (2.0 * d)
    return -2.0 * math.sqrt(max(r1 * r1 - a * a, 0.0))


def circle_circle_intersection(c1: Circle, c2: Circle) -> List[Point]:
    """Return the (zero or two) crossing points of two circle outlines."""

    d = distance(c1.center, c2.center)
    r1 = c1.radius
    r2 = c2.radius
    if d >= r1 + r2 or d <= abs(r1 - r2):
        return []

    a = (r1 * r1 - r2 * r2 + d * d) / (2.0 * d)
    h = math.sqrt(max(r1 * r1 - a * a, 0.0))
    x0 = c1.x + a * (c2.x - c1.x) / d
    y0 = c1.y + a * (c2.y - c1.y) / d
    rx = -(c2.y - c1.y) * (h / d)
    ry = -(c2.x - c1.x) * (h / d)
    return [(x0 + rx, y0 - ry), (x0 - rx, y0 + ry)]


def contained_in_circles(point: Point, circles: Iterable[Circle]) -> bool:
    for circle in circles:
        if distance(point, circle.center) > circle.radius + SMALL:
            return False
    return True


def get_center(points: Sequence[Point]) -> Point:
    if not points:
        return (0.0, 0.0)
    sx = sum(p[0] for p in points)
    sy = sum(p[1] for p in points)
    return (sx / len(points), sy / len(points))


def _same_circle(a: Circle, b: Circle) -> bool:
    return (
        abs(a.x - b.x) <= SMALL and abs(a.y - b.y) <= SMALL and abs(a.radius - b.radius) <= SMALL
    )


def _distinct_circles(circles: Sequence[Circle]) -> List[Tuple[int, Circle]]:
    """Index and circle of the first occurrence of every distinct circle."""

    distinct: List[Tuple[int, Circle]] = []
    for index, circle in enumerate(circles):
        if not any(_same_circle(circle, other) for _, other in distinct):
            distinct.append((index, circle))
    return distinct


def _intersection_points(circles: Sequence[Circle]) -> List[IntersectionPoint]:
    """Crossings of every pair of distinct circles.

    Coincident crossings are merged and carry every circle through them, so
    identical circles or three outlines meeting at one point yield a single
    boundary vertex.
    """

    distinct = _distinct_circles(circles)
    points: List[IntersectionPoint] = []
    for a, (i, first) in enumerate(distinct):
        for j, second in distinct[a + 1 :]:
            for x, y in circle_circle_intersection(first, second):
                for k, existing in enumerate(points):
                    if abs(existing.x - x) <= SMALL and abs(existing.y - y) <= SMALL:
                        parents = tuple(sorted(set(existing.parents) | {i, j}))
                        points[k] = IntersectionPoint(existing.x, existing.y, parents)
                        break
                else:
                    points.append(IntersectionPoint(x, y, (i, j)))
    return points


def classify_segment(
    p1: IntersectionPoint, p2: IntersectionPoint, circles: Sequence[Circle]
) -> BoundarySegment:
    """Pick the circle whose arc bounds the region between ``p2`` and ``p1``.

    Only circles through both points qualify; among those the one with the
    narrowest arc is innermost.
    """

    midpoint = ((p1.x + p2.x) / 2.0, (p1.y + p2.y) / 2.0)
    best: Optional[BoundarySegment] = None
    for index in p1.parents:
        if index not in p2.parents:
            continue
        circle = circles[index]
        a1 = math.atan2(p1.x - circle.x, p1.y - circle.y)
        a2 = math.atan2(p2.x - circle.x, p2.y - circle.y)
        angle_diff = a2 - a1
        if angle_diff < 0:
            angle_diff += 2.0 * math.pi

        a = a2 - angle_diff / 2.0
        width = distance(
            midpoint,
            (circle.x + circle.radius * math.sin(a), circle.y + circle.radius * math.cos(a)),
        )
        # floating point error can push the sagitta past the diameter
        width = min(width, circle.radius * 2.0)

        if best is None or best.width > width:
            best = BoundarySegment(
                kind=SegmentKind.ARC,
                p1=p1.point,
                p2=p2.point,
                circle_index=index,
                circle=circle,
                width=width,
            )
    if best is None:
        return BoundarySegment(kind=SegmentKind.NONE, p1=p1.point, p2=p2.point)
    return best


def intersection_area(circles: Sequence[Circle]) -> IntersectionStats:
    """Area and boundary of the region common to every circle in ``circles``."""

    stats = IntersectionStats()
    if not circles:
        return stats

    stats.intersection_points = _intersection_points(circles)
    inner = [p for p in stats.intersection_points if contained_in_circles(p.point, circles)]

    if len(inner) > 1:
        center = get_center([p.point for p in inner])
        inner.sort(key=lambda p: math.atan2(p.x - center[0], p.y - center[1]), reverse=True)
        stats.inner_points = inner

        polygon_area = 0.0
        p2 = inner[-1]
        for p1 in inner:
            segment = classify_segment(p1, p2, circles)
            if segment.kind is SegmentKind.NONE:
                continue
            polygon_area += (p2.x + p1.x) * (p1.y - p2.y)
            stats.arcs.append(segment)
            stats.arc_area += circle_area(segment.circle.radius, segment.width)
            p2 = p1
        stats.polygon_area = polygon_area / 2.0
    else:
        stats.inner_points = inner
        smallest = min(circles, key=lambda c: c.radius)
        disjoint = any(
            distance(c.center, smallest.center) > abs(smallest.radius - c.radius) for c in circles
        )
        if not disjoint:
            r = smallest.radius
            stats.arc_area = math.pi * r * r
            stats.arcs.append(
                BoundarySegment(
                    kind=SegmentKind.ARC,
                    p1=(smallest.x, smallest.y + r),
                    p2=(smallest.x - SMALL, smallest.y + r),
                    circle_index=list(circles).index(smallest),
                    circle=smallest,
                    width=2.0 * r,
                )
            )

    stats.area = stats.arc_area + stats.polygon_area
    return stats


def _fmt(value: float) -> str:
    text = format(float(value), ".10g")
    return "0" if text == "-0" else text


def circle_path(x: float, y: float, r: float) -> str:
    """Full circle outline as two relative half-circle arcs."""

    return "\n".join(
        [
            f"M {_fmt(x)} {_fmt(y)}",
            f"m {_fmt(-r)} 0",
            f"a {_fmt(r)} {_fmt(r)} 0 1 0 {_fmt(2 * r)} 0",
            f"a {_fmt(r)} {_fmt(r)} 0 1 0 {_fmt(-2 * r)} 0",
        ]
    )


def arcs_path(arcs: Sequence[BoundarySegment]) -> str:
    if not arcs:
        return "M 0 0"
    if len(arcs) == 1:
        circle = arcs[0].circle
        return circle_path(circle.x, circle.y, circle.radius)

    commands = [f"M {_fmt(arcs[0].p2[0])} {_fmt(arcs[0].p2[1])}"]
    for arc in arcs:
        r = arc.circle.radius
        large_arc = 1 if arc.width > r else 0
        commands.append(
            f"A {_fmt(r)} {_fmt(r)} 0 {large_arc} 1 {_fmt(arc.p1[0])} {_fmt(arc.p1[1])}"
        )
    return "\n".join(commands)


def intersection_area_path(circles: Sequence[Circle]) -> str:
    """Serialize the boundary of the common region of ``circles`` as path commands."""

    return arcs_path(intersection_area(circles).arcs)


__all__ = [
    "BoundarySegment",
    "IntersectionPoint",
    "IntersectionStats",
    "SMALL",
    "SegmentKind",
    "arcs_path",
    "circle_area",
    "circle_circle_intersection",
    "circle_overlap",
    "circle_overlap_derivative",
    "circle_path",
    "classify_segment",
    "contained_in_circles",
    "distance",
    "get_center",
    "intersection_area",
    "intersection_area_path",
]
