"""Post-solve alignment: canonical orientation and fitting into pixel space."""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .geometry import distance
from .types import Circle, SetId, Solution

logger = logging.getLogger(__name__)

Range = Tuple[float, float]
OrderKey = Callable[[Circle], Any]


def get_bounding_box(circles: Sequence[Circle]) -> Tuple[Range, Range]:
    """Radius-inclusive ``((x_min, x_max), (y_min, y_max))`` of ``circles``."""

    x_range = (min(c.x - c.radius for c in circles), max(c.x + c.radius for c in circles))
    y_range = (min(c.y - c.radius for c in circles), max(c.y + c.radius for c in circles))
    return x_range, y_range


def _orientate_circles(
    circles: Sequence[Circle], orientation: float, order: Optional[OrderKey]
) -> List[Circle]:
    ordered = sorted(circles, key=order or (lambda c: -c.radius))
    if not ordered:
        return []

    origin_x, origin_y = ordered[0].x, ordered[0].y
    points = [(c.x - origin_x, c.y - origin_y) for c in ordered]

    # second circle ends up at ``orientation`` from the first, measured as atan2(x, y)
    if len(points) > 1:
        rotation = math.atan2(points[1][0], points[1][1]) - orientation
        cos_r = math.cos(rotation)
        sin_r = math.sin(rotation)
        points = [(cos_r * x - sin_r * y, sin_r * x + cos_r * y) for x, y in points]

    # mirror across the axis of the first two circles when the third falls past it
    if len(points) > 2:
        angle = (math.atan2(points[2][0], points[2][1]) - orientation) % (2.0 * math.pi)
        axis_len = math.hypot(points[1][0], points[1][1])
        if angle > math.pi and axis_len > 0.0:
            ux = points[1][0] / axis_len
            uy = points[1][1] / axis_len
            reflected = []
            for x, y in points:
                proj = x * ux + y * uy
                reflected.append((2.0 * proj * ux - x, 2.0 * proj * uy - y))
            points = reflected

    return [c.moved(x, y) for c, (x, y) in zip(ordered, points)]


def disjoint_clusters(circles: Sequence[Circle]) -> List[List[Circle]]:
    """Group circles into connected components of the overlap graph."""

    parent: Dict[SetId, SetId] = {c.set_id: c.set_id for c in circles}

    def find(set_id: SetId) -> SetId:
        root = set_id
        while parent[root] != root:
            root = parent[root]
        while parent[set_id] != root:
            parent[set_id], set_id = root, parent[set_id]
        return root

    for i, a in enumerate(circles):
        for b in circles[i + 1 :]:
            if distance(a.center, b.center) + 1e-10 < a.radius + b.radius:
                parent[find(b.set_id)] = find(a.set_id)

    clusters: Dict[SetId, List[Circle]] = {}
    for circle in circles:
        clusters.setdefault(find(circle.set_id), []).append(circle)
    return list(clusters.values())


def _shift(circles: Sequence[Circle], dx: float, dy: float) -> List[Circle]:
    return [c.moved(c.x + dx, c.y + dy) for c in circles]


def _pack_clusters(clusters: List[List[Circle]]) -> List[Circle]:
    def box_area(cluster: List[Circle]) -> float:
        (x0, x1), (y0, y1) = get_bounding_box(cluster)
        return (x1 - x0) * (y1 - y0)

    clusters = sorted(clusters, key=box_area, reverse=True)
    placed = list(clusters[0])
    (bx0, bx1), (by0, by1) = get_bounding_box(placed)
    spacing = (bx1 - bx0) / 50.0

    def add_cluster(index: int, right: bool, bottom: bool) -> None:
        if index >= len(clusters):
            return
        cluster = clusters[index]
        (cx0, cx1), (cy0, cy1) = get_bounding_box(cluster)

        if right:
            dx = bx1 - cx0 + spacing
        else:
            dx = bx1 - cx1
            centring = (cx1 - cx0) / 2.0 - (bx1 - bx0) / 2.0
            if centring < 0:
                dx += centring

        if bottom:
            dy = by1 - cy0 + spacing
        else:
            dy = by1 - cy1
            centring = (cy1 - cy0) / 2.0 - (by1 - by0) / 2.0
            if centring < 0:
                dy += centring

        placed.extend(_shift(cluster, dx, dy))

    index = 1
    while index < len(clusters):
        add_cluster(index, True, False)
        add_cluster(index + 1, False, True)
        add_cluster(index + 2, True, True)
        index += 3
        (bx0, bx1), (by0, by1) = get_bounding_box(placed)
    return placed


def normalize_solution(
    solution: Mapping[SetId, Circle],
    orientation: float = math.pi,
    orientation_order: Optional[OrderKey] = None,
    *,
    pack_clusters: bool = False,
) -> Solution:
    """Rotate/reflect ``solution`` into a canonical orientation.

    The largest circle moves to the origin and the second largest to angle
    ``orientation``. By default the whole solution moves rigidly; with
    ``pack_clusters`` each group of mutually overlapping circles is oriented on
    its own and the groups are tiled next to the largest one.
    """

    circles = [
        c if c.set_id == set_id else Circle(set_id, c.x, c.y, c.radius)
        for set_id, c in solution.items()
    ]
    if not circles:
        return {}

    if pack_clusters:
        clusters = [
            _orientate_circles(cluster, orientation, orientation_order)
            for cluster in disjoint_clusters(circles)
        ]
        logger.info("Normalizing %d circles in %d disjoint clusters", len(circles), len(clusters))
        result = _pack_clusters(clusters)
    else:
        result = _orientate_circles(circles, orientation, orientation_order)

    by_id = {c.set_id: c for c in result}
    return {set_id: by_id[set_id] for set_id in solution}


def scale_solution(
    solution: Mapping[SetId, Circle], width: float, height: float, padding: float
) -> Solution:
    """Uniformly scale and centre ``solution`` inside ``width`` x ``height`` minus ``padding``."""

    if not solution:
        return {}

    inner_width = width - 2.0 * padding
    inner_height = height - 2.0 * padding
    if inner_width <= 0 or inner_height <= 0:
        raise ValueError(
            f"padding {padding} leaves no drawable area in a {width}x{height} box"
        )

    (x_min, x_max), (y_min, y_max) = get_bounding_box(list(solution.values()))
    span_x = x_max - x_min
    span_y = y_max - y_min

    if span_x <= 0.0 or span_y <= 0.0:
        logger.info("Not scaling solution: zero size detected, centring instead")
        dx = width / 2.0 - (x_min + x_max) / 2.0
        dy = height / 2.0 - (y_min + y_max) / 2.0
        return {set_id: c.moved(c.x + dx, c.y + dy) for set_id, c in solution.items()}

    scaling = min(inner_width / span_x, inner_height / span_y)
    x_offset = (inner_width - span_x * scaling) / 2.0
    y_offset = (inner_height - span_y * scaling) / 2.0

    return {
        set_id: Circle(
            set_id,
            padding + x_offset + (c.x - x_min) * scaling,
            padding + y_offset + (c.y - y_min) * scaling,
            c.radius * scaling,
        )
        for set_id, c in solution.items()
    }


__all__ = [
    "disjoint_clusters",
    "get_bounding_box",
    "normalize_solution",
    "scale_solution",
]
