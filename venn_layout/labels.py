"""Label anchor points that fall inside each drawn region."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Sequence, Set, Tuple

from scipy.optimize import minimize

from .geometry import distance, get_center, intersection_area
from .types import Circle, Point, SetDatum, SetId, SetKey, UnknownSetError

logger = logging.getLogger(__name__)

_NELDER_MEAD_OPTIONS = {"maxiter": 500, "xatol": 1e-10, "fatol": 1e-10}


def get_containing_circles(circles: Mapping[SetId, Circle]) -> Dict[SetId, List[SetId]]:
    """Map each set to the sets whose circles fully contain it."""

    containing: Dict[SetId, List[SetId]] = {set_id: [] for set_id in circles}
    ids = list(circles)
    for i, a_id in enumerate(ids):
        a = circles[a_id]
        for b_id in ids[i + 1 :]:
            b = circles[b_id]
            d = distance(a.center, b.center)
            if d + b.radius <= a.radius + 1e-10:
                containing[b_id].append(a_id)
            elif d + a.radius <= b.radius + 1e-10:
                containing[a_id].append(b_id)
    return containing


def circle_margin(point: Point, interior: Sequence[Circle], exterior: Sequence[Circle]) -> float:
    """Distance from ``point`` to the nearest boundary of the region (negative outside)."""

    margin = min(c.radius - distance(c.center, point) for c in interior)
    for c in exterior:
        margin = min(margin, distance(c.center, point) - c.radius)
    return margin


def _is_inside(point: Point, interior: Sequence[Circle], exterior: Sequence[Circle]) -> bool:
    if any(distance(point, c.center) > c.radius for c in interior):
        return False
    return not any(distance(point, c.center) < c.radius for c in exterior)


def _text_centre(interior: Sequence[Circle], exterior: Sequence[Circle]) -> Tuple[Point, bool]:
    samples: List[Point] = []
    for c in interior:
        half = c.radius / 2.0
        samples.extend(
            [(c.x, c.y), (c.x + half, c.y), (c.x - half, c.y), (c.x, c.y + half), (c.x, c.y - half)]
        )
    initial = samples[0]
    best_margin = circle_margin(initial, interior, exterior)
    for sample in samples[1:]:
        margin = circle_margin(sample, interior, exterior)
        if margin >= best_margin:
            initial = sample
            best_margin = margin

    result = minimize(
        lambda p: -circle_margin((float(p[0]), float(p[1])), interior, exterior),
        [initial[0], initial[1]],
        method="Nelder-Mead",
        options=_NELDER_MEAD_OPTIONS,
    )
    centre = (float(result.x[0]), float(result.x[1]))
    if _is_inside(centre, interior, exterior):
        return centre, False

    if len(interior) == 1:
        return interior[0].center, False

    stats = intersection_area(interior)
    if not stats.arcs:
        return get_center([c.center for c in interior]), True
    if len(stats.arcs) == 1:
        return stats.arcs[0].circle.center, False
    if exterior:
        return _text_centre(interior, [])
    return get_center([arc.p1 for arc in stats.arcs]), False


def compute_text_centre(interior: Sequence[Circle], exterior: Sequence[Circle]) -> Point:
    """Point inside every ``interior`` circle and outside every ``exterior`` one.

    The margin to the nearest boundary is maximised with Nelder-Mead; when the
    optimum is not a valid interior point the region's own geometry is used
    instead, and a region that does not exist falls back to the mean centre.
    """

    return _text_centre(interior, exterior)[0]


def compute_text_centres(
    solution: Mapping[SetId, Circle], areas: Sequence[SetDatum]
) -> Dict[SetKey, Point]:
    containing = get_containing_circles(solution)
    centres: Dict[SetKey, Point] = {}

    for area in areas:
        members: Set[SetId] = set()
        exclude: Set[SetId] = set()
        for set_id in area.sets:
            if set_id not in solution:
                raise UnknownSetError(set_id, area.sets)
            members.add(set_id)
            # circles swallowing part of the region must not push the label out
            exclude.update(containing[set_id])

        interior = [solution[s] for s in area.sets]
        exterior = [
            c for set_id, c in solution.items() if set_id not in members and set_id not in exclude
        ]
        centre, disjoint = _text_centre(interior, exterior)
        if disjoint and area.size > 0:
            logger.warning("Area %s is not represented on screen", "∩".join(area.sets))
        centres[area.sets] = centre

    return centres


__all__ = [
    "circle_margin",
    "compute_text_centre",
    "compute_text_centres",
    "get_containing_circles",
]
