from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Mapping, Sequence, Set, Tuple

import numpy as np
from scipy.optimize import brentq, minimize

from ..geometry import SMALL, circle_circle_intersection, circle_overlap
from ..types import Circle, Point, SetDatum, SetId
from .loss import loss_function
from .model import SolveOptions

logger = logging.getLogger(__name__)

LossCallable = Callable[[Mapping[SetId, Circle], Sequence[SetDatum]], float]


def radius_for_size(size: float) -> float:
    return math.sqrt(size / math.pi)


def distance_from_intersect_area(r1: float, r2: float, overlap: float) -> float:
    """Distance between centres at which two circles overlap by ``overlap``."""

    smaller = min(r1, r2)
    smaller_area = smaller * smaller * math.pi
    if smaller_area <= overlap + SMALL * smaller_area:
        return abs(r1 - r2)
    return float(
        brentq(lambda d: circle_overlap(r1, r2, d) - overlap, 0.0, r1 + r2, xtol=1e-10, maxiter=200)
    )


def add_missing_areas(areas: Sequence[SetDatum]) -> List[SetDatum]:
    """Return ``areas`` plus a zero-size entry for every unlisted pair of sets."""

    result = list(areas)
    ids: List[SetId] = []
    pairs: Set[frozenset] = set()
    for area in areas:
        if len(area.sets) == 1:
            ids.append(area.sets[0])
        elif len(area.sets) == 2:
            pairs.add(frozenset(area.sets))
    ids.sort()

    for i, a in enumerate(ids):
        for b in ids[i + 1 :]:
            if frozenset((a, b)) not in pairs:
                result.append(SetDatum(sets=(a, b), size=0.0))
    return result


def _single_sets(areas: Sequence[SetDatum]) -> List[SetDatum]:
    return [area for area in areas if len(area.sets) == 1]


def get_distance_matrices(
    areas: Sequence[SetDatum], sets: Sequence[SetDatum], set_index: Mapping[SetId, int]
) -> Tuple[np.ndarray, np.ndarray]:
    """Target centre distances and subset(+1)/disjoint(-1) constraints per pair."""

    n = len(sets)
    distances = np.zeros((n, n), dtype=float)
    constraints = np.zeros((n, n), dtype=float)

    for area in areas:
        if len(area.sets) != 2:
            continue
        left = set_index[area.sets[0]]
        right = set_index[area.sets[1]]
        left_size = sets[left].size
        right_size = sets[right].size
        d = distance_from_intersect_area(
            radius_for_size(left_size), radius_for_size(right_size), area.size
        )
        distances[left, right] = distances[right, left] = d

        c = 0.0
        smaller = min(left_size, right_size)
        if area.size >= smaller * (1.0 - SMALL):
            c = 1.0
        elif area.size <= smaller * SMALL:
            c = -1.0
        constraints[left, right] = constraints[right, left] = c

    return distances, constraints


def constrained_mds_gradient(
    x: np.ndarray, distances: np.ndarray, constraints: np.ndarray
) -> Tuple[float, np.ndarray]:
    """Stress of squared distances; satisfied subset/disjoint pairs are ignored."""

    grad = np.zeros_like(x, dtype=float)
    loss = 0.0
    n = distances.shape[0]
    for i in range(n):
        xi, yi = x[2 * i], x[2 * i + 1]
        for j in range(i + 1, n):
            xj, yj = x[2 * j], x[2 * j + 1]
            dij = distances[i, j]
            constraint = constraints[i, j]

            squared = (xj - xi) ** 2 + (yj - yi) ** 2
            dist = math.sqrt(squared)
            delta = squared - dij * dij

            if (constraint > 0 and dist <= dij) or (constraint < 0 and dist >= dij):
                continue

            loss += 2.0 * delta * delta
            grad[2 * i] += 4.0 * delta * (xi - xj)
            grad[2 * i + 1] += 4.0 * delta * (yi - yj)
            grad[2 * j] += 4.0 * delta * (xj - xi)
            grad[2 * j + 1] += 4.0 * delta * (yj - yi)
    return loss, grad


def constrained_mds_layout(
    areas: Sequence[SetDatum], options: SolveOptions, rng: np.random.Generator
) -> Dict[SetId, Circle]:
    """Multidimensional scaling of the target distance matrix, best of several restarts."""

    sets = _single_sets(areas)
    set_index = {area.sets[0]: idx for idx, area in enumerate(sets)}
    distances, constraints = get_distance_matrices(areas, sets, set_index)

    # keep distances bounded, conjugate gradient misbehaves on large scales
    norm = float(np.linalg.norm(distances)) / max(len(sets), 1)
    if norm <= 0.0:
        norm = 1.0
    distances = distances / norm

    best = None
    for restart in range(options.mds_restarts):
        x0 = rng.random(2 * len(sets))
        result = minimize(
            constrained_mds_gradient,
            x0,
            args=(distances, constraints),
            jac=True,
            method="CG",
            options={"maxiter": options.mds_max_iterations},
        )
        logger.debug("constrained MDS restart %d loss=%.6g", restart, float(result.fun))
        if best is None or result.fun < best.fun:
            best = result

    positions = best.x * norm
    return {
        area.sets[0]: Circle(
            area.sets[0],
            float(positions[2 * idx]),
            float(positions[2 * idx + 1]),
            radius_for_size(area.size),
        )
        for idx, area in enumerate(sets)
    }


def greedy_layout(
    areas: Sequence[SetDatum], loss: LossCallable = loss_function
) -> Dict[SetId, Circle]:
    """Place sets one by one, most overlapped first, at the best-loss candidate spot."""

    sizes: Dict[SetId, float] = {}
    circles: Dict[SetId, Circle] = {}
    overlaps: Dict[SetId, List[Tuple[SetId, float, float]]] = {}
    for area in _single_sets(areas):
        set_id = area.sets[0]
        sizes[set_id] = area.size
        circles[set_id] = Circle(set_id, 1e10, 1e10, radius_for_size(area.size))
        overlaps[set_id] = []

    pair_areas = [area for area in areas if len(area.sets) == 2]
    for area in pair_areas:
        left, right = area.sets
        weight = area.weight
        # fully contained sets should not drive the placement order
        if area.size >= min(sizes[left], sizes[right]) * (1.0 - SMALL):
            weight = 0.0
        overlaps[left].append((right, area.size, weight))
        overlaps[right].append((left, area.size, weight))

    most_overlapped = sorted(
        overlaps,
        key=lambda set_id: sum(size * weight for _, size, weight in overlaps[set_id]),
        reverse=True,
    )
    if not most_overlapped:
        return circles

    positioned: Set[SetId] = set()

    def place(set_id: SetId, point: Point) -> None:
        circles[set_id] = circles[set_id].moved(point[0], point[1])
        positioned.add(set_id)

    place(most_overlapped[0], (0.0, 0.0))

    for set_id in most_overlapped[1:]:
        current = circles[set_id]
        neighbours = sorted(
            (entry for entry in overlaps[set_id] if entry[0] in positioned),
            key=lambda entry: entry[1],
            reverse=True,
        )
        if not neighbours:
            raise ValueError(f"missing pairwise overlap information for set {set_id!r}")

        points: List[Point] = []
        for j, (other_id, size, _) in enumerate(neighbours):
            p1 = circles[other_id]
            d1 = distance_from_intersect_area(current.radius, p1.radius, size)

            # axis aligned candidates read best on 2 and 3 set diagrams
            points.append((p1.x + d1, p1.y))
            points.append((p1.x - d1, p1.y))
            points.append((p1.x, p1.y + d1))
            points.append((p1.x, p1.y - d1))

            for other_id2, size2, _ in neighbours[j + 1 :]:
                p2 = circles[other_id2]
                d2 = distance_from_intersect_area(current.radius, p2.radius, size2)
                points.extend(
                    circle_circle_intersection(
                        Circle(other_id, p1.x, p1.y, d1), Circle(other_id2, p2.x, p2.y, d2)
                    )
                )

        placed_ids = positioned | {set_id}
        relevant = [area for area in areas if all(s in placed_ids for s in area.sets)]
        best_loss = math.inf
        best_point = points[0]
        for point in points:
            circles[set_id] = current.moved(point[0], point[1])
            local_loss = loss(circles, relevant)
            if local_loss < best_loss:
                best_loss = local_loss
                best_point = point

        place(set_id, best_point)

    return circles


def best_initial_layout(
    areas: Sequence[SetDatum],
    options: SolveOptions,
    rng: np.random.Generator,
    loss: LossCallable = loss_function,
) -> Dict[SetId, Circle]:
    """Greedy layout, replaced by constrained MDS on larger problems when it scores better."""

    initial = greedy_layout(areas, loss)
    if len(areas) >= options.mds_min_areas:
        constrained = constrained_mds_layout(areas, options, rng)
        constrained_loss = loss(constrained, areas)
        greedy_loss = loss(initial, areas)
        logger.debug(
            "initial layout losses greedy=%.6g constrained_mds=%.6g", greedy_loss, constrained_loss
        )
        if constrained_loss + 1e-8 < greedy_loss:
            initial = constrained
    return initial


__all__ = [
    "add_missing_areas",
    "best_initial_layout",
    "constrained_mds_gradient",
    "constrained_mds_layout",
    "distance_from_intersect_area",
    "get_distance_matrices",
    "greedy_layout",
    "radius_for_size",
]
