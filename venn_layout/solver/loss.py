"""Overlap loss between a circle layout and the requested set sizes."""

from __future__ import annotations

import math
from typing import Dict, Mapping, Sequence, Tuple

import numpy as np
from scipy.optimize import approx_fprime

from ..geometry import circle_overlap, circle_overlap_derivative, distance, intersection_area
from ..types import Circle, SetDatum, SetId
from .model import GroupTerm, LossModel, PairTerm

_DENOM_EPS = 1e-12
_FD_STEP = 1e-7


def loss_function(circles: Mapping[SetId, Circle], areas: Sequence[SetDatum]) -> float:
    """Weighted squared error between actual and requested overlaps.

    Single sets carry no term since their radius already encodes the size.
    """

    output = 0.0
    for area in areas:
        if len(area.sets) == 1:
            continue
        if len(area.sets) == 2:
            left = circles[area.sets[0]]
            right = circles[area.sets[1]]
            overlap = circle_overlap(left.radius, right.radius, distance(left.center, right.center))
        else:
            overlap = intersection_area([circles[s] for s in area.sets]).area
        output += area.weight * (overlap - area.size) ** 2
    return output


def build_loss_model(circles: Mapping[SetId, Circle], areas: Sequence[SetDatum]) -> LossModel:
    set_ids = tuple(circles)
    index: Dict[SetId, int] = {set_id: idx for idx, set_id in enumerate(set_ids)}
    pairs = []
    groups = []
    for area in areas:
        if len(area.sets) == 2:
            pairs.append(PairTerm(index[area.sets[0]], index[area.sets[1]], area.size, area.weight))
        elif len(area.sets) > 2:
            groups.append(GroupTerm(tuple(index[s] for s in area.sets), area.size, area.weight))
    return LossModel(
        set_ids=set_ids,
        radii=tuple(circles[s].radius for s in set_ids),
        pairs=tuple(pairs),
        groups=tuple(groups),
    )


def positions_vector(circles: Mapping[SetId, Circle], model: LossModel) -> np.ndarray:
    x = np.zeros(model.size, dtype=float)
    for idx, set_id in enumerate(model.set_ids):
        x[2 * idx] = circles[set_id].x
        x[2 * idx + 1] = circles[set_id].y
    return x


def circles_from_vector(x: np.ndarray, model: LossModel) -> Dict[SetId, Circle]:
    return {
        set_id: Circle(set_id, float(x[2 * idx]), float(x[2 * idx + 1]), model.radii[idx])
        for idx, set_id in enumerate(model.set_ids)
    }


def _group_loss(model: LossModel, x: np.ndarray) -> float:
    total = 0.0
    for term in model.groups:
        circles = [
            Circle(model.set_ids[i], float(x[2 * i]), float(x[2 * i + 1]), model.radii[i])
            for i in term.indices
        ]
        overlap = intersection_area(circles).area
        total += term.weight * (overlap - term.target) ** 2
    return total


def loss_and_gradient(model: LossModel, x: np.ndarray) -> Tuple[float, np.ndarray]:
    """Loss at ``x`` with its gradient.

    Pair terms are differentiated analytically; terms over three or more sets
    use forward differences on the exact region area.
    """

    grad = np.zeros(model.size, dtype=float)
    loss = 0.0
    for term in model.pairs:
        i, j = term.left, term.right
        dx = float(x[2 * i] - x[2 * j])
        dy = float(x[2 * i + 1] - x[2 * j + 1])
        d = math.hypot(dx, dy)
        r1 = model.radii[i]
        r2 = model.radii[j]
        diff = circle_overlap(r1, r2, d) - term.target
        loss += term.weight * diff * diff
        if d <= _DENOM_EPS:
            continue
        slope = 2.0 * term.weight * diff * circle_overlap_derivative(r1, r2, d) / d
        grad[2 * i] += slope * dx
        grad[2 * i + 1] += slope * dy
        grad[2 * j] -= slope * dx
        grad[2 * j + 1] -= slope * dy

    if model.groups:
        loss += _group_loss(model, x)
        step = _FD_STEP * max(1.0, max(model.radii))
        grad += approx_fprime(np.asarray(x, dtype=float), lambda v: _group_loss(model, v), step)

    return loss, grad


__all__ = [
    "build_loss_model",
    "circles_from_vector",
    "loss_and_gradient",
    "loss_function",
    "positions_vector",
]
