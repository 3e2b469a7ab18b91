from __future__ import annotations

import dataclasses
import logging
import math
from typing import List, Optional, Sequence, Set

import numpy as np
from scipy.optimize import minimize

from ..logging_utils import apply_debug_logging
from ..types import Circle, SetDatum, SetKey
from .initial_guess import add_missing_areas, best_initial_layout
from .loss import build_loss_model, circles_from_vector, loss_and_gradient, positions_vector
from .model import LayoutResult, LayoutState, LossModel, SolveOptions

logger = logging.getLogger(__name__)


def clean_areas(areas: Sequence[SetDatum], warnings: Optional[List[str]] = None) -> List[SetDatum]:
    """Drop unusable records; first occurrence of a set combination wins."""

    if warnings is None:
        warnings = []
    singles: Set[str] = set()
    seen: Set[SetKey] = set()
    kept: List[SetDatum] = []

    for area in areas:
        if not area.sets or len(set(area.sets)) != len(area.sets):
            continue
        if not math.isfinite(area.size) or area.size <= 0:
            continue
        key = tuple(sorted(area.sets))
        if key in seen:
            warnings.append(f"duplicate entry for {'∩'.join(area.sets)} ignored")
            continue
        seen.add(key)
        if len(area.sets) == 1:
            singles.add(area.sets[0])
        kept.append(area)

    result: List[SetDatum] = []
    for area in kept:
        missing = [s for s in area.sets if s not in singles]
        if missing:
            warnings.append(
                f"intersection {'∩'.join(area.sets)} dropped: no size for {', '.join(missing)}"
            )
            continue
        result.append(area)
    return result


def _step(state: LayoutState, model: LossModel, options: SolveOptions) -> LayoutState:
    budget = min(options.step_iterations, options.max_iterations - state.iteration)
    result = minimize(
        lambda x: loss_and_gradient(model, x),
        np.array(state.positions, dtype=float),
        jac=True,
        method="L-BFGS-B",
        options={"maxiter": budget, "ftol": options.tol, "gtol": options.tol},
    )
    loss = float(result.fun)
    iteration = state.iteration + max(1, int(result.nit))
    if loss > state.loss:
        return LayoutState(state.positions, state.loss, iteration)
    return LayoutState(result.x, loss, iteration)


def _should_stop(previous: LayoutState, current: LayoutState, options: SolveOptions) -> bool:
    if current.iteration >= options.max_iterations:
        return True
    if current.loss <= options.tol:
        return True
    return previous.loss - current.loss <= options.tol * max(1.0, previous.loss)


def minimize_layout(model: LossModel, x0: np.ndarray, options: SolveOptions) -> LayoutState:
    """Fold ``_step`` over layout states until the stop predicate holds."""

    state = LayoutState(x0, loss_and_gradient(model, x0)[0], 0)
    if model.size == 0 or not (model.pairs or model.groups):
        return state

    while True:
        following = _step(state, model, options)
        logger.debug(
            "minimize_layout: iteration=%d loss=%.6g", following.iteration, following.loss
        )
        if _should_stop(state, following, options):
            return following
        state = following


def solve_layout(areas: Sequence[SetDatum], options: SolveOptions = SolveOptions()) -> LayoutResult:
    """Fit one circle per set so overlaps approximate the requested sizes."""

    warnings: List[str] = []
    cleaned = clean_areas(areas, warnings)
    if not any(len(area.sets) == 1 for area in cleaned):
        for warning in warnings:
            logger.warning(warning)
        return LayoutResult(
            circles={}, loss=0.0, iterations=0, converged=True, areas=[], warnings=warnings
        )

    # solve with the largest set at unit area so tolerances do not depend on units
    scale = max(area.size for area in cleaned if area.is_single)
    unit_areas = add_missing_areas(
        [dataclasses.replace(area, size=area.size / scale) for area in cleaned]
    )
    rng = np.random.default_rng(options.random_seed)
    initial = best_initial_layout(unit_areas, options, rng)

    model = build_loss_model(initial, unit_areas)
    final = minimize_layout(model, positions_vector(initial, model), options)
    loss = final.loss * scale * scale

    converged = final.iteration < options.max_iterations or final.loss <= options.tol
    if not converged:
        warnings.append(f"iteration cap {options.max_iterations} reached; loss {loss:.3e}")
    for warning in warnings:
        logger.warning(warning)

    length = math.sqrt(scale)
    circles = {
        set_id: Circle(set_id, c.x * length, c.y * length, c.radius * length)
        for set_id, c in circles_from_vector(final.positions, model).items()
    }
    return LayoutResult(
        circles=circles,
        loss=loss,
        iterations=final.iteration,
        converged=converged,
        areas=add_missing_areas(cleaned),
        warnings=warnings,
    )


apply_debug_logging(globals(), logger=logger)


__all__ = ["clean_areas", "minimize_layout", "solve_layout"]
