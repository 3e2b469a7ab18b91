"""Layout solver façade: set sizes in, circle positions out."""

from __future__ import annotations

import logging
from typing import Sequence

from ..types import SetDatum, Solution
from .initial_guess import (
    add_missing_areas,
    constrained_mds_layout,
    distance_from_intersect_area,
    greedy_layout,
)
from .loss import loss_function
from .model import LayoutResult, LayoutState, SolveOptions
from .solver_core import clean_areas, minimize_layout, solve_layout

logger = logging.getLogger(__name__)

if not logging.getLogger().handlers:  # pragma: no cover - depends on host application
    logging.basicConfig(level=logging.INFO)


def venn(areas: Sequence[SetDatum], options: SolveOptions = SolveOptions()) -> Solution:
    """Return unit-space circles whose overlaps approximate ``areas``."""

    logger.info("Solving Venn layout for %d set records", len(areas))
    result = solve_layout(areas, options)
    logger.info(
        "Venn layout finished circles=%d loss=%.6g iterations=%d converged=%s",
        len(result.circles),
        result.loss,
        result.iterations,
        result.converged,
    )
    return result.circles


__all__ = [
    "LayoutResult",
    "LayoutState",
    "SolveOptions",
    "add_missing_areas",
    "clean_areas",
    "constrained_mds_layout",
    "distance_from_intersect_area",
    "greedy_layout",
    "loss_function",
    "minimize_layout",
    "solve_layout",
    "venn",
]
