"""Core data structures for the layout solver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from ..types import SetDatum, SetId, Solution


@dataclass
class SolveOptions:
    """Layout solver options."""

    max_iterations: int = 500
    step_iterations: int = 50
    tol: float = 1e-10
    random_seed: Optional[int] = 0
    mds_restarts: int = 10
    mds_max_iterations: int = 200
    mds_min_areas: int = 8

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be positive")
        if self.step_iterations < 1:
            raise ValueError("step_iterations must be positive")
        if self.mds_restarts < 1:
            raise ValueError("mds_restarts must be positive")


@dataclass(frozen=True)
class PairTerm:
    left: int
    right: int
    target: float
    weight: float


@dataclass(frozen=True)
class GroupTerm:
    indices: Tuple[int, ...]
    target: float
    weight: float


@dataclass(frozen=True)
class LossModel:
    """Overlap constraints expressed against the flat position vector."""

    set_ids: Tuple[SetId, ...]
    radii: Tuple[float, ...]
    pairs: Tuple[PairTerm, ...]
    groups: Tuple[GroupTerm, ...]

    @property
    def size(self) -> int:
        return 2 * len(self.set_ids)


@dataclass(frozen=True)
class LayoutState:
    """One point of the minimization fold; ``positions`` is read-only."""

    positions: np.ndarray
    loss: float
    iteration: int

    def __post_init__(self) -> None:
        frozen = np.array(self.positions, dtype=float, copy=True)
        frozen.setflags(write=False)
        object.__setattr__(self, "positions", frozen)


@dataclass
class LayoutResult:
    circles: Solution
    loss: float
    iterations: int
    converged: bool
    areas: List[SetDatum] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


__all__ = [
    "GroupTerm",
    "LayoutResult",
    "LayoutState",
    "LossModel",
    "PairTerm",
    "SolveOptions",
]
