from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, TypedDict

SetId = str
SetKey = Tuple[SetId, ...]
Point = Tuple[float, float]


class UnknownSetError(KeyError):
    """Raised when a set combination refers to a set missing from the solution."""

    def __init__(self, set_id: SetId, sets: SetKey):
        super().__init__(f"set {set_id!r} of {list(sets)} is not part of the solution")
        self.set_id = set_id
        self.sets = sets


@dataclass(frozen=True)
class SetDatum:
    """Cardinality of a single set (one id) or of an intersection (2+ ids)."""

    sets: SetKey
    size: float
    label: Optional[str] = None
    weight: float = 1.0

    @property
    def is_single(self) -> bool:
        return len(self.sets) == 1


@dataclass(frozen=True)
class Circle:
    set_id: SetId
    x: float
    y: float
    radius: float

    @property
    def center(self) -> Point:
        return (self.x, self.y)

    def moved(self, x: float, y: float) -> "Circle":
        return Circle(self.set_id, float(x), float(y), self.radius)


Solution = Dict[SetId, Circle]


class CircleRecord(TypedDict):
    set_id: SetId
    x: float
    y: float
    size: float
    text: str
    textX: float
    textY: float


class IntersectionRecord(TypedDict):
    set_id: str
    sets: List[SetId]
    path: str
    text: str
    textX: float
    textY: float
    size: float


__all__ = [
    "Circle",
    "CircleRecord",
    "IntersectionRecord",
    "Point",
    "SetDatum",
    "SetId",
    "SetKey",
    "Solution",
    "UnknownSetError",
]
