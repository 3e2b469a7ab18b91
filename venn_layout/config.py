"""Configuration defaults for the Venn layout pipeline."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field

from .solver.model import SolveOptions

SET_ID_DELIMITER = "∩"


@dataclass
class LayoutConfig:
    """Knobs accepted by :func:`venn_layout.pipeline.get_venn_solution`."""

    orientation: float = math.pi
    normalize: bool = False
    pack_clusters: bool = False
    width: float = 600.0
    height: float = 350.0
    padding: float = 15.0
    sets_key: str = "sets"
    size_key: str = "size"
    label_key: str = "label"
    set_id_delimiter: str = SET_ID_DELIMITER
    solve: SolveOptions = field(default_factory=SolveOptions)


_LAYOUT_CONFIG = LayoutConfig()


def get_layout_config() -> LayoutConfig:
    return copy.deepcopy(_LAYOUT_CONFIG)


def set_layout_config(config: LayoutConfig) -> None:
    global _LAYOUT_CONFIG
    _LAYOUT_CONFIG = copy.deepcopy(config)


__all__ = ["LayoutConfig", "SET_ID_DELIMITER", "get_layout_config", "set_layout_config"]
