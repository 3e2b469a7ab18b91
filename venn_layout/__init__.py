from .types import (
    Circle,
    CircleRecord,
    IntersectionRecord,
    SetDatum,
    Solution,
    UnknownSetError,
)
from .geometry import (
    circle_circle_intersection,
    circle_overlap,
    intersection_area,
    intersection_area_path,
)
from .solver import LayoutResult, SolveOptions, solve_layout, venn
from .postprocess import normalize_solution, scale_solution
from .labels import compute_text_centre, compute_text_centres
from .config import LayoutConfig, get_layout_config, set_layout_config
from .pipeline import VennLayout, get_venn_solution, prepare_set_data

__all__ = [
    "Circle",
    "CircleRecord",
    "IntersectionRecord",
    "LayoutConfig",
    "LayoutResult",
    "SetDatum",
    "Solution",
    "SolveOptions",
    "UnknownSetError",
    "VennLayout",
    "circle_circle_intersection",
    "circle_overlap",
    "compute_text_centre",
    "compute_text_centres",
    "get_layout_config",
    "get_venn_solution",
    "intersection_area",
    "intersection_area_path",
    "normalize_solution",
    "prepare_set_data",
    "scale_solution",
    "set_layout_config",
    "solve_layout",
    "venn",
]
