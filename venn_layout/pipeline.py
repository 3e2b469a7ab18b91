"""Boundary between raw chart data and the layout core."""

from __future__ import annotations

import dataclasses
import logging
import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .config import LayoutConfig, get_layout_config
from .geometry import intersection_area_path
from .labels import compute_text_centres
from .logging_utils import apply_debug_logging
from .postprocess import normalize_solution, scale_solution
from .solver import clean_areas, venn
from .types import CircleRecord, IntersectionRecord, Point, SetDatum, SetKey, Solution

logger = logging.getLogger(__name__)


@dataclass
class VennLayout:
    circles: List[CircleRecord] = field(default_factory=list)
    intersections: List[IntersectionRecord] = field(default_factory=list)
    text_centres: Dict[SetKey, Point] = field(default_factory=dict)


def coerce_size(value: object) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(result) or result < 0:
        return None
    return result


def coerce_sets(value: object) -> Optional[SetKey]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return None
    sets = tuple(value)
    if not sets or not all(isinstance(item, str) and item for item in sets):
        return None
    if len(set(sets)) != len(sets):
        return None
    return sets


def prepare_set_data(
    data: Iterable[Mapping[str, Any]],
    *,
    sets_key: str = "sets",
    size_key: str = "size",
    label_key: str = "label",
) -> List[SetDatum]:
    """Rename caller fields to ``SetDatum`` and drop rows the solver cannot use."""

    records: List[SetDatum] = []
    for index, row in enumerate(data):
        if not isinstance(row, Mapping):
            logger.debug("Skipping row %d: not a mapping", index)
            continue
        sets = coerce_sets(row.get(sets_key))
        size = coerce_size(row.get(size_key))
        if sets is None or size is None:
            logger.debug("Skipping row %d: malformed %r/%r", index, sets_key, size_key)
            continue
        if size == 0:
            continue
        label = row.get(label_key)
        weight = coerce_size(row.get("weight"))
        records.append(
            SetDatum(
                sets=sets,
                size=size,
                label=None if label is None else str(label),
                weight=1.0 if weight is None else weight,
            )
        )
    return records


def _circle_records(
    circles: Solution, records: List[SetDatum], centres: Mapping[SetKey, Point]
) -> List[CircleRecord]:
    labels = {datum.sets[0]: datum.label for datum in records if datum.is_single}
    output: List[CircleRecord] = []
    for set_id, circle in circles.items():
        text_x, text_y = centres[(set_id,)]
        output.append(
            {
                "set_id": set_id,
                "x": circle.x,
                "y": circle.y,
                "size": (circle.radius * 2.0) ** 2,
                "text": labels.get(set_id) or set_id,
                "textX": text_x,
                "textY": text_y,
            }
        )
    return output


def _intersection_records(
    circles: Solution,
    records: List[SetDatum],
    centres: Mapping[SetKey, Point],
    delimiter: str,
) -> List[IntersectionRecord]:
    output: List[IntersectionRecord] = []
    for datum in records:
        if datum.is_single:
            continue
        set_id = delimiter.join(datum.sets)
        text_x, text_y = centres[datum.sets]
        output.append(
            {
                "set_id": set_id,
                "sets": list(datum.sets),
                "path": intersection_area_path([circles[s] for s in datum.sets]),
                "text": datum.label or set_id,
                "textX": text_x,
                "textY": text_y,
                "size": datum.size,
            }
        )
    return output


def get_venn_solution(
    data: Iterable[Mapping[str, Any]],
    config: Optional[LayoutConfig] = None,
    **overrides: Any,
) -> VennLayout:
    """Solve, orient, scale and label a Venn diagram for ``data``."""

    cfg = config if config is not None else get_layout_config()
    if overrides:
        cfg = dataclasses.replace(cfg, **overrides)

    warnings: List[str] = []
    records = clean_areas(
        prepare_set_data(
            data, sets_key=cfg.sets_key, size_key=cfg.size_key, label_key=cfg.label_key
        ),
        warnings,
    )
    for warning in warnings:
        logger.warning(warning)
    if not records:
        logger.info("No usable set records; returning empty layout")
        return VennLayout()

    solution = venn(records, cfg.solve)
    if cfg.normalize:
        solution = normalize_solution(
            solution, cfg.orientation, pack_clusters=cfg.pack_clusters
        )
    circles = scale_solution(solution, cfg.width, cfg.height, cfg.padding)
    centres = compute_text_centres(circles, records)

    layout = VennLayout(
        circles=_circle_records(circles, records, centres),
        intersections=_intersection_records(circles, records, centres, cfg.set_id_delimiter),
        text_centres=centres,
    )
    logger.info(
        "Venn layout ready: %d circles, %d intersections",
        len(layout.circles),
        len(layout.intersections),
    )
    return layout


apply_debug_logging(globals(), logger=logger)


__all__ = [
    "VennLayout",
    "coerce_sets",
    "coerce_size",
    "get_venn_solution",
    "prepare_set_data",
]
