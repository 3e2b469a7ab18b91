import logging
import math

import pytest

from venn_layout import Circle, SetDatum, UnknownSetError, compute_text_centre, compute_text_centres
from venn_layout.labels import circle_margin, get_containing_circles


def _inside(point, circle):
    return math.hypot(point[0] - circle.x, point[1] - circle.y) <= circle.radius + 1e-9


def _lens():
    return {"A": Circle("A", 0.0, 0.0, 1.0), "B": Circle("B", 1.0, 0.0, 1.0)}


def test_single_circle_label_is_its_centre():
    x, y = compute_text_centre([Circle("A", 2.0, -1.0, 1.5)], [])
    assert math.isclose(x, 2.0, abs_tol=1e-6)
    assert math.isclose(y, -1.0, abs_tol=1e-6)


def test_exclusive_region_label_avoids_other_circle():
    circles = _lens()
    point = compute_text_centre([circles["A"]], [circles["B"]])
    assert _inside(point, circles["A"])
    assert not _inside(point, circles["B"])
    assert circle_margin(point, [circles["A"]], [circles["B"]]) > 0.2


def test_intersection_label_is_inside_both():
    circles = _lens()
    point = compute_text_centre([circles["A"], circles["B"]], [])
    assert math.isclose(point[0], 0.5, abs_tol=1e-4)
    assert math.isclose(point[1], 0.0, abs_tol=1e-4)


def test_containing_circles():
    circles = {
        "A": Circle("A", 0.0, 0.0, 3.0),
        "B": Circle("B", 1.0, 0.0, 1.0),
        "C": Circle("C", 10.0, 0.0, 1.0),
    }
    assert get_containing_circles(circles) == {"A": [], "B": ["A"], "C": []}


def test_contained_set_label_stays_in_its_circle():
    circles = {"A": Circle("A", 0.0, 0.0, 3.0), "B": Circle("B", 1.0, 0.0, 1.0)}
    areas = [SetDatum(("A",), 28.0), SetDatum(("B",), 3.1), SetDatum(("A", "B"), 3.1)]
    centres = compute_text_centres(circles, areas)

    assert set(centres) == {("A",), ("B",), ("A", "B")}
    assert _inside(centres[("B",)], circles["B"])
    assert _inside(centres[("A", "B")], circles["B"])
    assert _inside(centres[("A",)], circles["A"])
    assert not _inside(centres[("A",)], circles["B"])


def test_disjoint_region_falls_back_and_warns(caplog):
    circles = {"A": Circle("A", 0.0, 0.0, 1.0), "B": Circle("B", 5.0, 0.0, 1.0)}
    areas = [SetDatum(("A",), 3.0), SetDatum(("B",), 3.0), SetDatum(("A", "B"), 1.0)]
    with caplog.at_level(logging.WARNING, logger="venn_layout.labels"):
        centres = compute_text_centres(circles, areas)

    x, y = centres[("A", "B")]
    assert math.isclose(x, 2.5, abs_tol=1e-12)
    assert math.isclose(y, 0.0, abs_tol=1e-12)
    assert "A∩B" in caplog.text


def test_unknown_set_raises():
    with pytest.raises(UnknownSetError) as excinfo:
        compute_text_centres(_lens(), [SetDatum(("A", "Z"), 1.0)])
    assert excinfo.value.set_id == "Z"
    assert isinstance(excinfo.value, KeyError)
