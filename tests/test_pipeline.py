import logging
import math

from venn_layout import (
    Circle,
    LayoutConfig,
    SetDatum,
    get_layout_config,
    get_venn_solution,
    intersection_area,
    prepare_set_data,
    set_layout_config,
)


def _three_set_data():
    return [
        {"sets": ["A"], "size": 12},
        {"sets": ["B"], "size": 12},
        {"sets": ["C"], "size": 12},
        {"sets": ["A", "B"], "size": 2},
        {"sets": ["A", "C"], "size": 2},
        {"sets": ["B", "C"], "size": 2},
        {"sets": ["A", "B", "C"], "size": 1},
    ]


def _circle_contains(record, x, y):
    radius = math.sqrt(record["size"]) / 2.0
    return math.hypot(x - record["x"], y - record["y"]) <= radius + 1e-6


def test_three_set_diagram():
    layout = get_venn_solution(_three_set_data())

    assert [c["set_id"] for c in layout.circles] == ["A", "B", "C"]
    assert [i["set_id"] for i in layout.intersections] == ["A∩B", "A∩C", "B∩C", "A∩B∩C"]

    sizes = [c["size"] for c in layout.circles]
    assert all(math.isclose(s, sizes[0], rel_tol=1e-9) for s in sizes)

    for record in layout.intersections:
        assert record["path"].startswith("M ")
        assert record["path"] != "M 0 0"
        assert record["text"] == record["set_id"]
        members = [c for c in layout.circles if c["set_id"] in record["sets"]]
        assert all(_circle_contains(c, record["textX"], record["textY"]) for c in members)

    triple = layout.intersections[-1]
    assert triple["sets"] == ["A", "B", "C"]
    assert triple["size"] == 1


def test_circles_fit_default_canvas():
    layout = get_venn_solution(_three_set_data())
    for record in layout.circles:
        radius = math.sqrt(record["size"]) / 2.0
        assert record["x"] - radius >= 15 - 1e-6
        assert record["x"] + radius <= 585 + 1e-6
        assert record["y"] - radius >= 15 - 1e-6
        assert record["y"] + radius <= 335 + 1e-6
        assert _circle_contains(record, record["textX"], record["textY"])


def test_single_record_is_centred():
    layout = get_venn_solution([{"sets": ["A"], "size": 6}])

    assert len(layout.circles) == 1
    assert layout.intersections == []
    circle = layout.circles[0]
    assert math.isclose(circle["x"], 300.0, rel_tol=1e-9)
    assert math.isclose(circle["y"], 175.0, rel_tol=1e-9)
    assert math.isclose(circle["size"], 320.0 ** 2, rel_tol=1e-9)
    assert not math.isnan(circle["textX"]) and not math.isnan(circle["textY"])


def test_zero_size_records_are_excluded():
    layout = get_venn_solution([{"sets": ["A"], "size": 6}, {"sets": ["B"], "size": 0}])
    assert [c["set_id"] for c in layout.circles] == ["A"]
    assert layout.intersections == []


def test_malformed_rows_are_skipped():
    data = [
        {"sets": "A", "size": 3},
        {"sets": ["A"], "size": "many"},
        {"sets": ["A"], "size": True},
        {"sets": ["A"], "size": -1},
        {"sets": [], "size": 3},
        {"sets": ["A", "A"], "size": 3},
        {"size": 3},
        5,
        {"sets": ["A"], "size": "4.5", "label": "Apples", "weight": 2},
    ]
    records = prepare_set_data(data)
    assert records == [SetDatum(sets=("A",), size=4.5, label="Apples", weight=2.0)]


def test_only_malformed_rows_give_empty_layout():
    layout = get_venn_solution([{"sets": None, "size": 3}, {"sets": ["A"]}])
    assert layout.circles == []
    assert layout.intersections == []
    assert layout.text_centres == {}


def test_custom_field_names():
    data = [
        {"keys": ["x"], "count": 5, "name": "Ex"},
        {"keys": ["y"], "count": 5},
        {"keys": ["x", "y"], "count": 1, "name": "Both"},
    ]
    layout = get_venn_solution(data, sets_key="keys", size_key="count", label_key="name")

    assert [c["text"] for c in layout.circles] == ["Ex", "y"]
    assert layout.intersections[0]["text"] == "Both"
    assert layout.intersections[0]["set_id"] == "x∩y"


def test_intersection_without_single_sets_is_dropped(caplog):
    with caplog.at_level(logging.WARNING, logger="venn_layout.pipeline"):
        layout = get_venn_solution([{"sets": ["A"], "size": 6}, {"sets": ["A", "Q"], "size": 1}])
    assert "no size for Q" in caplog.text
    assert len(layout.circles) == 1
    assert layout.intersections == []


def test_normalized_layout_keeps_records():
    config = LayoutConfig(normalize=True, width=400, height=400, padding=10)
    layout = get_venn_solution(_three_set_data(), config)

    assert len(layout.circles) == 3
    assert len(layout.intersections) == 4
    for record in layout.circles:
        radius = math.sqrt(record["size"]) / 2.0
        assert 10 - 1e-6 <= record["x"] - radius
        assert record["x"] + radius <= 390 + 1e-6


def test_layout_config_roundtrip():
    original = get_layout_config()
    try:
        set_layout_config(LayoutConfig(width=300.0, height=200.0))
        config = get_layout_config()
        assert (config.width, config.height) == (300.0, 200.0)

        config.width = 1.0
        assert get_layout_config().width == 300.0

        layout = get_venn_solution([{"sets": ["A"], "size": 6}])
        assert math.isclose(layout.circles[0]["x"], 150.0, rel_tol=1e-9)
    finally:
        set_layout_config(original)

    assert get_layout_config().width == 600.0


def test_single_set_labels_avoid_other_circles():
    layout = get_venn_solution(_three_set_data())
    for record in layout.circles:
        for other in layout.circles:
            if other is record:
                continue
            radius = math.sqrt(other["size"]) / 2.0
            gap = math.hypot(record["textX"] - other["x"], record["textY"] - other["y"])
            assert gap >= radius - 1e-6


def test_identical_sets_keep_triple_region_small():
    data = [
        {"sets": ["A"], "size": 10},
        {"sets": ["B"], "size": 10},
        {"sets": ["C"], "size": 10},
        {"sets": ["A", "B"], "size": 10},
        {"sets": ["A", "C"], "size": 3},
        {"sets": ["B", "C"], "size": 3},
        {"sets": ["A", "B", "C"], "size": 3},
    ]
    layout = get_venn_solution(data)
    circles = {
        c["set_id"]: Circle(c["set_id"], c["x"], c["y"], math.sqrt(c["size"]) / 2.0)
        for c in layout.circles
    }
    triple = intersection_area([circles["A"], circles["B"], circles["C"]]).area
    pair = intersection_area([circles["A"], circles["C"]]).area
    whole = math.pi * circles["C"].radius ** 2

    assert triple <= pair * (1.0 + 1e-9)
    assert triple < 0.5 * whole
    assert math.isclose(pair / whole, 0.3, rel_tol=0.05)


def test_output_does_not_depend_on_size_units():
    factor = 2.0 ** -40
    tiny = [dict(row, size=row["size"] * factor) for row in _three_set_data()]
    reference = get_venn_solution(_three_set_data())
    scaled = get_venn_solution(tiny)

    for expected, actual in zip(reference.circles + reference.intersections,
                                scaled.circles + scaled.intersections):
        for key in ("x", "y", "textX", "textY"):
            if key in expected:
                assert math.isclose(actual[key], expected[key], rel_tol=1e-9, abs_tol=1e-9)


def test_tiny_disjoint_sets_are_not_concentric():
    layout = get_venn_solution([{"sets": ["A"], "size": 1e-11}, {"sets": ["B"], "size": 1e-11}])
    a, b = layout.circles
    radius = math.sqrt(a["size"]) / 2.0
    assert math.hypot(a["x"] - b["x"], a["y"] - b["y"]) >= 2.0 * radius * (1.0 - 1e-6)


def test_public_names_are_exported():
    import venn_layout

    assert all(hasattr(venn_layout, name) for name in venn_layout.__all__)
    assert {"get_venn_solution", "intersection_area_path", "compute_text_centres"} <= set(venn_layout.__all__)
