"""Example pipeline: lay out a three-set Venn diagram and print its geometry."""

from venn_layout import LayoutConfig, SolveOptions, get_venn_solution, solve_layout
from venn_layout.pipeline import prepare_set_data

DATA = [
    {"sets": ["A"], "size": 12, "label": "Apples"},
    {"sets": ["B"], "size": 12, "label": "Bananas"},
    {"sets": ["C"], "size": 12, "label": "Cherries"},
    {"sets": ["A", "B"], "size": 2},
    {"sets": ["A", "C"], "size": 2},
    {"sets": ["B", "C"], "size": 2},
    {"sets": ["A", "B", "C"], "size": 1, "label": "All three"},
]


def main() -> None:
    result = solve_layout(prepare_set_data(DATA), SolveOptions(random_seed=123))
    print("Solved\nConverged:", result.converged)
    print(f"Loss: {result.loss:.3e} after {result.iterations} iterations")
    for set_id, circle in result.circles.items():
        print(f"{set_id}: ({circle.x:.4f}, {circle.y:.4f}) r={circle.radius:.4f}")

    layout = get_venn_solution(DATA, LayoutConfig(normalize=True))
    print("\nCircles:")
    for record in layout.circles:
        print(
            f"  {record['text']}: ({record['x']:.1f}, {record['y']:.1f})"
            f" label at ({record['textX']:.1f}, {record['textY']:.1f})"
        )
    print("Intersections:")
    for record in layout.intersections:
        print(f"  {record['set_id']} [{record['text']}]")
        for line in record["path"].splitlines():
            print(f"    {line}")


if __name__ == "__main__":
    main()
