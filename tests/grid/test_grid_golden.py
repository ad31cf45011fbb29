import numpy as np

from src.qhullgrid.grid.interpolate import qgrid3
from tests.grid.helpers_golden_grid import (
    GOLDEN_ROOT,
    assert_metrics_match,
    compute_grid_metrics,
    count_missing_cells,
    load_metrics,
    render_slice_png,
    save_metrics,
    update_mode,
)


def _check_case(case_dir, field, missing):
    json_path = case_dir / "metrics.json"

    metrics = compute_grid_metrics(field, missing)
    png_bytes = render_slice_png(field, missing, axis=2)
    assert count_missing_cells(png_bytes) == metrics["slice_missing"]

    if update_mode():
        save_metrics(json_path, metrics)
        return

    assert json_path.exists(), f"missing golden {json_path}"
    assert_metrics_match(metrics, load_metrics(json_path))


def test_golden_scaled_tetrahedron_linear_field():
    P = 4.0 * np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0],
    ]).T
    f = P[0] - P[1] + 2.0 * P[2]
    tets = np.array([[0, 1, 2, 3]]).T

    field = qgrid3(P, f, tets, dimension=[8, 6, 5], start=0.25, delta=0.5, missing=-99.0)
    _check_case(GOLDEN_ROOT / "QG01_scaled_tetrahedron_linear", field, -99.0)


def test_golden_single_tetrahedron_ramp():
    P = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0],
    ]).T
    f = np.array([0.0, 0.0, 0.0, 1.0])
    tets = np.array([[0, 1, 2, 3]]).T

    field = qgrid3(P, f, tets, dimension=16, start=-0.25, delta=0.1, missing=-1.0)
    _check_case(GOLDEN_ROOT / "QG02_single_tetrahedron_ramp", field, -1.0)
