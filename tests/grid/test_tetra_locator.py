import numpy as np
import pytest

from src.qhullgrid.errors import InputShapeError
from src.qhullgrid.grid.locator import find_containing, locate
from src.qhullgrid.grid.tetra import TetrahedronMesh, barycentric

UNIT_TET = np.array([
    [0.0, 0.0, 0.0],
    [1.0, 0.0, 0.0],
    [0.0, 1.0, 0.0],
    [0.0, 0.0, 1.0],
])


def _two_tets():
    """
    Two tetrahedra sharing the face (1, 2, 3); apex 0 at the origin, apex 4 at (1,1,1).
    """
    P = np.vstack([UNIT_TET, [[1.0, 1.0, 1.0]]]).T  # (3, 5)
    T = np.array([[0, 1, 2, 3], [4, 1, 2, 3]]).T    # (4, 2)
    return P, T


def test_barycentric_sums_to_one():
    rng = np.random.default_rng(0)
    for _ in range(50):
        coords = rng.random((4, 3)) * 10.0 - 5.0
        p = rng.random(3) * 20.0 - 10.0
        w = barycentric(coords, p)
        assert np.isclose(w.sum(), 1.0)
        assert np.allclose(w @ coords, p)


def test_barycentric_at_vertices_is_unit():
    for i, v in enumerate(UNIT_TET):
        w = barycentric(UNIT_TET, v)
        assert np.allclose(w, np.eye(4)[i])


def test_barycentric_inside_and_outside():
    assert np.all(barycentric(UNIT_TET, [0.1, 0.2, 0.3]) > 0)
    assert np.any(barycentric(UNIT_TET, [0.6, 0.6, 0.6]) < 0)


def test_flat_tetrahedron_contains_nothing():
    flat = UNIT_TET.copy()
    flat[3] = [0.5, 0.5, 0.0]
    mesh = TetrahedronMesh.from_indices(flat.T, np.array([[0, 1, 2, 3]]).T)
    assert locate([0.1, 0.1, 0.0], mesh) is None


def test_locate_inside_each_tetrahedron():
    P, T = _two_tets()
    mesh = TetrahedronMesh.from_indices(P, T)
    assert len(mesh) == 2
    assert locate([0.1, 0.1, 0.1], mesh) == 0
    assert locate([0.8, 0.8, 0.8], mesh) == 1
    assert locate([2.0, 0.0, 0.0], mesh) is None


def test_locate_is_independent_of_scan_order_for_interior_points():
    P, T = _two_tets()
    fwd = TetrahedronMesh.from_indices(P, T)
    rev = TetrahedronMesh.from_indices(P, T[:, ::-1])
    p_in_first = [0.1, 0.1, 0.1]
    assert fwd.vertex_ids[locate(p_in_first, fwd)].tolist() == [0, 1, 2, 3]
    assert rev.vertex_ids[locate(p_in_first, rev)].tolist() == [0, 1, 2, 3]


def test_shared_face_goes_to_first_scanned():
    P, T = _two_tets()
    on_face = [0.25, 0.25, 0.5]  # x + y + z == 1
    fwd = TetrahedronMesh.from_indices(P, T)
    rev = TetrahedronMesh.from_indices(P, T[:, ::-1])
    assert locate(on_face, fwd) == 0
    assert fwd.vertex_ids[0].tolist() == [0, 1, 2, 3]
    assert locate(on_face, rev) == 0
    assert rev.vertex_ids[0].tolist() == [4, 1, 2, 3]


def test_hint_is_tried_first():
    P, T = _two_tets()
    mesh = TetrahedronMesh.from_indices(P, T)
    on_face = [0.25, 0.25, 0.5]
    # both contain the face point; the hint wins over scan order
    assert locate(on_face, mesh, hint=1) == 1

    # a wrong hint falls back to the full scan
    t, w = find_containing([0.1, 0.1, 0.1], mesh, hint=1)
    assert t == 0
    assert np.isclose(w.sum(), 1.0)


def test_box_candidates_prune_in_input_order():
    P, T = _two_tets()
    mesh = TetrahedronMesh.from_indices(P, T)
    assert mesh.box_candidates([0.5, 0.5, 0.5]).tolist() == [0, 1]
    assert mesh.box_candidates([5.0, 5.0, 5.0]).tolist() == []
    assert mesh[1].box_contains([0.9, 0.9, 0.9])
    assert np.isclose(abs(mesh[0].volume()), 1.0 / 6.0)


def test_mesh_rejects_bad_indices():
    P, T = _two_tets()
    with pytest.raises(InputShapeError):
        TetrahedronMesh.from_indices(P, T.T)          # (2, 4)
    with pytest.raises(InputShapeError):
        TetrahedronMesh.from_indices(P, T + 1)        # id 5 out of range
    with pytest.raises(InputShapeError):
        TetrahedronMesh.from_indices(P[:2], T)        # 2-D points
    with pytest.raises(InputShapeError):
        TetrahedronMesh.from_indices(P, T.astype(float))
