"""Adjacency rings built from the face list."""

from __future__ import annotations

import numpy as np

from mdenoise.algorithms.topology import (
    MeshTopology,
    NeighborhoodType,
    compute_face_ring_ce,
    compute_face_ring_cv,
    compute_vertex_face_ring,
    compute_vertex_ring,
    ring_pairs,
)
from mdenoise.synthetic import make_crease_mesh, make_cube_mesh


def _faces_sharing_vertex(faces: np.ndarray, k: int) -> set:
    shared = np.isin(faces, faces[k]).any(axis=1)
    return set(np.nonzero(shared)[0].tolist())


def test_vertex_ring_is_symmetric() -> None:
    verts, faces = make_cube_mesh(3)
    topo = MeshTopology.build(verts.shape[0], faces)

    for u, ring in enumerate(topo.vertex_ring):
        assert len(ring) == len(set(ring))
        assert u not in ring
        for v in ring:
            assert u in topo.vertex_ring[v]


def test_vertex_ring_of_single_triangle() -> None:
    faces = [(0, 1, 2)]
    ring = compute_vertex_ring(4, faces)
    assert sorted(ring[0]) == [1, 2]
    assert sorted(ring[1]) == [0, 2]
    assert sorted(ring[2]) == [0, 1]
    assert ring[3] == []


def test_vertex_face_ring_in_face_order() -> None:
    verts, faces = make_cube_mesh(2)
    ring = compute_vertex_face_ring(verts.shape[0], faces.tolist())

    for v, incident in enumerate(ring):
        assert incident == sorted(incident)
        expected = np.nonzero((faces == v).any(axis=1))[0].tolist()
        assert incident == expected


def test_face_rings_contain_self() -> None:
    verts, faces = make_cube_mesh(2)
    topo = MeshTopology.build(verts.shape[0], faces)

    for k in range(faces.shape[0]):
        assert k in topo.face_ring_cv[k]
        assert k in topo.face_ring_ce[k]


def test_common_vertex_ring_lists_each_neighbor_once() -> None:
    verts, faces = make_cube_mesh(3)
    topo = MeshTopology.build(verts.shape[0], faces)

    for k, ring in enumerate(topo.face_ring_cv):
        assert len(ring) == len(set(ring))
        assert set(ring) == _faces_sharing_vertex(faces, k)


def test_common_edge_ring_has_four_entries_on_closed_mesh() -> None:
    for subdivisions in (1, 3):
        verts, faces = make_cube_mesh(subdivisions)
        topo = MeshTopology.build(verts.shape[0], faces)

        for k, ring in enumerate(topo.face_ring_ce):
            assert len(ring) == 4
            assert len(set(ring)) == 4
            for g in ring:
                shared = len(set(faces[g].tolist()) & set(faces[k].tolist()))
                assert shared >= 2


def test_common_edge_ring_is_shorter_on_boundary() -> None:
    faces = [(0, 1, 2), (1, 3, 2)]
    vf = compute_vertex_face_ring(4, faces)
    ring = compute_face_ring_ce(faces, vf)
    assert sorted(ring[0]) == [0, 1]
    assert sorted(ring[1]) == [0, 1]

    single = [(0, 1, 2)]
    ring = compute_face_ring_ce(single, compute_vertex_face_ring(3, single))
    assert ring == [[0]]


def test_common_edge_ring_within_common_vertex_ring() -> None:
    verts, faces = make_crease_mesh(4, angle_deg=60.0)
    face_list = [tuple(f) for f in faces.tolist()]
    vf = compute_vertex_face_ring(verts.shape[0], face_list)
    cv = compute_face_ring_cv(face_list, vf)
    ce = compute_face_ring_ce(face_list, vf)

    for k in range(len(face_list)):
        assert set(ce[k]) <= set(cv[k])
        assert 1 <= len(ce[k]) <= 4


def test_face_ring_selection() -> None:
    verts, faces = make_cube_mesh(1)
    topo = MeshTopology.build(verts.shape[0], faces)
    assert topo.face_ring(NeighborhoodType.COMMON_VERTEX) is topo.face_ring_cv
    assert topo.face_ring(NeighborhoodType.COMMON_EDGE) is topo.face_ring_ce
    assert topo.face_ring("common_edge") is topo.face_ring_ce


def test_ring_pairs() -> None:
    ring = [[0, 2], [], [1, 1]]
    owners, members = ring_pairs(ring)
    assert owners.tolist() == [0, 0, 2, 2]
    assert members.tolist() == [0, 2, 1, 1]

    owners, members = ring_pairs([[], []])
    assert owners.size == 0 and members.size == 0
