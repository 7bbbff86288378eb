"""
Vertex position update from a filtered normal field.

Each incident face pulls the vertex toward the plane through its centroid
with its (filtered) normal:

    p_i <- p_i + 1/|F_i| * Σ_{j in F_i} n_j <n_j, c_j - p_i>

Near edges and corners the pulls of differently oriented faces partly cancel,
so the vertex settles on the feature instead of being rounded off.
"""

import logging

import numpy as np

from .topology import ring_pairs

logger = logging.getLogger(__name__)


def face_centroids(verts, faces):
    return (verts[faces[:, 0]] + verts[faces[:, 1]] + verts[faces[:, 2]]) / 3.0


def update_vertices_once(verts, faces, face_normals, owners, members, counts, z_only=False):
    """
    One relaxation sweep; reads ``verts`` and returns new positions.

    Args:
        verts: (N, 3) current positions
        faces: (M, 3) face indices
        face_normals: (M, 3) target face normals
        owners, members: flattened vertex -> face ring
        counts: (N,) number of incident faces per vertex
        z_only: only the z coordinate is displaced

    Returns:
        (N, 3) updated positions
    """
    centroids = face_centroids(verts, faces)
    n = face_normals[members]
    d = np.einsum("ij,ij->i", n, centroids[members] - verts[owners])

    accum = np.zeros_like(verts)
    np.add.at(accum, owners, n * d[:, None])

    has_faces = counts > 0
    new_verts = verts.copy()
    if z_only:
        new_verts[has_faces, 2] += accum[has_faces, 2] / counts[has_faces]
    else:
        new_verts[has_faces] += accum[has_faces] / counts[has_faces, None]
    return new_verts


def update_vertices(verts, faces, face_normals, vertex_face_ring, iterations=50, z_only=False):
    """
    Move vertices to agree with the given face normals.

    Vertices with no incident face are left where they are. With ``z_only``
    the x and y coordinates are returned untouched.

    Returns:
        (N, 3) updated positions (the input array is not modified)
    """
    verts = np.asarray(verts, dtype=np.float64).copy()
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    face_normals = np.asarray(face_normals, dtype=np.float64)

    owners, members = ring_pairs(vertex_face_ring)
    counts = np.bincount(owners, minlength=verts.shape[0]).astype(np.float64)

    for it in range(iterations):
        updated = update_vertices_once(verts, faces, face_normals, owners, members, counts, z_only)
        if logger.isEnabledFor(logging.DEBUG):
            moved = np.linalg.norm(updated - verts, axis=1)
            logger.debug("vertex iteration %d: max move %.3e", it + 1, float(moved.max(initial=0.0)))
        verts = updated

    return verts
