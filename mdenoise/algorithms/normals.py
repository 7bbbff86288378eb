"""
Face and vertex normals.

Face normals come from the cross product of two triangle edges; vertex normals
are the area-weighted sum of the normals of the incident faces. Zero-length
vectors (degenerate triangles, isolated vertices) stay zero instead of
turning into NaN.
"""

import numpy as np


def normalize_rows(vectors):
    """
    Normalize each row of an (N, 3) array to unit length.

    Rows with zero length are returned as zero vectors.
    """
    vectors = np.asarray(vectors, dtype=np.float64)
    lengths = np.linalg.norm(vectors, axis=1)
    nonzero = lengths > 0.0

    out = np.zeros_like(vectors)
    out[nonzero] = vectors[nonzero] / lengths[nonzero, None]
    return out


def compute_face_normals(verts, faces):
    """
    Compute per-face unit normals and triangle areas.

    Args:
        verts: (N, 3) vertex positions
        faces: (M, 3) face indices

    Returns:
        face_normals: (M, 3) unit normals (zero for degenerate faces)
        face_areas: (M,) triangle areas
    """
    v0 = verts[faces[:, 0]]
    v1 = verts[faces[:, 1]]
    v2 = verts[faces[:, 2]]

    e1 = v1 - v0
    e2 = v2 - v0
    cross = np.cross(e1, e2)

    face_areas = np.linalg.norm(cross, axis=1) / 2.0
    face_normals = normalize_rows(cross)
    return face_normals, face_areas


def compute_vertex_normals(num_verts, faces, face_normals, face_areas):
    """
    Area-weighted average of incident face normals, normalized per vertex.
    """
    normals = np.zeros((num_verts, 3))
    weighted = face_normals * face_areas[:, None]

    # Accumulate to vertices
    for i in range(3):
        np.add.at(normals, faces[:, i], weighted)

    return normalize_rows(normals)


def compute_normals(verts, faces):
    """
    Compute face and vertex normals of a triangle mesh.

    Args:
        verts: (N, 3) vertex positions
        faces: (M, 3) face indices

    Returns:
        face_normals: (M, 3)
        vertex_normals: (N, 3)
    """
    verts = np.asarray(verts, dtype=np.float64)
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)

    face_normals, face_areas = compute_face_normals(verts, faces)
    vertex_normals = compute_vertex_normals(verts.shape[0], faces, face_normals, face_areas)
    return face_normals, vertex_normals
