import numpy as np
from scipy.spatial.distance import directed_hausdorff

from .normals import compute_face_normals


def face_normal_angles(normals_a, normals_b):
    """
    Per-face angle in degrees between two normal fields.

    Args:
        normals_a: (M, 3) unit normals
        normals_b: (M, 3) unit normals

    Returns:
        (M,) angles in degrees
    """
    cos = np.einsum("ij,ij->i", normals_a, normals_b)
    return np.degrees(np.arccos(np.clip(cos, -1.0, 1.0)))


def vertex_l2_error(reference_verts, verts, faces):
    """
    Area-weighted L2 vertex-based error between a mesh and its reference.

    Each vertex distance is weighted by a third of the area of its incident
    faces on the reference mesh, then normalized by the total weight.
    """
    _, areas = compute_face_normals(reference_verts, faces)

    vertex_areas = np.zeros(reference_verts.shape[0])
    for i in range(3):
        np.add.at(vertex_areas, faces[:, i], areas / 3)

    total = vertex_areas.sum()
    if total == 0:
        return 0.0

    dist_sq = np.sum((verts - reference_verts) ** 2, axis=1)
    return float(np.sqrt(np.sum(vertex_areas * dist_sq) / total))


def displacement_summary(verts_before, verts_after):
    """Mean and max vertex displacement between two vertex arrays."""
    if verts_before.shape[0] == 0:
        return {"mean_displacement": 0.0, "max_displacement": 0.0}
    d = np.linalg.norm(verts_after - verts_before, axis=1)
    return {
        "mean_displacement": float(np.mean(d)),
        "max_displacement": float(np.max(d)),
    }


def hausdorff_distance(verts1, verts2, sample_size=5000, seed=None):
    """
    Symmetric Hausdorff distance between the vertex sets of two meshes.

    Either set larger than ``sample_size`` is replaced by a random subset
    drawn with ``seed``, so the value is then an estimate. The distance is
    in the units of the input coordinates.
    """
    rng = np.random.default_rng(seed)
    a, b = (
        pts[rng.choice(pts.shape[0], sample_size, replace=False)] if pts.shape[0] > sample_size else pts
        for pts in (np.asarray(verts1, dtype=np.float64), np.asarray(verts2, dtype=np.float64))
    )
    return float(max(directed_hausdorff(a, b)[0], directed_hausdorff(b, a)[0]))
