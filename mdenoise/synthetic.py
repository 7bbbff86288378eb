"""Procedural meshes with known geometry, for tests and demos."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .algorithms.normals import compute_normals

# (origin, u, v) per cube side with u x v pointing outward
_CUBE_SIDES = (
    ((0, 0, 0), (0, 1, 0), (1, 0, 0)),  # -z
    ((0, 0, 1), (1, 0, 0), (0, 1, 0)),  # +z
    ((0, 0, 0), (1, 0, 0), (0, 0, 1)),  # -y
    ((0, 1, 0), (0, 0, 1), (1, 0, 0)),  # +y
    ((0, 0, 0), (0, 0, 1), (0, 1, 0)),  # -x
    ((1, 0, 0), (0, 1, 0), (0, 0, 1)),  # +x
)

CUBE_DIRECTIONS = np.array(
    [[0, 0, -1], [0, 0, 1], [0, -1, 0], [0, 1, 0], [-1, 0, 0], [1, 0, 0]], dtype=np.float64
)


def _grid_faces(rows: int, cols: int, offset: int = 0) -> np.ndarray:
    """Two counter-clockwise triangles per cell of a rows x cols vertex grid."""
    i, j = np.meshgrid(np.arange(rows - 1), np.arange(cols - 1), indexing="ij")
    p00 = (i * cols + j).ravel() + offset
    p10 = p00 + cols
    p11 = p10 + 1
    p01 = p00 + 1
    first = np.column_stack([p00, p10, p11])
    second = np.column_stack([p00, p11, p01])
    return np.stack([first, second], axis=1).reshape(-1, 3)


def make_cube_mesh(subdivisions: int = 1, size: float = 1.0) -> tuple[np.ndarray, np.ndarray]:
    """Closed cube surface, each side split into ``subdivisions`` x ``subdivisions`` quads.

    ``subdivisions=1`` gives the usual 8 vertices and 12 triangles. Sides
    share their border vertices, and all faces are oriented outward.
    """
    if subdivisions < 1:
        raise ValueError("subdivisions must be >= 1")

    n = subdivisions
    steps = np.linspace(0.0, 1.0, n + 1)
    s, t = np.meshgrid(steps, steps, indexing="ij")

    points = []
    faces = []
    for origin, u, v in _CUBE_SIDES:
        origin, u, v = (np.asarray(a, dtype=np.float64) for a in (origin, u, v))
        side = origin + s.reshape(-1, 1) * u + t.reshape(-1, 1) * v
        faces.append(_grid_faces(n + 1, n + 1, offset=len(points) * (n + 1) ** 2))
        points.append(side)

    points = np.vstack(points)
    faces = np.vstack(faces)

    keys = np.rint(points * n).astype(np.int64)
    _, first, inverse = np.unique(keys, axis=0, return_index=True, return_inverse=True)
    inverse = inverse.reshape(-1)

    verts = points[first] * size
    return verts, inverse[faces]


def cube_edge_mask(verts: np.ndarray, size: float = 1.0, tol: float = 1e-9) -> np.ndarray:
    """True for vertices lying on a cube edge (two or more coordinates on the box)."""
    on_box = (np.abs(verts) < tol) | (np.abs(verts - size) < tol)
    return on_box.sum(axis=1) >= 2


def cube_corner_mask(verts: np.ndarray, size: float = 1.0, tol: float = 1e-9) -> np.ndarray:
    on_box = (np.abs(verts) < tol) | (np.abs(verts - size) < tol)
    return on_box.sum(axis=1) == 3


def nearest_cube_direction(normals: np.ndarray) -> np.ndarray:
    """Axis direction closest to each normal, shape (M, 3)."""
    return CUBE_DIRECTIONS[np.argmax(normals @ CUBE_DIRECTIONS.T, axis=1)]


def make_crease_mesh(
    resolution: int = 8, angle_deg: float = 90.0
) -> tuple[np.ndarray, np.ndarray]:
    """Two square patches sharing the edge x = 0, folded by ``angle_deg``.

    The first patch lies in the plane z = 0 with normal +z. The second is
    rotated about the y-axis so the angle between the two patch normals is
    ``angle_deg``; ``angle_deg=0`` gives a single flat sheet.

    Returns vertices and faces; vertices with x < 0 belong to the flat patch.
    """
    n = resolution
    s = np.linspace(-1.0, 1.0, 2 * n + 1)
    t = np.linspace(0.0, 1.0, n + 1)
    S, T = np.meshgrid(s, t, indexing="ij")
    S = S.ravel()
    T = T.ravel()

    phi = np.radians(angle_deg)
    folded = S > 0
    x = np.where(folded, S * np.cos(phi), S)
    z = np.where(folded, S * np.sin(phi), 0.0)
    verts = np.column_stack([x, T, z])

    return verts, _grid_faces(2 * n + 1, n + 1)


def add_normal_noise(
    verts: np.ndarray,
    faces: np.ndarray,
    magnitude: float,
    seed: Optional[int] = None,
    mask: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Displace vertices along their normals by uniform noise in [-magnitude, magnitude].

    Only vertices selected by ``mask`` move when it is given.
    """
    rng = np.random.default_rng(seed)
    _, vertex_normals = compute_normals(verts, faces)

    offsets = rng.uniform(-magnitude, magnitude, size=verts.shape[0])
    if mask is not None:
        offsets = np.where(mask, offsets, 0.0)
    return verts + vertex_normals * offsets[:, None]
