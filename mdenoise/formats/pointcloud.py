"""XYZ point clouds, triangulated over their (x, y) projection."""

from __future__ import annotations

import logging

import numpy as np
from scipy.spatial import Delaunay, QhullError

from .base import LoadedMesh, MeshFormatError, format_rows

logger = logging.getLogger(__name__)


def triangulate_xy(points: np.ndarray) -> np.ndarray:
    """
    2-D Delaunay triangulation of the points' (x, y) coordinates.

    Triangles are oriented counter-clockwise in the xy-plane, so face normals
    point toward +z.

    Returns:
        (M, 3) face indices into ``points``
    """
    if points.shape[0] < 3:
        raise MeshFormatError("at least three points are needed for a triangulation")

    try:
        tri = Delaunay(points[:, :2])
    except QhullError as exc:
        raise MeshFormatError(f"points cannot be triangulated: {exc}") from exc

    faces = np.asarray(tri.simplices, dtype=np.int64)
    if len(tri.coplanar):
        logger.warning("%d duplicate points left out of the triangulation", len(tri.coplanar))

    xy = points[:, :2]
    a = xy[faces[:, 0]]
    b = xy[faces[:, 1]]
    c = xy[faces[:, 2]]
    signed = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    clockwise = signed < 0
    faces[clockwise] = faces[clockwise][:, [0, 2, 1]]
    return faces


def read_xyz(path: str) -> LoadedMesh:
    """Read ``x y z`` rows; lines that do not start with three numbers are skipped."""
    points = []
    with open(path, "r", encoding="utf-8", errors="replace") as fh:
        for line in fh:
            tokens = line.replace(",", " ").split()
            if len(tokens) < 3:
                continue
            try:
                points.append([float(t) for t in tokens[:3]])
            except ValueError:
                continue

    points = np.array(points, dtype=np.float64).reshape(-1, 3)
    logger.info("Triangulating %d points", points.shape[0])
    return LoadedMesh(points, triangulate_xy(points))


def write_xyz(path: str, verts: np.ndarray, faces: np.ndarray) -> None:
    with open(path, "w") as fh:
        format_rows(fh, verts, "%f %f %f")
