"""PLY and STL through PyVista."""

from __future__ import annotations

import numpy as np
import pyvista as pv

from .base import LoadedMesh, MeshFormatError


def _pad_faces(faces: np.ndarray) -> np.ndarray:
    return np.hstack([np.full((faces.shape[0], 1), 3, dtype=np.int64), faces]).astype(np.int64)


def to_polydata(verts: np.ndarray, faces: np.ndarray) -> pv.PolyData:
    if faces.shape[0] == 0:
        return pv.PolyData(verts)
    return pv.PolyData(verts, _pad_faces(faces))


def _read_surface(path: str, merge_points: bool) -> LoadedMesh:
    try:
        mesh = pv.read(path)
    except (ValueError, OSError) as exc:
        raise MeshFormatError(f"{path}: {exc}") from exc

    if not isinstance(mesh, pv.PolyData):
        mesh = mesh.extract_surface()
    if merge_points:
        # STL stores three private corners per facet
        mesh = mesh.clean(point_merging=True)
    mesh = mesh.triangulate()

    verts = np.asarray(mesh.points, dtype=np.float64)
    if mesh.n_cells == 0 or mesh.n_faces_strict == 0:
        return LoadedMesh(verts, np.zeros((0, 3), dtype=np.int64))
    return LoadedMesh(verts, np.asarray(mesh.regular_faces, dtype=np.int64))


def read_ply(path: str) -> LoadedMesh:
    return _read_surface(path, merge_points=False)


def read_stl(path: str) -> LoadedMesh:
    return _read_surface(path, merge_points=True)


def write_ply(path: str, verts: np.ndarray, faces: np.ndarray) -> None:
    to_polydata(verts, faces).save(path, binary=False)
