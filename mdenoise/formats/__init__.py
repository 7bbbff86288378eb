"""
Mesh file readers and writers.

Readers return a ``LoadedMesh`` (vertex positions and triangle indices); the
format is picked from the case-insensitive file extension.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .base import (
    LoadedMesh,
    MeshIOError,
    MeshFormatError,
    UnsupportedFormatError,
    split_extension,
)
from .esri import EsriGrid, read_esri, write_esri
from .pointcloud import read_xyz, triangulate_xy, write_xyz
from .text_formats import read_gts, read_ply2, read_smf, write_ply2
from .trimesh_formats import read_obj, read_off, write_obj, write_off
from .vtk_formats import read_ply, read_stl, write_ply

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".off"

READERS = {
    ".gts": read_gts,
    ".obj": read_obj,
    ".off": read_off,
    ".ply": read_ply,
    ".ply2": read_ply2,
    ".smf": read_smf,
    ".stl": read_stl,
    ".xyz": read_xyz,
    ".asc": read_esri,
}

WRITERS = {
    ".obj": write_obj,
    ".off": write_off,
    ".ply": write_ply,
    ".ply2": write_ply2,
    ".xyz": write_xyz,
}

# grids are written from their EsriGrid header
GRID_EXTENSIONS = (".asc",)


def input_path_and_format(path: str) -> tuple[str, str]:
    """Resolve the path to read and its format extension.

    A path without an extension is read as ``<path>.off``.
    """
    _, ext = split_extension(path)
    if not ext:
        return path + DEFAULT_EXTENSION, DEFAULT_EXTENSION
    if ext not in READERS:
        raise UnsupportedFormatError(f"input format {ext!r} is not supported")
    return path, ext


def can_write(ext: str) -> bool:
    return ext in WRITERS or ext in GRID_EXTENSIONS


def read_mesh(path: str) -> LoadedMesh:
    path, ext = input_path_and_format(path)
    mesh = READERS[ext](path)
    logger.debug("Read %s: %d vertices, %d faces", path, mesh.vertices.shape[0], mesh.faces.shape[0])
    return mesh


def write_mesh(path: str, verts, faces, grid: Optional[EsriGrid] = None) -> None:
    _, ext = split_extension(path)
    verts = np.asarray(verts, dtype=np.float64).reshape(-1, 3)
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)

    if ext in GRID_EXTENSIONS:
        if grid is None:
            raise MeshFormatError(f"{path}: writing an ESRI grid needs a grid loaded from .asc")
        write_esri(path, verts, grid)
    elif ext in WRITERS:
        WRITERS[ext](path, verts, faces)
    else:
        raise UnsupportedFormatError(f"output format {ext!r} is not supported")
    logger.debug("Wrote %s", path)


__all__ = [
    'LoadedMesh',
    'EsriGrid',
    'MeshIOError',
    'MeshFormatError',
    'UnsupportedFormatError',
    'DEFAULT_EXTENSION',
    'READERS',
    'WRITERS',
    'split_extension',
    'input_path_and_format',
    'can_write',
    'read_mesh',
    'write_mesh',
    'triangulate_xy',
]
