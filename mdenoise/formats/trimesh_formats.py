"""OFF and OBJ through trimesh."""

from __future__ import annotations

import numpy as np
import trimesh

from .base import LoadedMesh, MeshFormatError


def _has_vertex_attributes(path: str) -> bool:
    """True if an OBJ file carries texture (vt) or normal (vn) records."""
    with open(path, "r", encoding="utf-8", errors="replace") as fh:
        for line in fh:
            tokens = line.split(None, 1)
            if tokens and tokens[0].lower() in ("vt", "vn"):
                return True
    return False


def _load(path: str, file_type: str, **kwargs) -> LoadedMesh:
    with open(path, "rb") as fh:
        try:
            # process=False keeps the file's vertex order and indices
            m = trimesh.load(fh, file_type=file_type, force="mesh", process=False, **kwargs)
        # trimesh reports a bad OFF header as NameError
        except (ValueError, IndexError, KeyError, TypeError, NameError) as exc:
            raise MeshFormatError(f"{path}: {exc}") from exc

    if not isinstance(m, trimesh.Trimesh):
        if not getattr(m, "geometry", None):
            return LoadedMesh(np.zeros((0, 3)), np.zeros((0, 3), dtype=np.int64))
        m = trimesh.util.concatenate(tuple(m.geometry.values()))
    return LoadedMesh(np.asarray(m.vertices, dtype=np.float64), np.asarray(m.faces, dtype=np.int64))


def read_off(path: str) -> LoadedMesh:
    return _load(path, "off")


def read_obj(path: str) -> LoadedMesh:
    """Wavefront OBJ with ``v``/``f`` records; quads are split in two triangles.

    Files with texture coordinates or vertex normals are rejected.
    """
    if _has_vertex_attributes(path):
        raise MeshFormatError(f"{path}: OBJ files with vt/vn records are not supported")
    return _load(path, "obj", maintain_order=True)


def _export(path: str, verts: np.ndarray, faces: np.ndarray, file_type: str, **kwargs) -> None:
    mesh = trimesh.Trimesh(vertices=verts, faces=faces, process=False)
    mesh.export(path, file_type=file_type, **kwargs)


def write_off(path: str, verts: np.ndarray, faces: np.ndarray) -> None:
    _export(path, verts, faces, "off")


def write_obj(path: str, verts: np.ndarray, faces: np.ndarray) -> None:
    _export(path, verts, faces, "obj", include_normals=False, include_texture=False)
