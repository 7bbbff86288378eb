"""Plain-text polygon formats without a library reader: PLY2, SMF and GTS."""

from __future__ import annotations

import numpy as np

from .base import LoadedMesh, MeshFormatError, content_lines, format_rows


def _floats(tokens, path):
    try:
        return [float(t) for t in tokens]
    except ValueError as exc:
        raise MeshFormatError(f"{path}: invalid number in {' '.join(tokens)!r}") from exc


def _ints(tokens, path):
    try:
        return [int(t) for t in tokens]
    except ValueError as exc:
        raise MeshFormatError(f"{path}: invalid index in {' '.join(tokens)!r}") from exc


def _triangle_rows(tokens, path):
    """Faces given as ``3 a b c`` token groups."""
    faces = []
    for i in range(0, len(tokens), 4):
        group = _ints(tokens[i:i + 4], path)
        if len(group) != 4 or group[0] != 3:
            raise MeshFormatError(f"{path}: only triangular faces are supported")
        faces.append(group[1:])
    return faces


def read_ply2(path: str) -> LoadedMesh:
    tokens = " ".join(content_lines(path)).split()
    if len(tokens) < 2:
        raise MeshFormatError(f"{path}: not a valid PLY2 file")
    num_verts, num_faces = _ints(tokens[:2], path)

    end_verts = 2 + 3 * num_verts
    end_faces = end_verts + 4 * num_faces
    if len(tokens) < end_faces:
        raise MeshFormatError(f"{path}: truncated PLY2 file")

    verts = np.array(_floats(tokens[2:end_verts], path)).reshape(-1, 3)
    faces = _triangle_rows(tokens[end_verts:end_faces], path)
    return LoadedMesh(verts, np.array(faces, dtype=np.int64))


def _vertex_index(token: str, num_verts: int, path: str) -> int:
    # "7", "-1"
    idx = _ints([token], path)[0]
    if idx < 0:
        return num_verts + idx
    return idx - 1


def read_smf(path: str) -> LoadedMesh:
    """SMF: ``v x y z`` and ``t``/``f a b c`` lines with 1-based indices."""
    verts = []
    faces = []
    for line in content_lines(path):
        tokens = line.split()
        key = tokens[0].lower()
        if key == "v":
            verts.append(_floats(tokens[1:4], path))
        elif key in ("f", "t"):
            idx = [_vertex_index(t, len(verts), path) for t in tokens[1:]]
            if len(idx) != 3:
                raise MeshFormatError(f"{path}: unsupported face with {len(idx)} vertices")
            faces.append(idx)

    if any(len(v) != 3 for v in verts):
        raise MeshFormatError(f"{path}: vertex with fewer than three coordinates")
    return LoadedMesh(np.array(verts, dtype=np.float64), np.array(faces, dtype=np.int64))


def read_gts(path: str) -> LoadedMesh:
    """GNU Triangulated Surface: vertices, edges, then faces as edge triples."""
    lines = content_lines(path)
    if not lines:
        raise MeshFormatError(f"{path}: empty GTS file")

    counts = _ints(lines[0].split()[:3], path)
    if len(counts) != 3:
        raise MeshFormatError(f"{path}: missing GTS counts")
    num_verts, num_edges, num_faces = counts
    body = lines[1:]
    if len(body) < num_verts + num_edges + num_faces:
        raise MeshFormatError(f"{path}: truncated GTS file")

    verts = [_floats(line.split()[:3], path) for line in body[:num_verts]]
    edges = [_ints(line.split()[:2], path) for line in body[num_verts:num_verts + num_edges]]

    faces = []
    for line in body[num_verts + num_edges:num_verts + num_edges + num_faces]:
        refs = _ints(line.split()[:2], path)
        if len(refs) != 2 or not all(1 <= i <= len(edges) for i in refs):
            raise MeshFormatError(f"{path}: face {line!r} references a missing edge")
        e1, e2 = (edges[i - 1] for i in refs)
        if len(e1) != 2 or len(e2) != 2:
            raise MeshFormatError(f"{path}: edge with fewer than two vertices")
        third = e2[1] if e2[0] in e1 else e2[0]
        faces.append([e1[0] - 1, e1[1] - 1, third - 1])

    return LoadedMesh(np.array(verts, dtype=np.float64), np.array(faces, dtype=np.int64))


def write_ply2(path: str, verts: np.ndarray, faces: np.ndarray) -> None:
    with open(path, "w") as fh:
        fh.write(f"{verts.shape[0]}\n{faces.shape[0]}\n")
        format_rows(fh, verts, "%f %f %f")
        format_rows(fh, faces, "%d %d %d", prefix="3 ")
