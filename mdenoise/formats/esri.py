"""ESRI ASCII elevation grids (.asc)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .base import LoadedMesh, MeshFormatError

# float32 epsilon, the tolerance for matching the NODATA value
NODATA_TOLERANCE = 1.192092896e-07

_HEADER_KEYS = ("ncols", "nrows", "xllcorner", "yllcorner", "cellsize")


@dataclass
class EsriGrid:
    """Grid header plus the map from grid cells to mesh vertices."""

    ncols: int
    nrows: int
    xllcorner: float
    yllcorner: float
    cellsize: float
    nodata_value: Optional[float]
    # (nrows, ncols) vertex index per cell, -1 for NODATA cells
    index: np.ndarray


def _grid_faces(index: np.ndarray, values: np.ndarray) -> np.ndarray:
    """
    Two triangles per complete cell, one per cell missing a single corner.

    Corners are numbered 0 (i, j), 1 (i, j+1), 2 (i+1, j), 3 (i+1, j+1). A
    complete cell is split along the diagonal 1-2 when the elevation steps
    from corner 0 are larger than the opposite ones, otherwise along 0-3.
    Faces are emitted in row-major cell order.
    """
    c = np.stack(
        [index[:-1, :-1], index[:-1, 1:], index[1:, :-1], index[1:, 1:]], axis=-1
    ).reshape(-1, 4)
    z = np.stack(
        [values[:-1, :-1], values[:-1, 1:], values[1:, :-1], values[1:, 1:]], axis=-1
    ).reshape(-1, 4)

    missing = c < 0
    num_missing = missing.sum(axis=1)

    tris = np.full((c.shape[0], 2, 3), -1, dtype=np.int64)

    full = num_missing == 0
    split_12 = (np.abs(z[:, 2] - z[:, 0]) > np.abs(z[:, 3] - z[:, 1])) & (
        np.abs(z[:, 1] - z[:, 0]) > np.abs(z[:, 3] - z[:, 2])
    )
    on_12 = full & split_12
    on_03 = full & ~split_12
    tris[on_12, 0] = c[on_12][:, [0, 1, 2]]
    tris[on_12, 1] = c[on_12][:, [1, 3, 2]]
    tris[on_03, 0] = c[on_03][:, [1, 3, 0]]
    tris[on_03, 1] = c[on_03][:, [0, 3, 2]]

    single = num_missing == 1
    # triangle made of the remaining corners, per missing corner
    remaining = np.array([[1, 3, 2], [0, 3, 2], [1, 3, 0], [0, 1, 2]])
    which = np.argmax(missing, axis=1)
    rows = np.nonzero(single)[0]
    tris[rows, 0] = np.take_along_axis(c[rows], remaining[which[rows]], axis=1)

    tris = tris.reshape(-1, 3)
    return tris[tris[:, 0] >= 0]


def read_esri(path: str) -> LoadedMesh:
    with open(path, "r", encoding="utf-8", errors="replace") as fh:
        tokens = fh.read().split()

    if len(tokens) < 2 * len(_HEADER_KEYS):
        raise MeshFormatError(f"{path}: truncated ESRI grid header")

    header = {}
    for n, key in enumerate(_HEADER_KEYS):
        name, value = tokens[2 * n], tokens[2 * n + 1]
        if not name.lower().startswith(key[:4]):
            raise MeshFormatError(f"{path}: expected {key!r}, found {name!r}")
        header[key] = value

    pos = 2 * len(_HEADER_KEYS)
    nodata_token = None
    if pos < len(tokens) and tokens[pos][:1] in ("n", "N"):
        if pos + 1 >= len(tokens):
            raise MeshFormatError(f"{path}: missing NODATA value")
        nodata_token = tokens[pos + 1]
        pos += 2

    try:
        ncols = int(header["ncols"])
        nrows = int(header["nrows"])
        xllcorner = float(header["xllcorner"])
        yllcorner = float(header["yllcorner"])
        cellsize = float(header["cellsize"])
        nodata_value = None if nodata_token is None else float(nodata_token)
        values = np.array(tokens[pos:pos + ncols * nrows], dtype=np.float64)
    except ValueError as exc:
        raise MeshFormatError(f"{path}: invalid ESRI grid: {exc}") from exc

    if ncols < 1 or nrows < 1:
        raise MeshFormatError(f"{path}: grid size must be positive, got {ncols} x {nrows}")
    if values.size != ncols * nrows:
        raise MeshFormatError(f"{path}: expected {ncols * nrows} values, found {values.size}")
    values = values.reshape(nrows, ncols)

    if nodata_value is None:
        valid = np.ones_like(values, dtype=bool)
    else:
        valid = np.abs(values - nodata_value) >= NODATA_TOLERANCE

    index = np.full(values.shape, -1, dtype=np.int64)
    index[valid] = np.arange(int(valid.sum()))

    rows, cols = np.nonzero(valid)
    verts = np.column_stack([rows * cellsize, cols * cellsize, values[rows, cols]])

    grid = EsriGrid(
        ncols=ncols,
        nrows=nrows,
        xllcorner=xllcorner,
        yllcorner=yllcorner,
        cellsize=cellsize,
        nodata_value=nodata_value,
        index=index,
    )
    return LoadedMesh(verts, _grid_faces(index, values), grid=grid)


def write_esri(path: str, verts: np.ndarray, grid: EsriGrid) -> None:
    """Write the grid back with the z coordinate of each vertex as elevation."""
    values = np.full(grid.index.shape, grid.nodata_value if grid.nodata_value is not None else 0.0)
    has_vertex = grid.index >= 0
    values[has_vertex] = verts[grid.index[has_vertex], 2]

    with open(path, "w") as fh:
        fh.write(f"ncols          {grid.ncols}\n")
        fh.write(f"nrows          {grid.nrows}\n")
        fh.write(f"xllcorner      {grid.xllcorner:f}\n")
        fh.write(f"yllcorner      {grid.yllcorner:f}\n")
        fh.write(f"cellsize       {grid.cellsize:f}\n")
        if grid.nodata_value is not None:
            fh.write(f"NODATA_value   {grid.nodata_value:f}\n")
        np.savetxt(fh, values, fmt="%f")
