"""Shared types of the mesh readers and writers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import numpy as np


class MeshIOError(ValueError):
    """Base class for mesh file errors."""


class UnsupportedFormatError(MeshIOError):
    """The file extension has no reader (or writer)."""


class MeshFormatError(MeshIOError):
    """The file content does not match its format."""


@dataclass
class LoadedMesh:
    vertices: np.ndarray
    faces: np.ndarray
    # EsriGrid for .asc inputs, needed to write the grid back
    grid: Optional[object] = None

    def __post_init__(self) -> None:
        self.vertices = np.asarray(self.vertices, dtype=np.float64).reshape(-1, 3)
        self.faces = np.asarray(self.faces, dtype=np.int64).reshape(-1, 3)
        if self.faces.size and (self.faces.min() < 0 or self.faces.max() >= self.vertices.shape[0]):
            raise MeshFormatError("face indices out of range")


def split_extension(path: str) -> tuple[str, str]:
    """Split ``path`` into (stem, lowercase extension).

    Suffixes longer than four characters after the dot are not treated as an
    extension, so ``scan.v2_final`` has none.
    """
    stem, ext = os.path.splitext(path)
    if not ext or len(ext) > 5:
        return path, ""
    return stem, ext.lower()


def content_lines(path: str, comment: str = "#") -> list[str]:
    """Non-empty lines of a text file with comments stripped."""
    lines = []
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for raw in f:
            line = raw.split(comment, 1)[0].strip()
            if line:
                lines.append(line)
    return lines


def format_rows(fh, rows: np.ndarray, fmt: str, prefix: str = "") -> None:
    for row in rows:
        fh.write(prefix + fmt % tuple(row) + "\n")
