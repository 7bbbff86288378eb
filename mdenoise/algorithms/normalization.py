"""Bounding-box normalization of vertex coordinates."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizationFrame:
    """Center and uniform scale mapping raw coordinates into roughly [-1, 1]^3.

    ``raw = center + normalized * scale`` holds for every vertex.
    """

    center: np.ndarray
    scale: float

    @classmethod
    def identity(cls) -> "NormalizationFrame":
        return cls(center=np.zeros(3), scale=1.0)

    @classmethod
    def from_vertices(cls, verts: np.ndarray) -> "NormalizationFrame":
        """Build the frame from the axis-aligned bounding box of ``verts``.

        The center is the box midpoint and the scale is half of the longest
        box side. When the box has no extent (all points coincide) the scale
        stays at 1.0, so the frame only translates.
        """
        verts = np.asarray(verts, dtype=np.float64)
        if verts.ndim != 2 or verts.shape[1] != 3:
            raise ValueError("verts must be shaped (N, 3)")
        if verts.shape[0] == 0:
            return cls.identity()

        lo = verts.min(axis=0)
        hi = verts.max(axis=0)
        center = (lo + hi) / 2.0
        scale = float(np.max(hi - lo)) / 2.0

        if not scale > 0.0:
            logger.warning("Bounding box has zero extent; skipping scaling")
            scale = 1.0

        return cls(center=center, scale=scale)

    def forward(self, verts: np.ndarray) -> np.ndarray:
        """Map raw coordinates into the normalized frame."""
        return (np.asarray(verts, dtype=np.float64) - self.center) / self.scale

    def inverse(self, verts: np.ndarray) -> np.ndarray:
        """Map normalized coordinates back to raw coordinates."""
        return self.center + np.asarray(verts, dtype=np.float64) * self.scale
