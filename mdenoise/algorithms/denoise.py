"""
Feature-preserving mesh denoising pipeline.

    normalize -> source normals -> topology -> normal filtering
              -> vertex update -> produced normals -> denormalize

The loaded mesh (``SourceMesh``) is kept unchanged for reference; only the
produced copy (``WorkingMesh``) has its positions updated.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Optional

import numpy as np

from .normal_filter import bilateral_normal_filtering
from .normalization import NormalizationFrame
from .normals import compute_normals
from .topology import MeshTopology, NeighborhoodType
from .vertex_update import update_vertices

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.4
DEFAULT_NORMAL_ITERATIONS = 20
DEFAULT_VERTEX_ITERATIONS = 50


@dataclass
class DenoiseParams:
    neighborhood: NeighborhoodType = NeighborhoodType.COMMON_VERTEX
    threshold: float = DEFAULT_THRESHOLD
    normal_iterations: int = DEFAULT_NORMAL_ITERATIONS
    vertex_iterations: int = DEFAULT_VERTEX_ITERATIONS
    z_only: bool = False

    def __post_init__(self) -> None:
        self.neighborhood = NeighborhoodType(self.neighborhood)

    def validate(self) -> "DenoiseParams":
        """Raise ``ValueError`` if any option is out of range."""
        if not 0.0 < self.threshold < 1.0:
            raise ValueError(f"threshold must be within (0, 1), got {self.threshold}")
        if self.normal_iterations < 1:
            raise ValueError(f"normal_iterations must be >= 1, got {self.normal_iterations}")
        if self.vertex_iterations < 1:
            raise ValueError(f"vertex_iterations must be >= 1, got {self.vertex_iterations}")
        return self

    def with_defaults_for_invalid(self) -> "DenoiseParams":
        """Copy of the params where out-of-range values are reset to defaults.

        Each reset is reported with a warning.
        """
        params = self
        if not 0.0 < params.threshold < 1.0:
            logger.warning(
                "The threshold must be within (0,1); using the default value %s", DEFAULT_THRESHOLD
            )
            params = replace(params, threshold=DEFAULT_THRESHOLD)
        if params.normal_iterations < 1:
            logger.warning(
                "The number of normal iterations must be at least 1; using the default value %d",
                DEFAULT_NORMAL_ITERATIONS,
            )
            params = replace(params, normal_iterations=DEFAULT_NORMAL_ITERATIONS)
        if params.vertex_iterations < 1:
            logger.warning(
                "The number of vertex iterations must be at least 1; using the default value %d",
                DEFAULT_VERTEX_ITERATIONS,
            )
            params = replace(params, vertex_iterations=DEFAULT_VERTEX_ITERATIONS)
        return params


@dataclass(frozen=True)
class SourceMesh:
    """The loaded mesh in normalized coordinates, with its normals."""

    vertices: np.ndarray
    faces: np.ndarray
    face_normals: np.ndarray
    vertex_normals: np.ndarray

    @classmethod
    def from_arrays(cls, vertices: np.ndarray, faces: np.ndarray) -> "SourceMesh":
        face_normals, vertex_normals = compute_normals(vertices, faces)
        for arr in (vertices, faces, face_normals, vertex_normals):
            arr.setflags(write=False)
        return cls(vertices, faces, face_normals, vertex_normals)


@dataclass
class WorkingMesh:
    """The produced mesh; starts as a copy of the source positions."""

    vertices: np.ndarray
    faces: np.ndarray
    face_normals: np.ndarray
    vertex_normals: np.ndarray

    @classmethod
    def from_source(cls, source: SourceMesh) -> "WorkingMesh":
        return cls(
            vertices=source.vertices.copy(),
            faces=source.faces,
            face_normals=source.face_normals.copy(),
            vertex_normals=source.vertex_normals.copy(),
        )

    def refresh_normals(self) -> None:
        self.face_normals, self.vertex_normals = compute_normals(self.vertices, self.faces)


@dataclass
class DenoiseResult:
    """Denoised mesh in the caller's (raw) coordinates."""

    vertices: np.ndarray
    faces: np.ndarray
    face_normals: np.ndarray
    vertex_normals: np.ndarray
    frame: NormalizationFrame = field(default_factory=NormalizationFrame.identity)
    topology: Optional[MeshTopology] = None
    timings: dict = field(default_factory=dict)


def _check_mesh(verts: np.ndarray, faces: np.ndarray) -> None:
    if verts.ndim != 2 or verts.shape[1] != 3:
        raise ValueError("verts must be shaped (N, 3)")
    if faces.ndim != 2 or faces.shape[1] != 3:
        raise ValueError("faces must be shaped (M, 3)")
    if faces.size and (faces.min() < 0 or faces.max() >= verts.shape[0]):
        raise ValueError("faces reference vertex indices outside [0, N)")


def mesh_denoise(verts, faces, params: Optional[DenoiseParams] = None, **overrides) -> DenoiseResult:
    """
    Denoise a triangle mesh while keeping its sharp features.

    Args:
        verts: (N, 3) vertex positions
        faces: (M, 3) triangle indices
        params: denoising options (defaults if None)
        **overrides: individual ``DenoiseParams`` fields to replace

    Returns:
        DenoiseResult with the displaced vertices and refreshed normals.
        Topology is unchanged.
    """
    params = replace(params or DenoiseParams(), **overrides).validate()

    verts = np.asarray(verts, dtype=np.float64)
    faces = np.asarray(faces, dtype=np.int64)
    if faces.size == 0:
        faces = faces.reshape(0, 3)
    _check_mesh(verts, faces)

    if faces.shape[0] == 0:
        logger.info("Mesh has no faces; nothing to denoise")
        face_normals, vertex_normals = compute_normals(verts, faces)
        return DenoiseResult(verts.copy(), faces.copy(), face_normals, vertex_normals)

    timings = {}

    start = time.time()
    frame = NormalizationFrame.from_vertices(verts)
    source = SourceMesh.from_arrays(frame.forward(verts), faces.copy())
    timings["normalize"] = time.time() - start

    start = time.time()
    topology = MeshTopology.build(verts.shape[0], source.faces)
    face_ring = topology.face_ring(params.neighborhood)
    timings["topology"] = time.time() - start

    working = WorkingMesh.from_source(source)

    start = time.time()
    working.face_normals = bilateral_normal_filtering(
        source.face_normals,
        face_ring,
        sigma=params.threshold,
        iterations=params.normal_iterations,
    )
    timings["normal_filter"] = time.time() - start

    start = time.time()
    working.vertices = update_vertices(
        working.vertices,
        working.faces,
        working.face_normals,
        topology.vertex_face_ring,
        iterations=params.vertex_iterations,
        z_only=params.z_only,
    )
    working.refresh_normals()
    timings["vertex_update"] = time.time() - start

    for stage, seconds in timings.items():
        logger.info("%-14s %10.3f seconds", stage, seconds)

    vertices = frame.inverse(working.vertices)
    if params.z_only:
        # x and y are copied from the input exactly
        vertices[:, :2] = verts[:, :2]

    return DenoiseResult(
        vertices=vertices,
        faces=faces,
        face_normals=working.face_normals,
        vertex_normals=working.vertex_normals,
        frame=frame,
        topology=topology,
        timings=timings,
    )
