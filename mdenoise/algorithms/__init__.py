"""
Core geometric algorithms for feature-preserving mesh denoising.
"""

from .normals import (
    normalize_rows,
    compute_face_normals,
    compute_vertex_normals,
    compute_normals,
)
from .normalization import NormalizationFrame
from .topology import (
    NeighborhoodType,
    MeshTopology,
    compute_vertex_ring,
    compute_vertex_face_ring,
    compute_face_ring_cv,
    compute_face_ring_ce,
)
from .normal_filter import bilateral_normal_filtering
from .vertex_update import update_vertices
from .denoise import (
    DenoiseParams,
    DenoiseResult,
    SourceMesh,
    WorkingMesh,
    mesh_denoise,
)
from .metrics import (
    face_normal_angles,
    vertex_l2_error,
    displacement_summary,
    hausdorff_distance,
)

__all__ = [
    # Normals
    'normalize_rows',
    'compute_face_normals',
    'compute_vertex_normals',
    'compute_normals',
    # Normalization
    'NormalizationFrame',
    # Topology
    'NeighborhoodType',
    'MeshTopology',
    'compute_vertex_ring',
    'compute_vertex_face_ring',
    'compute_face_ring_cv',
    'compute_face_ring_ce',
    # Denoising
    'bilateral_normal_filtering',
    'update_vertices',
    'DenoiseParams',
    'DenoiseResult',
    'SourceMesh',
    'WorkingMesh',
    'mesh_denoise',
    # Metrics
    'face_normal_angles',
    'vertex_l2_error',
    'displacement_summary',
    'hausdorff_distance',
]
