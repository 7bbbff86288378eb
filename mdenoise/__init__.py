"""
Feature-preserving mesh denoising.
"""

from .algorithms import DenoiseParams, DenoiseResult, NeighborhoodType, mesh_denoise

__version__ = "1.0.0"

__all__ = [
    'DenoiseParams',
    'DenoiseResult',
    'NeighborhoodType',
    'mesh_denoise',
]
