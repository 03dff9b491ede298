"""
Core tessellation engine.
"""

from .alea_prng import AleaPRNG
from .disk_graph import Disk, DiskGraph, TessellationError, Triangle
from .frontier import ExposedEdge, FrontierEngine, StepOutcome, TessellationConfig
from .loop_closer import ClosureResult, LoopCloser, LoopClosureError
from .spatial_grid import SpatialGrid
from .tessellation import Tessellation, generate_tessellation
from .mesh_analysis import find_overlaps, share_count_violations, summarize, validate

__all__ = ['AleaPRNG', 'Disk', 'DiskGraph', 'TessellationError', 'Triangle',
           'ExposedEdge', 'FrontierEngine', 'StepOutcome', 'TessellationConfig',
           'ClosureResult', 'LoopCloser', 'LoopClosureError', 'SpatialGrid',
           'Tessellation', 'generate_tessellation',
           'find_overlaps', 'share_count_violations', 'summarize', 'validate']
