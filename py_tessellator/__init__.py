"""
Circle-packing triangulation generator.

Packs a canvas with mutually tangent disks along an advancing front,
fills the leftover holes by ear clipping and renders the resulting
triangles as SVG.
"""

__version__ = "0.1.0"

from .core import (
    Tessellation,
    TessellationConfig,
    TessellationError,
    generate_tessellation,
)
from .render import ColorMode, build_document

__all__ = [
    "__version__",
    "Tessellation",
    "TessellationConfig",
    "TessellationError",
    "generate_tessellation",
    "ColorMode",
    "build_document",
]
