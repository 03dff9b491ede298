"""Coloring and SVG output for finished tessellations."""

from .coloring import ColorMode, GradientFill, NoisePalette, to_hsl
from .noise import PerlinNoise
from .scene import build_document
from .svg import CircleShape, LinearGradient, LineShape, PolygonShape, SvgDocument

__all__ = [
    "ColorMode",
    "GradientFill",
    "NoisePalette",
    "to_hsl",
    "PerlinNoise",
    "build_document",
    "CircleShape",
    "LinearGradient",
    "LineShape",
    "PolygonShape",
    "SvgDocument",
]
