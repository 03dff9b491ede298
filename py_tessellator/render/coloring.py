"""
Triangle fill selection.

Colors are a deterministic function of position: three samples of a
Perlin noise field drive hue, saturation and lightness. In gradient mode
each triangle gets a two-stop linear gradient sampled at one vertex and
at the midpoint of the opposite side.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from ..core.alea_prng import AleaPRNG
from ..core.tessellation import Tessellation
from .noise import PerlinNoise

NOISE_FREQUENCY = 4.0  # noise periods across the canvas


class ColorMode(str, Enum):
    """How triangle fills are chosen."""

    NOISE = "noise"
    GRADIENT = "gradient"


def to_hsl(hue: float, saturation: float, light: float) -> str:
    """
    SVG color string like "hsl(10.0, 80.0%, 90.0%)".

    Hue is taken by absolute value and wrapped into [0, 360); saturation and
    lightness are clamped to 0-100.
    """
    hue = abs(hue) % 360
    saturation = min(100.0, max(0.0, saturation))
    light = min(100.0, max(0.0, light))
    return f"hsl({hue:.1f}, {saturation:.1f}%, {light:.1f}%)"


@dataclass
class GradientFill:
    """Two-stop linear gradient between two canvas points."""

    start: Tuple[float, float]
    end: Tuple[float, float]
    start_color: str
    end_color: str


class NoisePalette:
    """Maps canvas positions to HSL colors through a noise field."""

    def __init__(self, width: float, height: float, prng: Optional[AleaPRNG] = None):
        self.width = width
        self.height = height
        self.noise = PerlinNoise(prng)

    def hsl_components(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """(n, 3) array of hue, saturation and lightness for canvas points."""
        mx = np.asarray(x, dtype=float) / self.width * NOISE_FREQUENCY
        my = np.asarray(y, dtype=float) / self.height * NOISE_FREQUENCY
        hue = self.noise.sample(mx, my) * 180 + 180
        saturation = self.noise.sample(mx, my + self.height) * 20 + 80
        light = self.noise.sample(mx + self.width, my) * 30 + 70
        return np.column_stack([np.atleast_1d(hue), np.atleast_1d(saturation), np.atleast_1d(light)])

    def colors_at(self, points: np.ndarray) -> List[str]:
        points = np.asarray(points, dtype=float).reshape(-1, 2)
        return [to_hsl(*row) for row in self.hsl_components(points[:, 0], points[:, 1])]

    def triangle_colors(self, tessellation: Tessellation) -> List[str]:
        """Flat fill per triangle, sampled at its centroid."""
        coords = tessellation.triangle_coordinates()
        if len(coords) == 0:
            return []
        return self.colors_at(coords.mean(axis=1))

    def triangle_gradients(self, tessellation: Tessellation) -> List[GradientFill]:
        """Gradient per triangle, from its first vertex to the midpoint of the opposite side."""
        coords = tessellation.triangle_coordinates()
        if len(coords) == 0:
            return []
        starts = coords[:, 0, :]
        ends = (coords[:, 1, :] + coords[:, 2, :]) / 2
        start_colors = self.colors_at(starts)
        end_colors = self.colors_at(ends)
        return [
            GradientFill(tuple(s), tuple(e), sc, ec)
            for s, e, sc, ec in zip(starts.tolist(), ends.tolist(), start_colors, end_colors)
        ]
