"""
Seeded 2-D Perlin gradient noise.

Gradients are derived from integer lattice coordinates with a 32-bit
rotate-and-multiply hash keyed by three random words, so no permutation
table is stored and the field is defined over the whole plane. Sampling
is vectorized with NumPy.
"""

from typing import Optional, Union

import numpy as np

from ..core.alea_prng import AleaPRNG
from ..utils.random import get_prng

ArrayLike = Union[float, np.ndarray]

_MASK = np.uint64(0xFFFFFFFF)
_HALF = np.uint64(16)
_ANGLE_SCALE = np.pi / 2**31  # maps a 32-bit word onto [0, 2*pi)


def _smoothstep(a0: np.ndarray, a1: np.ndarray, w: np.ndarray) -> np.ndarray:
    """Cubic interpolation between a0 and a1 for weights in [0, 1]."""
    return (a1 - a0) * (3.0 - w * 2.0) * w * w + a0


def _rotate(v: np.ndarray) -> np.ndarray:
    return ((v << _HALF) | (v >> _HALF)) & _MASK


class PerlinNoise:
    """Perlin noise over the plane, roughly in [-0.7, 0.7]."""

    def __init__(self, prng: Optional[AleaPRNG] = None):
        prng = prng or get_prng()
        self.key_a = np.uint64(prng.uint32())
        self.key_b = np.uint64(prng.uint32())
        self.key_c = np.uint64(prng.uint32())

    def _gradient(self, ix: np.ndarray, iy: np.ndarray):
        """Unit gradient vectors for lattice points."""
        a = ix.astype(np.uint64) & _MASK
        b = iy.astype(np.uint64) & _MASK
        a = (a * self.key_a) & _MASK
        b = b ^ _rotate(a)
        b = (b * self.key_b) & _MASK
        a = a ^ _rotate(b)
        a = (a * self.key_c) & _MASK
        angle = a.astype(np.float64) * _ANGLE_SCALE
        return np.cos(angle), np.sin(angle)

    def _dot_gradient(self, ix, iy, x, y):
        gx, gy = self._gradient(ix, iy)
        return (x - ix) * gx + (y - iy) * gy

    def sample(self, x: ArrayLike, y: ArrayLike) -> ArrayLike:
        """
        Evaluate the noise field.

        Args:
            x, y: Coordinates (scalars or equally shaped arrays)

        Returns:
            Noise values with the shape of the inputs
        """
        scalar = np.isscalar(x) and np.isscalar(y)
        x = np.atleast_1d(np.asarray(x, dtype=np.float64))
        y = np.atleast_1d(np.asarray(y, dtype=np.float64))

        x0 = np.floor(x).astype(np.int64)
        y0 = np.floor(y).astype(np.int64)
        x1 = x0 + 1
        y1 = y0 + 1
        sx = x - x0
        sy = y - y0

        top = _smoothstep(
            self._dot_gradient(x0, y0, x, y), self._dot_gradient(x1, y0, x, y), sx
        )
        bottom = _smoothstep(
            self._dot_gradient(x0, y1, x, y), self._dot_gradient(x1, y1, x, y), sx
        )
        value = _smoothstep(top, bottom, sy)
        return float(value[0]) if scalar else value
