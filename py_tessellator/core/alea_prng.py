"""
Seedable Alea pseudo-random number generator.

Based on Johannes Baagøe's Alea algorithm. Every random draw made by the
tessellation engine goes through one instance of this class, so a seed
string fully determines the generated mesh.
"""

import math


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


def _make_mash():
    """Build a stateful string hash used to derive the initial state."""
    state = 0xEFC8249D

    def mash(data):
        nonlocal state
        for char in str(data):
            state = state + ord(char)
            h = 0.02519603282416938 * state
            state = _uint32(h)
            h -= state
            h *= state
            state = _uint32(h)
            h -= state
            state += h * 0x100000000  # 2^32
        return _uint32(state) * 2.3283064365386963e-10  # 2^-32

    return mash


class AleaPRNG:
    """
    Alea PRNG with helpers for the ranges the tessellator draws from.

    Accepts a string, a number, or an iterable of either as seed.
    """

    def __init__(self, seed):
        self.seed = seed
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            parts = list(seed)
        else:
            parts = [seed]

        mash = _make_mash()
        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        for part in parts:
            self.s0 = self._fold(self.s0, mash(part))
            self.s1 = self._fold(self.s1, mash(part))
            self.s2 = self._fold(self.s2, mash(part))

    @staticmethod
    def _fold(value, mashed):
        value -= mashed
        if value < 0:
            value += 1
        return value

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def uniform(self, low: float, high: float) -> float:
        """Uniform draw in [low, high)."""
        return low + self.random() * (high - low)

    def angle(self) -> float:
        """Uniform angle in [0, 2*pi)."""
        return self.random() * 2 * math.pi

    def uint32(self) -> int:
        """Random unsigned 32-bit integer."""
        return _uint32(self.random() * 0x100000000)
