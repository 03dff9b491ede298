"""
Random number generation utilities.

Holds the process-wide default Alea PRNG. Components that are not handed
an explicit generator draw from this one; Python's random and NumPy's
random are not used so that a seed string reproduces a run exactly.
"""

from typing import Optional, Union

from ..core.alea_prng import AleaPRNG

# Global PRNG instance
_prng: Optional[AleaPRNG] = None


def set_random_seed(seed: Union[str, int]) -> AleaPRNG:
    """
    Reset the default PRNG from a seed.

    Args:
        seed: Seed string or number

    Returns:
        The freshly seeded AleaPRNG
    """
    global _prng
    _prng = AleaPRNG(seed)
    return _prng


def get_prng() -> AleaPRNG:
    """
    Get the current default PRNG, creating one seeded with "default".

    Returns:
        AleaPRNG instance
    """
    global _prng
    if _prng is None:
        _prng = AleaPRNG("default")
    return _prng
