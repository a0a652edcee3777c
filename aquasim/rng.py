"""
Random sources for the stochastic parts of the engine.

Only old-age death, the default scrub percentage and fish sex at purchase
draw randomness. Each takes a RandomSource (a zero-argument callable
returning a float in [0, 1)) as an explicit parameter. Deterministic sources
derive their seed from hierarchical components with SHA256 and draw from
numpy.random.Generator(PCG64).
"""

import hashlib
import numpy as np
from typing import Any, Callable

RandomSource = Callable[[], float]


def make_seed(*components: Any) -> int:
    """
    Generate deterministic 64-bit seed from hierarchical components.

    Args:
        *components: Seed components (session id, tank name, run index, etc.)

    Returns:
        64-bit integer seed for numpy RNG

    Example:
        seed = make_seed("session-42", "tank-1")
    """
    hash_input = ":".join(str(c) for c in components)
    hash_bytes = hashlib.sha256(hash_input.encode('utf-8')).digest()
    return int.from_bytes(hash_bytes[:8], byteorder='big')


def _source_from_generator(generator: np.random.Generator) -> RandomSource:
    def draw() -> float:
        return float(generator.random())
    return draw


def seeded_source(*components: Any) -> RandomSource:
    """
    Deterministic random source.

    Same components always yield the same sequence of draws.

    Args:
        *components: Seed components passed to make_seed()

    Returns:
        Callable returning floats in [0, 1)
    """
    generator = np.random.Generator(np.random.PCG64(make_seed(*components)))
    return _source_from_generator(generator)


def default_source() -> RandomSource:
    """OS-entropy random source, for the outermost call boundary only"""
    return _source_from_generator(np.random.default_rng())


def constant_source(value: float) -> RandomSource:
    """Source that always returns value (pinning stochastic branches)"""
    if not 0.0 <= value < 1.0:
        raise ValueError(f"Random source value must be in [0, 1), got {value}")
    return lambda: value
