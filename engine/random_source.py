"""
Substitutable source of randomness.

Everything random in a match (tie-breaks, the opening move, dice, the
engine's name, thinking delays) goes through one RandomSource so tests can
seed it or swap it out.
"""

import random
from typing import Optional, Sequence, TypeVar

from .errors import RandomnessUnavailable

T = TypeVar("T")


class RandomSource:
    """
    Uniform random draws backed by a `random.Random` instance.

    Any failure of the underlying generator is reported as
    RandomnessUnavailable; there is no fallback to deterministic play.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random(seed)

    def choice(self, items: Sequence[T]) -> T:
        """Pick one item uniformly."""
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        try:
            return self.rng.choice(items)
        except Exception as e:
            raise RandomnessUnavailable(f"choice failed: {e}") from e

    def randint(self, low: int, high: int) -> int:
        """Draw an integer uniformly from low..high (inclusive)."""
        try:
            return self.rng.randint(low, high)
        except Exception as e:
            raise RandomnessUnavailable(f"randint failed: {e}") from e
