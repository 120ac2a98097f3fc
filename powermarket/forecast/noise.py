import random
from typing import Optional, Protocol


class NoiseSource(Protocol):
    def draw(self, amplitude: float) -> float:
        """Return a perturbation centered at zero within [-amplitude/2, amplitude/2]."""
        ...


class UniformNoise:
    """Uniform perturbation; pass a seed for repeatable forecasts."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def draw(self, amplitude: float) -> float:
        return (self._rng.random() - 0.5) * amplitude


class ZeroNoise:
    def draw(self, amplitude: float) -> float:
        return 0.0
