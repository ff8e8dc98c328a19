"""Planning backend implementations."""

from .sim_arm import SimulatedArmBackend

__all__ = [
    "SimulatedArmBackend",
]
