"""Mission logic: spawning, burns, the command queue and evaluation."""

from .simulation import SimSnapshot, Simulation

__all__ = ["SimSnapshot", "Simulation"]
