from .geometry import Direction, Position, manhattan
from .rng import RNG

__all__ = ["Direction", "Position", "RNG", "manhattan"]
