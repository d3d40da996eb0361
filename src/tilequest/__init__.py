"""TileQuest: a turn-based tile adventure game core."""

__version__ = "0.1.0"

__all__ = ["__version__"]
