"""Fantasy football toolkit: captain ranking, player lookup, gameweek joins and output shaping."""

__version__ = "0.2.0"

__all__ = ["__version__"]