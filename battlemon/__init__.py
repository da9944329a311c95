"""battlemon: a turn-based creature battling game built around an async battle engine."""
__version__ = "0.3.0"
