"""hospm: hospital construction project tracking."""

__version__ = "0.1.0"
