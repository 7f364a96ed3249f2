"""Excel -> directory attribute enricher."""

__version__ = "0.1.0"
