"""QuObject bucket claim operator."""

__version__ = "0.1.0"
