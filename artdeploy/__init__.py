"""Release-based artifact deployment."""

__version__ = "0.3.0"
