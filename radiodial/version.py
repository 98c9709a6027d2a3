"""Version information for radiodial."""

__version__ = "0.1.0"
