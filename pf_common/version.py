"""Version information for pyfacter."""

__version__ = "0.1.0"
