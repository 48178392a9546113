"""Property list trees, value comparisons, and XML reading and writing."""

__version__ = "0.1.0"