"""Job portal search, match scoring and applications."""

__version__ = "0.1.0"
