"""Pinwall - pin interaction API for a social image-pinning board."""

__version__ = "0.3.0"
