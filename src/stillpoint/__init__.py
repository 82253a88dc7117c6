"""Stillpoint - guided meditation session timer"""

__version__ = "1.0.0"
