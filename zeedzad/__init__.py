"""Zeedzad: catalog API for a creator's videos and the games they feature."""

__version__ = "0.1.0"
