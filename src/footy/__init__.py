"""Compound half-market value finder for football fixtures."""

__version__ = "0.1.0"
