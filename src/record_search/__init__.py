"""Fuzzy, typo-tolerant search over small collections of structured records."""

__version__ = "0.1.0"
