"""Reversible Wikipedia dump transforms, a word dictionary and archive trailer helpers."""

__version__ = "0.1.0"