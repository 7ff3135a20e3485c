"""Phrase-level tokenization over a fixed vocabulary."""

__version__ = "0.1.0"
