"""Phraseboard: transcript feedback phrases aggregated into word clouds."""

__version__ = "0.4.0"
