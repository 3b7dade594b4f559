"""Valuation-model training, labeling and evaluation jobs."""

__version__ = "0.1.0"
