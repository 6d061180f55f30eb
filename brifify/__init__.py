"""Brifify: AI project interviews that end in a technical brief."""

__version__ = "0.1.0"
