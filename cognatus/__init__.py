"""Cognatus - guided scientific-method workflow with lightweight statistics."""

__version__ = "1.0.0"
