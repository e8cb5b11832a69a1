"""Hoist - publish GitHub releases and their assets from a build pipeline."""

__version__ = "0.1.0"
