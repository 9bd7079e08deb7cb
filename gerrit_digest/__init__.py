"""Collect merged Gerrit changes for one owner into a Markdown digest."""

__all__ = ["__version__"]

__version__ = "0.1.0"
