"""
Command-line interface module.

CLI tools for sampling and inference over the built-in gene model.
"""

from .main import app

__all__ = [
    "app"
]
