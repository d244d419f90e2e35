"""Command-line interface for kinsta-deploy"""

from .main import cli, main

__all__ = ["cli", "main"]
