"""
tempgroup command line interface (Typer).
"""

from tempgroup.cli.app import app

__all__ = ["app"]
