"""
CLI module for DevAssist.
"""

from devassist.cli.main import app

def cli():
    """Entry point for the CLI."""
    app()

__all__ = ['app', 'cli']
