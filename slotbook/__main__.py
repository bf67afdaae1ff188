"""
Convenience entry point for running slotbook as a module.

Usage: python -m slotbook [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
