"""
Main entry point for dotcli

This allows running the CLI with: python -m dotcli
"""
from .cli import run

if __name__ == "__main__":
    run()
