"""Entry point for python -m brewguard execution.

This module enables running brewguard as a module:
    python -m brewguard --help
    python -m brewguard validate extraction.json -c breweries.json
"""

from brewguard.cli import app

if __name__ == "__main__":
    app()
