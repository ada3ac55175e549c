"""Entry point for running outing as a module.

Allows running the application with:
    python -m outing

This delegates to the Typer CLI app.
"""

from outing.cli import app

if __name__ == "__main__":
    app()
