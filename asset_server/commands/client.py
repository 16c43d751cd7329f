"""Commands that query a running asset server."""

import sys

import httpx
import typer

from ..utils import get_client, handle_response

# Create Typer app for client commands
app = typer.Typer(help="Query a running asset server")


def _get(path: str):
    try:
        with get_client() as client:
            handle_response(client.get(path))
    except httpx.TransportError:
        print("❌ Server is not running.", file=sys.stderr)
        sys.exit(1)


@app.command("random")
def random_asset(category: str = typer.Argument(..., help="Category name, e.g. gary")):
    """Get a random asset URL for a category."""
    _get(f"/{category.lower()}")


@app.command("count")
def count(category: str = typer.Argument(..., help="Category name, e.g. gary")):
    """Get the number of cached assets for a category."""
    _get(f"/{category.lower()}/count")


@app.command("quote")
def quote():
    """Get a random quote."""
    _get("/quote")


@app.command("joke")
def joke():
    """Get a random joke."""
    _get("/joke")


@app.command("info")
def info():
    """Show process information for the running server."""
    _get("/info")
