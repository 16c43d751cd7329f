"""Command line entry point for the asset server."""

import sys

import typer

from .commands import client, server
from .scanner import list_directory
from .settings import load_settings
from .utils import print_yaml

app = typer.Typer(help="Random asset server with live directory caches")
config_app = typer.Typer(help="Inspect configuration")

app.add_typer(server.app, name="server")
app.add_typer(client.app, name="client")
app.add_typer(config_app, name="config")


@config_app.command("show")
def config_show(
    config_file: str = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
):
    """Print the resolved settings."""
    settings = load_settings(config_file=config_file)
    print_yaml(settings.to_dict())


@app.command("scan")
def scan(directory: str = typer.Argument(..., help="Directory to scan")):
    """Scan a directory once, the same way a category cache is seeded."""
    try:
        names = sorted(list_directory(directory))
    except OSError as e:
        print(f"❌ Error reading dir {directory}: {e}", file=sys.stderr)
        sys.exit(1)
    print_yaml({"directory": directory, "count": len(names), "files": names})


def main():
    app()


if __name__ == "__main__":
    main()
