"""Typer sub-applications for the asset-server CLI."""
