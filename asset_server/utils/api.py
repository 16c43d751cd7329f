"""HTTP client for the asset-server CLI."""

import sys

import httpx
import yaml

from .const import SERVER_URL


def get_client():
    """Create HTTP client with timeout."""
    return httpx.Client(base_url=SERVER_URL, timeout=10.0)


def print_yaml(data):
    print(yaml.dump(data, indent=2, sort_keys=False, default_flow_style=False), end="")


def handle_response(response):
    """Handle and print API response."""
    try:
        response.raise_for_status()
        print_yaml(response.json())
    except httpx.HTTPStatusError as e:
        print(f"Error: {e.response.text}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
