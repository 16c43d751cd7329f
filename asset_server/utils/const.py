"""Constants for the asset-server CLI."""

import os
from pathlib import Path

WORKSPACE_ROOT = Path.cwd()
SERVER_URL = os.environ.get("ASSET_SERVER_URL", f"http://localhost:{os.environ.get('PORT', '8080')}")
PID_FILE = WORKSPACE_ROOT / "asset-server.pid"
LOG_FILE = WORKSPACE_ROOT / "asset-server.log"
