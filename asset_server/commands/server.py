"""Server lifecycle commands."""

import os
import signal
import subprocess
import sys
import time

import httpx
import typer

from ..settings import load_settings
from ..utils import (
    LOG_FILE,
    PID_FILE,
    get_client,
    get_server_pid,
    is_process_running,
    print_yaml,
)

# Create Typer app for server commands
app = typer.Typer(help="Manage the asset server")


def build_command(host: str, port: int, log_level: str) -> list:
    return [
        sys.executable,
        "-m",
        "uvicorn",
        "asset_server.server:create_app",
        "--factory",
        "--host",
        host,
        "--port",
        str(port),
        "--log-level",
        log_level.lower(),
    ]


@app.command("status")
def server_status():
    """Check the status of the asset server."""
    pid = get_server_pid()
    is_running = is_process_running(pid)

    try:
        with get_client() as client:
            client.get("/health").raise_for_status()
            watch = client.get("/watch/status").json()
    except httpx.HTTPError:
        if is_running:
            print(f"Server: 🟡 starting (PID {pid})")
        else:
            print("Server: 🔴 stopped")
        return

    status = "🟢 running" if is_running else "🟢 running (unmanaged)"
    print(f"Server: {status} (PID {pid})" if pid else f"Server: {status}")
    for name, category in watch.items():
        print(f"  {name}: {category['count']} files, watcher {category['state']}")


@app.command("start")
def server_start(
    background: bool = typer.Option(
        True, "--background/--foreground", "-b/-f", help="Run the server in the background"
    ),
):
    """Start the asset server."""
    pid = get_server_pid()
    if pid:
        if is_process_running(pid):
            print(f"❌ Server is already running (PID {pid})")
            print("Stop it first with: asset-server server stop")
            sys.exit(1)
        # Process not found, remove stale PID file
        PID_FILE.unlink()

    settings = load_settings()
    cmd = build_command(settings.host, settings.port, settings.log_level)

    if not background:
        subprocess.run(cmd)
        return

    print(f"Starting server in background... logs at {LOG_FILE}")
    with open(LOG_FILE, "a") as f:
        process = subprocess.Popen(cmd, stdout=f, stderr=f, start_new_session=True)
    PID_FILE.write_text(str(process.pid))

    # Wait for server to be ready (max 5 seconds)
    for _ in range(5):
        try:
            with get_client() as client:
                if client.get("/health").status_code == 200:
                    print("✅ Server started")
                    return
        except httpx.TransportError:
            time.sleep(1)
    print("⏳ Server starting... check `asset-server server status`")


@app.command("stop")
def server_stop():
    """Stop the asset server."""
    pid = get_server_pid()
    if not pid:
        print("Server is not running.")
        return

    try:
        os.kill(pid, signal.SIGTERM)
        print(f"✅ Server stopped (PID {pid})")
    except OSError:
        print(f"Could not stop server (PID {pid}). It might have already exited.")
    if PID_FILE.exists():
        PID_FILE.unlink()


@app.command("watch")
def server_watch():
    """Show per-category cache counts and watcher statistics."""
    try:
        with get_client() as client:
            response = client.get("/watch/status")
            response.raise_for_status()
            print_yaml(response.json())
    except httpx.HTTPError as e:
        print(f"❌ Could not reach server: {e}", file=sys.stderr)
        sys.exit(1)
