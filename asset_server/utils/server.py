"""Server Management."""

import os

from .const import PID_FILE


def get_server_pid():
    """Get server PID from file."""
    if PID_FILE.exists():
        try:
            return int(PID_FILE.read_text().strip())
        except ValueError:
            return None
    return None


def is_process_running(pid) -> bool:
    """Check whether a process with this PID exists."""
    if not pid:
        return False
    try:
        os.kill(pid, 0)
        return True
    except OSError:
        return False
