"""Utility functions for the asset-server CLI and service."""

from .const import (
    SERVER_URL,
    PID_FILE,
    LOG_FILE,
)

from .api import (
    get_client,
    handle_response,
    print_yaml,
)

from .formatting import (
    extract_number,
    join_url,
)

from .server import (
    get_server_pid,
    is_process_running,
)
