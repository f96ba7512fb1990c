"""Debug logging to ergorace-debug.log."""

from datetime import datetime

DEBUG_MODE = False
DEBUG_LOG_FILE = "ergorace-debug.log"


def debug_log(msg: str) -> None:
    """Log debug message to ergorace-debug.log if debug mode is enabled."""
    if not DEBUG_MODE:
        return

    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
    with open(DEBUG_LOG_FILE, "a") as f:
        f.write(f"[{timestamp}] {msg}\n")
        f.flush()


def enable_debug_log() -> None:
    """Turn on debug logging and clear the log file."""
    global DEBUG_MODE
    DEBUG_MODE = True
    with open(DEBUG_LOG_FILE, "w") as f:
        f.write("=== ergorace Debug Log ===\n")
