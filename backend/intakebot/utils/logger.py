"""
Logger — writes timestamped lines to the console and a per-component log file.
"""
import os
from datetime import datetime

from intakebot.config import get_settings


def log(component: str, message: str, filename: str = "intakebot.log"):
    """Write one line to console and to LOG_DIR/filename. Never raises."""
    ts = datetime.now().isoformat()
    line = f"{ts} - {component}: {message}"
    print(line)
    try:
        log_dir = get_settings().LOG_DIR
        os.makedirs(log_dir, exist_ok=True)
        with open(os.path.join(log_dir, filename), "a", encoding="utf-8") as f:
            f.write(line + "\n")
    except OSError:
        pass
