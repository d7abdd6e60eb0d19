# logger.py - app logger plus CSV recorder for telemetry changes
import csv, time, logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

MS_PER_SEC = 1000.0
# --- App-wide logger ---
# Named logger for lifecycle events and errors.
# Defaults to console, but can be configured to log to file.
APP_LOGGER = logging.getLogger("segbot_app")
APP_LOGGER.setLevel(logging.INFO)
_formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s", datefmt="%H:%M:%S")
_console_handler = logging.StreamHandler()
_console_handler.setFormatter(_formatter)
APP_LOGGER.addHandler(_console_handler)

def configure_file_logging(log_path: Path, level=logging.DEBUG):
    """Configures file logging for APP_LOGGER."""
    # Remove existing file handlers first to prevent duplicates
    for handler in list(APP_LOGGER.handlers):
        if isinstance(handler, logging.FileHandler):
            APP_LOGGER.removeHandler(handler)
            try:
                handler.close()
            except Exception:
                pass

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setFormatter(_formatter)
    file_handler.setLevel(level)
    APP_LOGGER.addHandler(file_handler)
    APP_LOGGER.info(f"File logging enabled at: {log_path}")

# --- Telemetry CSV recorder ---
CSV_FIELDS = [
    "t_host_ms",
    "t_host_iso",
    "field",
    "value",
]

class TelemetryLogger:
    def __init__(self, run_dir: Union[Path, str], filename: str = "telemetry.csv"):
        self.run_dir = Path(run_dir)
        self.run_dir.mkdir(parents=True, exist_ok=True)
        self.rows_written = 0
        self._f = None
        self._w = None
        try:
            self._f = open(self.run_dir / filename, "a", newline="", encoding="utf-8")
            self._w = csv.DictWriter(self._f, fieldnames=CSV_FIELDS)
            if self._f.tell() == 0:
                self._w.writeheader()
        except Exception as e:
            APP_LOGGER.error(f"Failed to open {filename} for writing: {e}")
            self._f = None
            self._w = None

    def log_change(self, field: str, value: int, host_time_s: Optional[float] = None):
        """Append one telemetry change. host_time_s defaults to wall-clock now."""
        if self._w is None:
            return
        if host_time_s is None:
            host_time_s = time.time()
        row = {
            "t_host_ms": int(round(host_time_s * MS_PER_SEC)),
            "t_host_iso": datetime.fromtimestamp(host_time_s).isoformat(timespec="milliseconds"),
            "field": field,
            "value": int(value),
        }
        try:
            self._w.writerow(row)
            self._f.flush()
            self.rows_written += 1
        except Exception as e:
            APP_LOGGER.error(f"Failed to write telemetry row: {e}")

    def close(self):
        try:
            if self._f and not self._f.closed:
                self._f.close()
        except Exception as e:
            APP_LOGGER.error(f"Failed to close telemetry CSV: {e}")
