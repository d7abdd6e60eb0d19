# configio.py - read-only JSON config for the communicator
import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from segbot.core.logger import APP_LOGGER

DEFAULT_PATH = Path.home() / ".segbot" / "config.json"
DEFAULT_UPDATE_INTERVAL_MS = 100
MIN_UPDATE_INTERVAL_MS = 1


@dataclass
class CommunicatorConfig:
    device: str = ""
    update_interval_ms: int = DEFAULT_UPDATE_INTERVAL_MS
    read_timeout_s: Optional[float] = 0.2
    baudrate: int = 115200


def clamp_interval_ms(interval_ms) -> int:
    return max(MIN_UPDATE_INTERVAL_MS, int(interval_ms))


def config_from_dict(data: Optional[dict], base: Optional[CommunicatorConfig] = None) -> CommunicatorConfig:
    """Overlay known keys of `data` on `base`; unknown keys are ignored."""
    cfg = base or CommunicatorConfig()
    if not data:
        return cfg
    known = {f.name for f in fields(CommunicatorConfig)}
    for key, value in data.items():
        if key not in known:
            APP_LOGGER.warning(f"Ignoring unknown config key: {key}")
            continue
        if key == "device":
            cfg.device = str(value or "")
        elif key == "update_interval_ms":
            cfg.update_interval_ms = clamp_interval_ms(value)
        elif key == "read_timeout_s":
            cfg.read_timeout_s = None if value is None else float(value)
        elif key == "baudrate":
            cfg.baudrate = int(value)
    return cfg


def load_config(path: Path = DEFAULT_PATH) -> dict | None:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except Exception as e:
        APP_LOGGER.warning(f"Failed to load config from {path}: {e}")
        return None
    if not isinstance(data, dict):
        APP_LOGGER.warning(f"Config in {path} is not a JSON object")
        return None
    return data
