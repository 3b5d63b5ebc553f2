# src/tasknest/utils/config.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from .paths import DB_NAME, config_dir

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "settings.json"

_DEFAULTS: Dict[str, Any] = {
    "database": {
        "name": DB_NAME,
    },
    "backups": {
        "auto_export_on_exit": True,
    },
}


def settings_file() -> Path:
    return config_dir() / SETTINGS_FILENAME


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or settings_file()
    if path.exists():
        try:
            stored = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable settings file %s", path)
            return json.loads(json.dumps(_DEFAULTS))
        merged = json.loads(json.dumps(_DEFAULTS))
        for section, values in stored.items():
            if isinstance(values, dict) and isinstance(merged.get(section), dict):
                merged[section].update(values)
            else:
                merged[section] = values
        return merged
    return json.loads(json.dumps(_DEFAULTS))


def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or settings_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
