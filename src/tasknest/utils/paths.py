# Rev 0.3.0

"""Paths and XDG helpers (Rev 0.3.0)
- Uses XDG Base Directory spec for data/state/config
- App-private root can be pinned with TASKNEST_DATA_DIR (tests, portable installs)
- Backups live under <data>/backups
"""
from __future__ import annotations
import os
from pathlib import Path


APP_NAME = "tasknest"
DB_NAME = "task_database"
BACKUP_DIR_NAME = "backups"


XDG_DATA_HOME = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
XDG_STATE_HOME = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
XDG_CONFIG_HOME = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


STATE_DIR = XDG_STATE_HOME / APP_NAME
LOGS_DIR = STATE_DIR / "logs"
CONFIG_DIR = XDG_CONFIG_HOME / APP_NAME


# Schema files ship inside the package
MIGRATIONS_DIR = (Path(__file__).resolve().parents[1] / "repositories" / "migrations").resolve()


def data_dir() -> Path:
    override = os.environ.get("TASKNEST_DATA_DIR")
    if override:
        return Path(override).expanduser()
    return XDG_DATA_HOME / APP_NAME


def db_path(root: Path | None = None, name: str = DB_NAME) -> Path:
    return (root or data_dir()) / f"{name}.db"


def backup_dir(root: Path | None = None) -> Path:
    return (root or data_dir()) / BACKUP_DIR_NAME


def config_dir() -> Path:
    return CONFIG_DIR


def ensure_dirs(root: Path | None = None) -> None:
    for p in (root or data_dir(), LOGS_DIR, CONFIG_DIR):
        p.mkdir(parents=True, exist_ok=True)
