# File: src/tasknest/tools/manage.py
# Usage examples:
#   tasknest-manage status
#   tasknest-manage seed --count 100
#   tasknest-manage export
#   tasknest-manage import                       # newest tasks_backup_*.json
#   tasknest-manage import ~/tasks_backup_1735134600000.json
#   tasknest-manage backup
#   tasknest-manage restore
#   tasknest-manage status --data-dir /tmp/tasknest
#
# Notes:
# - Data dir defaults to env TASKNEST_DATA_DIR or $XDG_DATA_HOME/tasknest
# - Exit code 0 on success, 1 on a failed operation

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QCoreApplication

from ..app_context import AppContext
from ..models.entities import Task, now_millis
from ..utils import paths
from ..utils.logging_setup import setup_logging
from ..utils.result import Success


def cmd_migrate(ctx: AppContext) -> int:
    applied = sorted(ctx.db.applied())
    print(f"DB: {ctx.db.path}")
    for name in applied:
        print(f"  ✔ {name}")
    print("✓ Database is up to date.")
    return 0


def cmd_status(ctx: AppContext) -> int:
    repo = ctx.repository
    print(f"DB: {ctx.db.path}")
    print(f"Tasks: {repo.count_tasks()} (active {repo.count_tasks(completed=False)}, "
          f"completed {repo.count_tasks(completed=True)})")
    print(f"Tags: {len(repo.list_tags())}")
    print(f"Categories: {len(repo.list_categories())}")
    return 0


def cmd_seed(ctx: AppContext, count: int) -> int:
    now = now_millis()
    for i in range(1, count + 1):
        ctx.repository.insert(
            Task(title=f"Test task #{i}", description=f"Generated test task {i}",
                 is_completed=(i % 3 == 0), timestamp=now)
        )
    print(f"✓ Added {count} test tasks.")
    return 0


def cmd_clear(ctx: AppContext) -> int:
    removed = ctx.repository.delete_all()
    print(f"✓ Removed {removed} tasks.")
    return 0


def cmd_export(ctx: AppContext) -> int:
    result = ctx.exporter.export_to_json(ctx.repository.all_active_tasks.first(), [])
    if isinstance(result, Success):
        print(f"✓ Exported to {result.value}")
        return 0
    print(f"❌ {result.message}")
    return 1


def cmd_import(ctx: AppContext, path: Optional[Path]) -> int:
    if path is None:
        backups = ctx.exporter.get_backups_list()
        if not backups:
            print("❌ No backups available")
            return 1
        path = backups[0]
    result = ctx.exporter.import_from_json(path)
    if not isinstance(result, Success):
        print(f"❌ {result.message}")
        return 1
    count = ctx.repository.import_backup(result.value)
    print(f"✓ Imported {count} tasks from {path}")
    return 0


def cmd_backup(ctx: AppContext) -> int:
    result = ctx.backups.backup_database()
    if isinstance(result, Success):
        print(f"✓ Backup saved: {result.value}")
        return 0
    print(f"❌ {result.message}")
    return 1


def cmd_restore(ctx: AppContext) -> int:
    result = ctx.backups.restore_database()
    if isinstance(result, Success):
        print(f"✓ Restored from: {result.value}")
        return 0
    print(f"❌ {result.message}")
    return 1


def cmd_list_backups(ctx: AppContext) -> int:
    snapshots = ctx.backups.list_snapshots()
    exports = ctx.exporter.get_backups_list()
    print(f"Backup dir: {paths.backup_dir(ctx.data_dir)}")
    for p in snapshots:
        print(f"  [db]   {p.name}")
    for p in exports:
        print(f"  [json] {p.name}")
    if not snapshots and not exports:
        print("  (none)")
    return 0


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="tasknest-manage", description="Maintenance tool for the tasknest database")
    p.add_argument("--data-dir", type=Path, default=None,
                   help="App data directory (default: $TASKNEST_DATA_DIR or $XDG_DATA_HOME/tasknest)")
    p.add_argument("--log", action="store_true", help="Also write the rotating log file under $XDG_STATE_HOME")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("migrate", help="Apply pending schema migrations")
    sub.add_parser("status", help="Show task, tag and category counts")
    s_seed = sub.add_parser("seed", help="Insert generated test tasks")
    s_seed.add_argument("--count", type=int, default=100, help="How many tasks (default: 100)")
    sub.add_parser("clear", help="Delete every task")
    sub.add_parser("export", help="Export active tasks to JSON")
    s_import = sub.add_parser("import", help="Import tasks from a JSON export (insert only)")
    s_import.add_argument("path", nargs="?", type=Path, default=None, help="File to import (default: newest export)")
    sub.add_parser("backup", help="Snapshot the database file")
    sub.add_parser("restore", help="Replace the database with the newest snapshot")
    sub.add_parser("list-backups", help="List snapshots and JSON exports")

    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    if ns.log:
        setup_logging(console=False)
    _app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    ctx = AppContext.create(ns.data_dir, settings=None)
    commands = {
        "migrate": lambda: cmd_migrate(ctx),
        "status": lambda: cmd_status(ctx),
        "seed": lambda: cmd_seed(ctx, ns.count),
        "clear": lambda: cmd_clear(ctx),
        "export": lambda: cmd_export(ctx),
        "import": lambda: cmd_import(ctx, ns.path),
        "backup": lambda: cmd_backup(ctx),
        "restore": lambda: cmd_restore(ctx),
        "list-backups": lambda: cmd_list_backups(ctx),
    }
    try:
        return commands[ns.cmd]()
    finally:
        ctx.backups.pool.waitForDone()
        ctx.db.close()


if __name__ == "__main__":
    raise SystemExit(main())
