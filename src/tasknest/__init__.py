# tasknest
# Rev 0.3.0
"""Personal task manager core: SQLite store, live queries, backups."""

__version__ = "0.3.0"
