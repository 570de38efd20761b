"""
tablesync CLI Commands

Each command is implemented as a separate module; the CLI layer (cli.py)
only parses options and routes to them.
"""

from .create import CreateError, create_all_tables
from .insert import InsertError, insert_record
from .inspect import InspectError, inspect_table
from .sync import SyncError, plan_sync, sync_all_tables

__all__ = [
    "create_all_tables",
    "CreateError",
    "sync_all_tables",
    "plan_sync",
    "SyncError",
    "inspect_table",
    "InspectError",
    "insert_record",
    "InsertError",
]
