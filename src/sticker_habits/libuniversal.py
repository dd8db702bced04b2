from enum import Enum
import os
import sys

class StorageKey(str, Enum):
    OWNED_ITEMS = "owned_items"
    HABITS = "habits"
    RECORDS = "records"
    TICKETS = "tickets"
    UNIQUE_OWNED = "unique_owned"
    TICKET_COUNT = "count"
    LAST_GRANTED_AT = "last_granted_at"

class ConfigKey(str, Enum):
    STORAGE_FILE = "storage_file"
    KEY = "key"
    BACKUPS = "backups"
    TICK_SECONDS = "tick_seconds"
    CATALOG_FILE = "catalog_file"
    LOG_LEVEL = "log_level"

class CatalogKey(str, Enum):
    WEIGHTS = "weights"
    ITEMS = "items"

class Paths(str, Enum):
    STORAGE_FILE = "storage.dat"
    CONFIG_FILE = "config.yaml"

DATE_FORMAT = "%Y-%m-%d"

def app_base_dir() -> str:
    # PyInstaller exe: sys.executable is the exe path
    if getattr(sys, "frozen", False):
        return os.path.dirname(sys.executable)
    return os.getcwd()
