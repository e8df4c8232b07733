"""Core archiving functionality."""

from .archiver import SaveArchiver
from .catalog import BackupCatalog, CatalogState
from .codec import encode_backup_name, decode_backup_name, backup_suffix
from .discovery import SaveDirectoryLocator
from .models import SaveFileSpec, BackupEntry, RestoreOutcome, RestoreStage
from .restore import RestoreTransaction
from .watcher import SaveWatcher, WatcherState

__all__ = [
    "SaveArchiver", "BackupCatalog", "CatalogState",
    "encode_backup_name", "decode_backup_name", "backup_suffix",
    "SaveDirectoryLocator", "SaveFileSpec", "BackupEntry", "RestoreOutcome", "RestoreStage",
    "RestoreTransaction", "SaveWatcher", "WatcherState",
]
