"""
Save Archiver - Automatic backups for a single game save file.

This package watches a live save for modification, archives every version
under a timestamped name, and restores any archived version on request.
"""

__version__ = "1.0.0"

from .core.archiver import SaveArchiver
from .core.catalog import BackupCatalog
from .core.restore import RestoreTransaction
from .core.watcher import SaveWatcher

__all__ = ["SaveArchiver", "BackupCatalog", "RestoreTransaction", "SaveWatcher"]
