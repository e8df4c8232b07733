"""Backup catalog built from directory listings."""

import logging
import os
import threading
from typing import List, Optional, Tuple

from .codec import backup_suffix, decode_backup_name
from .errors import CatalogError
from .models import BackupEntry


class BackupCatalog:
    """Lists and decodes the backups present in a save directory."""
    
    def __init__(self, extension: str):
        """Initialize backup catalog.
        
        Args:
            extension: Save extension including the leading dot.
        """
        self.extension = extension
        self.suffix = backup_suffix(extension)
        self.logger = logging.getLogger(__name__)
    
    def discover(self, directory: str) -> List[BackupEntry]:
        """Build the catalog of a directory.
        
        Every regular file named ``*<extension>.bak`` is decoded. A single
        undecodable name fails the whole call; no partial catalog is
        returned.
        
        Args:
            directory: Directory to list.
            
        Returns:
            Entries ordered by timestamp, then filename.
            
        Raises:
            CatalogError: If the directory cannot be listed.
            InvalidBackupName: If a matching filename has the wrong layout.
            InvalidTimestamp: If a matching filename has a bad timestamp.
        """
        entries = []
        
        for name in self._matching_names(directory):
            timestamp = decode_backup_name(name, self.extension)
            entries.append(BackupEntry.from_timestamp(name, timestamp))
        
        entries.sort(key=lambda entry: (entry.timestamp, entry.filename))
        self.logger.info(f"Found {len(entries)} backups in {directory}")
        return entries
    
    def _matching_names(self, directory: str) -> List[str]:
        """Return names of regular files in ``directory`` that look like backups."""
        names = []
        
        try:
            with os.scandir(directory) as it:
                for entry in it:
                    if not entry.name.endswith(self.suffix):
                        continue
                    try:
                        if not entry.is_file():
                            self.logger.debug(f"Skipping non-file {entry.path}")
                            continue
                    except OSError as e:
                        self.logger.debug(f"Skipping {entry.path}: {e}")
                        continue
                    names.append(entry.name)
        except OSError as e:
            raise CatalogError(directory, e) from e
        
        return names


class CatalogState:
    """Thread-safe holder of the selected directory and its catalog.
    
    The watcher thread appends entries while the foreground switches
    directories; every read returns an immutable snapshot.
    """
    
    def __init__(self):
        self._lock = threading.Lock()
        self._directory: Optional[str] = None
        self._entries: Tuple[BackupEntry, ...] = ()
    
    @property
    def directory(self) -> Optional[str]:
        with self._lock:
            return self._directory
    
    @property
    def entries(self) -> Tuple[BackupEntry, ...]:
        with self._lock:
            return self._entries
    
    def snapshot(self) -> Tuple[Optional[str], Tuple[BackupEntry, ...]]:
        """Return the selected directory and its entries as one consistent pair."""
        with self._lock:
            return self._directory, self._entries
    
    def replace(self, directory: str, entries: List[BackupEntry]) -> None:
        """Select ``directory`` with a freshly built catalog."""
        with self._lock:
            self._directory = directory
            self._entries = tuple(entries)
    
    def add(self, directory: str, entry: BackupEntry) -> bool:
        """Record a new backup taken in ``directory``.
        
        Returns:
            False if ``directory`` is no longer the selected one.
        """
        with self._lock:
            if directory != self._directory:
                return False
            kept = tuple(e for e in self._entries if e.filename != entry.filename)
            self._entries = kept + (entry,)
            return True
    
    def find(self, filename: str) -> Optional[BackupEntry]:
        with self._lock:
            for entry in self._entries:
                if entry.filename == filename:
                    return entry
        return None
