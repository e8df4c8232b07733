"""Main save archiving coordinator."""

import logging
import threading
from typing import Callable, List, Optional, Tuple

from .catalog import BackupCatalog, CatalogState
from .discovery import SaveDirectoryLocator
from .errors import ArchiverError, WatchReadError
from .models import BackupEntry, RestoreOutcome, SaveFileSpec
from .restore import RestoreTransaction
from .watcher import SaveWatcher
from ..config.config_manager import ConfigManager


class SaveArchiver:
    """Ties together discovery, the catalog, the watcher and restores.
    
    The watcher thread and the foreground share the selected directory and
    its catalog through ``CatalogState``. File operations from both sides
    run under one archive lock, so a backup copy never interleaves with a
    restore.
    """
    
    def __init__(self, config_path: Optional[str] = None):
        """Initialize save archiver.
        
        Args:
            config_path: Optional path to configuration file.
        """
        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.load_config()
        self.logger = logging.getLogger(__name__)
        
        save_config = self.config_manager.get_save_config()
        self.save_spec = SaveFileSpec(
            base_name=save_config['base_name'],
            extension=save_config['extension']
        )
        self.poll_interval = float(self.config_manager.get_monitoring_config()['poll_interval_seconds'])
        self.save_dirs: List[str] = []
        self.state = CatalogState()
        
        self._archive_lock = threading.RLock()
        self._watcher_lock = threading.Lock()
        self._watcher: Optional[SaveWatcher] = None
        self._backup_listeners: List[Callable[[BackupEntry], None]] = []
        self._error_listeners: List[Callable[[ArchiverError], None]] = []
        
        self._initialize_components()
    
    def _initialize_components(self):
        """Initialize archiving components."""
        discovery_config = self.config_manager.get_discovery_config()
        self.locator = SaveDirectoryLocator(
            primary_name=self.save_spec.primary_name,
            app_id=discovery_config.get('app_id', '367500'),
            steam_path=discovery_config.get('steam_path'),
            save_directories=self.config_manager.get_save_directories()
        )
        self.catalog_builder = BackupCatalog(self.save_spec.extension)
        self.restorer = RestoreTransaction(self.save_spec, lock=self._archive_lock)
    
    @property
    def selected_directory(self) -> Optional[str]:
        return self.state.directory
    
    @property
    def catalog(self) -> Tuple[BackupEntry, ...]:
        return self.state.entries
    
    @property
    def is_watching(self) -> bool:
        with self._watcher_lock:
            return self._watcher is not None and self._watcher.is_running
    
    @property
    def watcher(self) -> Optional[SaveWatcher]:
        return self._watcher
    
    def add_listener(self, on_backup: Optional[Callable[[BackupEntry], None]] = None,
                     on_error: Optional[Callable[[ArchiverError], None]] = None) -> None:
        """Register callbacks for new backups and watcher errors.
        
        Callbacks run on the watcher thread after the catalog is updated.
        """
        if on_backup is not None:
            self._backup_listeners.append(on_backup)
        if on_error is not None:
            self._error_listeners.append(on_error)
    
    def discover_save_dirs(self) -> List[str]:
        """Find candidate save directories.
        
        Raises:
            DiscoveryError: If no save directory can be found.
        """
        self.save_dirs = self.locator.discover()
        return self.save_dirs
    
    def select_directory(self, directory: str) -> Tuple[BackupEntry, ...]:
        """Switch to ``directory`` and rebuild its catalog.
        
        A running watcher is replaced by one watching the new directory.
        The previous selection stays in place if the catalog cannot be built.
        
        Raises:
            CatalogError: If the directory cannot be listed.
            BackupNameError: If a backup filename cannot be decoded.
        """
        with self._watcher_lock:
            was_watching = self._watcher is not None and self._watcher.is_running
            entries = self.catalog_builder.discover(directory)
            
            if was_watching:
                self._watcher.stop()
                self._watcher = None
            
            self.state.replace(directory, entries)
            self.logger.info(f"Selected save directory {directory} ({len(entries)} backups)")
            
            if was_watching:
                self._start_watcher(directory)
        
        return self.state.entries
    
    def start_watching(self, high_water_mark_ns: Optional[int] = None) -> SaveWatcher:
        """Start watching the selected directory.
        
        Raises:
            RuntimeError: If no directory has been selected.
        """
        directory = self.state.directory
        if directory is None:
            raise RuntimeError("No save directory selected")
        
        with self._watcher_lock:
            if self._watcher is not None and self._watcher.is_running:
                return self._watcher
            return self._start_watcher(directory, high_water_mark_ns)
    
    def stop_watching(self, timeout: Optional[float] = None) -> None:
        """Stop the watcher, if any."""
        with self._watcher_lock:
            if self._watcher is not None:
                self._watcher.stop(timeout)
                self._watcher = None
    
    def restore(self, backup_name: str) -> RestoreOutcome:
        """Restore ``backup_name`` into the selected directory.
        
        Raises:
            RuntimeError: If no directory has been selected.
        """
        directory = self.state.directory
        if directory is None:
            raise RuntimeError("No save directory selected")
        return self.restorer.restore(directory, backup_name)
    
    def _start_watcher(self, directory: str, high_water_mark_ns: Optional[int] = None) -> SaveWatcher:
        self._watcher = SaveWatcher(
            directory,
            self.save_spec,
            poll_interval=self.poll_interval,
            high_water_mark_ns=high_water_mark_ns,
            on_backup=self._handle_backup,
            on_error=self._handle_error,
            lock=self._archive_lock
        )
        self._watcher.start()
        return self._watcher
    
    def _handle_backup(self, directory: str, entry: BackupEntry) -> None:
        if not self.state.add(directory, entry):
            self.logger.debug(f"Ignoring backup {entry.filename} for deselected directory {directory}")
            return
        for listener in self._backup_listeners:
            listener(entry)
    
    def _handle_error(self, directory: str, error: ArchiverError) -> None:
        if isinstance(error, WatchReadError):
            self.logger.error(f"Monitoring of {directory} stopped: {error}")
        for listener in self._error_listeners:
            listener(error)
