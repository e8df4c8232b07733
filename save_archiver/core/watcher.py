"""Polling watcher that archives the live save whenever it changes."""

import logging
import os
import threading
import time
from enum import Enum
from typing import Callable, Optional

from .codec import encode_backup_name
from .errors import ArchiverError, CopyError, WatchReadError
from .fileops import copy_file
from .models import BackupEntry, SaveFileSpec

NANOSECONDS = 1_000_000_000

BackupCallback = Callable[[str, BackupEntry], None]
ErrorCallback = Callable[[str, ArchiverError], None]


class WatcherState(Enum):
    IDLE = "idle"
    COMPARING = "comparing"
    STOPPED = "stopped"


class SaveWatcher:
    """Backs up the live save each time its modification time advances.
    
    The watcher keeps a high-water mark of the newest modification time it
    has acted on. Times are compared in whole seconds, the resolution of
    backup names, so several writes within one second give one backup and
    an existing backup is never rewritten. A failed stat of the live save
    stops the watcher for good; the owner has to create a new one to
    resume monitoring.
    """
    
    def __init__(self, directory: str, save_spec: SaveFileSpec, poll_interval: float = 5.0,
                 high_water_mark_ns: Optional[int] = None,
                 on_backup: Optional[BackupCallback] = None,
                 on_error: Optional[ErrorCallback] = None,
                 lock: Optional[threading.RLock] = None):
        """Initialize save watcher.
        
        Args:
            directory: Directory holding the live save.
            save_spec: Naming of the live save and its backups.
            poll_interval: Seconds between modification time checks.
            high_water_mark_ns: Initial high-water mark in nanoseconds since
                the epoch. Defaults to the current time.
            on_backup: Called with the directory and the new entry.
            on_error: Called with the directory and the error.
            lock: Held for each check-and-copy cycle.
        """
        self.directory = directory
        self.save_spec = save_spec
        self.poll_interval = poll_interval
        self.live_path = save_spec.primary_path(directory)
        self.high_water_mark_ns = time.time_ns() if high_water_mark_ns is None else high_water_mark_ns
        self.on_backup = on_backup
        self.on_error = on_error
        self.state = WatcherState.IDLE
        self.error: Optional[WatchReadError] = None
        self.logger = logging.getLogger(__name__)
        
        self._lock = lock or threading.RLock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
    
    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
    
    def start(self) -> None:
        """Start polling in a background thread."""
        if self.state is WatcherState.STOPPED:
            raise RuntimeError("A stopped watcher cannot be restarted")
        if self.is_running:
            return
        
        self.logger.info(f"Monitoring {self.live_path} every {self.poll_interval}s")
        self._thread = threading.Thread(
            target=self.run, name=f"save-watcher:{self.directory}", daemon=True
        )
        self._thread.start()
    
    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the poll loop to exit and wait for it."""
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        if self.state is not WatcherState.STOPPED:
            self.state = WatcherState.STOPPED
            self.logger.info(f"Stopped monitoring {self.live_path}")
    
    def run(self) -> None:
        """Poll until stopped or until the live save cannot be read."""
        while not self._stop_event.wait(self.poll_interval):
            self.poll_once()
            if self.state is WatcherState.STOPPED:
                break
    
    def poll_once(self) -> Optional[BackupEntry]:
        """Run one comparison cycle.
        
        Returns:
            The new backup entry, or None if no backup was taken.
        """
        if self.state is WatcherState.STOPPED:
            return None
        
        with self._lock:
            self.state = WatcherState.COMPARING
            try:
                mtime_ns = os.stat(self.live_path).st_mtime_ns
            except OSError as e:
                self._fail(WatchReadError(self.live_path, e))
                return None
            
            try:
                if mtime_ns // NANOSECONDS <= self.high_water_mark_ns // NANOSECONDS:
                    self.logger.debug(f"{self.live_path} unchanged ({mtime_ns} vs {self.high_water_mark_ns})")
                    return None
                
                self.high_water_mark_ns = mtime_ns
                return self._back_up(mtime_ns)
            finally:
                if self.state is WatcherState.COMPARING:
                    self.state = WatcherState.IDLE
    
    def _back_up(self, mtime_ns: int) -> Optional[BackupEntry]:
        """Copy the live save to a backup named after ``mtime_ns``."""
        timestamp = mtime_ns // NANOSECONDS
        name = encode_backup_name(self.save_spec.base_name, self.save_spec.extension, timestamp)
        backup_path = os.path.join(self.directory, name)
        
        self.logger.info(f"File changed, backing up to {name}")
        try:
            copy_file(self.live_path, backup_path, overwrite=False)
        except CopyError as e:
            self.logger.error(f"Could not back up file: {e}")
            self._notify_error(e)
            return None
        
        entry = BackupEntry.from_timestamp(name, timestamp)
        if self.on_backup is not None:
            self.on_backup(self.directory, entry)
        return entry
    
    def _fail(self, error: WatchReadError) -> None:
        self.logger.error(str(error))
        self.error = error
        self.state = WatcherState.STOPPED
        self._stop_event.set()
        self._notify_error(error)
    
    def _notify_error(self, error: ArchiverError) -> None:
        if self.on_error is not None:
            self.on_error(self.directory, error)
