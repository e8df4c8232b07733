"""Restoring a backup into the live save position."""

import logging
import os
import threading
from typing import Optional

from .codec import decode_backup_name
from .errors import BackupNameError, CopyError, RestoreAborted, RestoreTimestampWarning
from .fileops import copy_file
from .models import RestoreOutcome, RestoreStage, SaveFileSpec
from ..utils.formatters import format_backup_label

ORIGINAL_SUFFIX = ".orig"


class RestoreTransaction:
    """Swaps a chosen backup in as the live save.
    
    The displaced live save is kept as ``<primary>.orig``. There is no
    rollback: if reading or copying the backup fails after the rename, the
    live save stays missing and ``.orig`` holds its last content.
    """
    
    def __init__(self, save_spec: SaveFileSpec, lock: Optional[threading.RLock] = None):
        self.save_spec = save_spec
        self.logger = logging.getLogger(__name__)
        self._lock = lock or threading.RLock()
    
    def restore(self, directory: str, backup_name: str) -> RestoreOutcome:
        """Make ``backup_name`` the live save of ``directory``.
        
        Args:
            directory: Save directory holding both the live save and the backup.
            backup_name: Filename of the backup to restore.
            
        Returns:
            Outcome of the transaction. File-system failures are reported
            through the outcome and never raised.
        """
        with self._lock:
            return self._restore(directory, backup_name)
    
    def _restore(self, directory: str, backup_name: str) -> RestoreOutcome:
        try:
            label = self._validate_name(backup_name)
        except BackupNameError as e:
            return self._abort(RestoreStage.VALIDATE_NAME, backup_name, e)
        
        primary = self.save_spec.primary_path(directory)
        original = primary + ORIGINAL_SUFFIX
        backup_path = os.path.join(directory, backup_name)
        
        try:
            os.rename(primary, original)
        except OSError as e:
            return self._abort(RestoreStage.RENAME_LIVE, backup_name, e)
        
        try:
            backup_stat = os.stat(backup_path)
        except OSError as e:
            return self._abort(RestoreStage.READ_BACKUP_TIME, backup_name, e)
        
        try:
            copy_file(backup_path, primary)
        except CopyError as e:
            return self._abort(RestoreStage.COPY_BACKUP, backup_name, e)
        
        outcome = RestoreOutcome(backup_name=backup_name, success=True, label=label)
        
        mtime_ns = backup_stat.st_mtime_ns
        try:
            os.utime(primary, ns=(mtime_ns, mtime_ns))
        except OSError as e:
            warning = RestoreTimestampWarning(primary, e)
            self.logger.warning(str(warning))
            outcome.warnings.append(warning)
        
        self.logger.info(f"Restored {backup_name} to {primary}, previous save kept as {original}")
        return outcome
    
    def _validate_name(self, backup_name: str) -> str:
        """Check ``backup_name`` is a plain backup filename and return its label."""
        if os.path.basename(backup_name) != backup_name or backup_name in (os.curdir, os.pardir):
            raise BackupNameError(f"backup name must be a plain filename: {backup_name}", backup_name)
        timestamp = decode_backup_name(backup_name, self.save_spec.extension)
        return format_backup_label(timestamp)
    
    def _abort(self, stage: RestoreStage, backup_name: str, cause: Exception) -> RestoreOutcome:
        error = RestoreAborted(stage, backup_name, cause)
        self.logger.error(str(error))
        return RestoreOutcome(backup_name=backup_name, success=False, stage=stage, error=error)
