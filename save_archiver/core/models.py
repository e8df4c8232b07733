"""Data models for save archiving."""

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .errors import RestoreAborted, RestoreTimestampWarning
from ..utils.formatters import format_backup_label, timestamp_to_datetime


@dataclass(frozen=True)
class SaveFileSpec:
    """Naming of the live save and its backups."""
    base_name: str
    extension: str

    @property
    def primary_name(self) -> str:
        return self.base_name + self.extension

    def primary_path(self, directory: str) -> str:
        return os.path.join(directory, self.primary_name)


@dataclass(frozen=True)
class BackupEntry:
    """An archived copy of the live save, identified by its filename."""
    filename: str
    timestamp: int
    label: str

    @classmethod
    def from_timestamp(cls, filename: str, timestamp: int) -> 'BackupEntry':
        return cls(filename=filename, timestamp=timestamp, label=format_backup_label(timestamp))

    @property
    def modified_time(self) -> datetime:
        return timestamp_to_datetime(self.timestamp)


class RestoreStage(Enum):
    """Steps of a restore, in execution order."""
    VALIDATE_NAME = (0, "backup name validation")
    RENAME_LIVE = (1, "renaming the live save")
    READ_BACKUP_TIME = (2, "reading the backup's modification time")
    COPY_BACKUP = (3, "copying the backup over the live save")
    SET_TIMES = (4, "setting the restored save's timestamps")

    def __init__(self, number: int, description: str):
        self.number = number
        self.description = description


@dataclass
class RestoreOutcome:
    """Result of a single restore transaction."""
    backup_name: str
    success: bool
    label: Optional[str] = None
    stage: Optional[RestoreStage] = None
    error: Optional[RestoreAborted] = None
    warnings: List[RestoreTimestampWarning] = field(default_factory=list)

    @property
    def message(self) -> str:
        if not self.success:
            return str(self.error)
        return f"Backup '{self.label}' restored"
