"""Exception types for save archiving."""

from typing import Optional


class ArchiverError(Exception):
    """Base class for all save archiver errors."""


class DiscoveryError(ArchiverError):
    """Raised when candidate save directories cannot be enumerated."""


class CatalogError(ArchiverError):
    """Raised when a backup directory cannot be listed."""

    def __init__(self, directory: str, cause: Exception):
        super().__init__(f"Could not list backups in {directory}: {cause}")
        self.directory = directory
        self.cause = cause


class BackupNameError(ArchiverError, ValueError):
    """Base class for backup filenames that cannot be decoded."""

    def __init__(self, message: str, filename: str):
        super().__init__(message)
        self.filename = filename


class InvalidBackupName(BackupNameError):
    """The filename does not follow the base-timestamp layout."""

    def __init__(self, filename: str):
        super().__init__(f"invalid backup name: {filename}", filename)


class InvalidTimestamp(BackupNameError):
    """The timestamp segment of a backup filename is not an integer."""

    def __init__(self, filename: str, segment: str):
        super().__init__(f"invalid backup timestamp: {segment} (in {filename})", filename)
        self.segment = segment


class WatchReadError(ArchiverError):
    """Raised when the live save cannot be stat'ed while polling."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Could not check file time of {path}: {cause}")
        self.path = path
        self.cause = cause


class CopyError(ArchiverError):
    """Raised when file contents cannot be copied."""

    def __init__(self, source: str, destination: str, cause: Exception):
        super().__init__(f"Could not copy {source} to {destination}: {cause}")
        self.source = source
        self.destination = destination
        self.cause = cause


class RestoreAborted(ArchiverError):
    """A restore failed before the live save was fully recreated."""

    def __init__(self, stage, backup_name: str, cause: Optional[Exception] = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Restore of '{backup_name}' aborted during {stage.description}{detail}")
        self.stage = stage
        self.backup_name = backup_name
        self.cause = cause


class RestoreTimestampWarning(ArchiverError):
    """The restored save could not be given the backup's timestamps."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Restored {path} but could not set its timestamps: {cause}")
        self.path = path
        self.cause = cause
