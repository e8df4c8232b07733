"""Backup filename encoding.

A backup's filename records when it was taken::

    <base>-<unix seconds><extension>.bak      e.g. DDDA-1700000000.sav.bak

so the archive needs no index besides the directory listing.
"""

import re

from .errors import InvalidBackupName, InvalidTimestamp

BACKUP_SUFFIX = ".bak"
SEPARATOR = "-"

_INTEGER = re.compile(r'[+-]?[0-9]+')

# Timestamps are signed 64-bit seconds
MIN_TIMESTAMP = -(2 ** 63)
MAX_TIMESTAMP = 2 ** 63 - 1


def backup_suffix(extension: str) -> str:
    """Return the trailing part shared by every backup, e.g. ``.sav.bak``."""
    return extension + BACKUP_SUFFIX


def encode_backup_name(base: str, extension: str, timestamp: int) -> str:
    """Build the backup filename for a save taken at ``timestamp``.
    
    Args:
        base: Save base name, must not contain ``-``.
        extension: Save extension including the leading dot.
        timestamp: Whole seconds since the Unix epoch.
        
    Returns:
        Backup filename.
        
    Raises:
        ValueError: If ``base`` contains the separator.
    """
    if SEPARATOR in base:
        raise ValueError(f"Backup base name cannot contain '{SEPARATOR}': {base}")
    return f"{base}{SEPARATOR}{int(timestamp)}{backup_suffix(extension)}"


def decode_backup_name(filename: str, extension: str) -> int:
    """Recover the timestamp encoded in a backup filename.
    
    The stem is split at its first ``-``. The remainder must be a base-10
    integer whose only permitted ``-`` is a leading sign.
    
    Args:
        filename: Backup filename (no directory part).
        extension: Save extension including the leading dot.
        
    Returns:
        Whole seconds since the Unix epoch.
        
    Raises:
        InvalidBackupName: If the suffix is missing or the stem does not
            have exactly a base and a timestamp segment.
        InvalidTimestamp: If the timestamp segment is not an integer or
            does not fit in 64 bits.
    """
    suffix = backup_suffix(extension)
    if not filename.endswith(suffix):
        raise InvalidBackupName(filename)

    stem = filename[:-len(suffix)]
    base, separator, segment = stem.partition(SEPARATOR)
    if not separator or SEPARATOR in segment[1:]:
        raise InvalidBackupName(filename)

    if not _INTEGER.fullmatch(segment):
        raise InvalidTimestamp(filename, segment)

    # Bounded before int() so huge digit runs are never converted
    if len(segment.lstrip("+-").lstrip("0")) > 19:
        raise InvalidTimestamp(filename, segment)
    timestamp = int(segment)
    if not MIN_TIMESTAMP <= timestamp <= MAX_TIMESTAMP:
        raise InvalidTimestamp(filename, segment)
    return timestamp
