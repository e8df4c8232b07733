"""Formatting utilities for backup listings."""

from datetime import datetime, timedelta, timezone
from typing import Optional


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _local_datetime(timestamp: int) -> Optional[datetime]:
    """Return the local datetime for ``timestamp``, or None if it has none."""
    try:
        return datetime.fromtimestamp(timestamp)
    except (OverflowError, OSError, ValueError):
        pass
    # Some platforms reject negative or very large values
    try:
        return (_EPOCH + timedelta(seconds=timestamp)).replace(tzinfo=None)
    except OverflowError:
        return None


def timestamp_to_datetime(timestamp: int) -> datetime:
    """Convert epoch seconds to a naive local datetime.
    
    Args:
        timestamp: Whole seconds since the Unix epoch, may be negative.
        
    Returns:
        Local datetime for the timestamp, clamped to the range datetime
        can represent.
    """
    dt = _local_datetime(timestamp)
    if dt is None:
        return datetime.max if timestamp > 0 else datetime.min
    return dt


def format_backup_label(timestamp: int) -> str:
    """Format a backup timestamp for display, e.g. ``Nov 14 22:13:20``.
    
    The day is space-padded to two characters so labels line up in lists.
    
    Args:
        timestamp: Whole seconds since the Unix epoch.
        
    Returns:
        Display label string.
    """
    dt = _local_datetime(timestamp)
    if dt is None:
        return f"{timestamp}s after epoch"
    return f"{dt.strftime('%b')} {dt.day:2d} {dt.strftime('%H:%M:%S')}"


def format_file_size(size_bytes: int) -> str:
    """Format file size in human readable format.
    
    Args:
        size_bytes: Size in bytes.
        
    Returns:
        Human readable size string.
    """
    if size_bytes < 1024:
        return f"{size_bytes}B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes // 1024}KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes // (1024 * 1024)}MB"
    else:
        return f"{size_bytes // (1024 * 1024 * 1024)}GB"

