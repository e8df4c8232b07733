"""Utility modules for save archiving."""

from .formatters import format_backup_label, format_file_size, timestamp_to_datetime

__all__ = ["format_backup_label", "format_file_size", "timestamp_to_datetime"]
