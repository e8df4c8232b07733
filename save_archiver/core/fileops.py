"""File content helpers shared by backup and restore."""

import logging
import shutil

from .errors import CopyError

logger = logging.getLogger(__name__)


def copy_file(source: str, destination: str, overwrite: bool = True) -> None:
    """Copy the full contents of ``source`` to ``destination``.
    
    Only contents are copied; the destination gets fresh timestamps.
    
    Args:
        source: File to read.
        destination: File to write.
        overwrite: If False, an existing ``destination`` is left untouched
            and the copy fails.
    
    Raises:
        CopyError: If either file cannot be read or written, or if
            ``destination`` exists and ``overwrite`` is False.
    """
    try:
        if overwrite:
            shutil.copyfile(source, destination)
        else:
            with open(source, 'rb') as src, open(destination, 'xb') as dst:
                shutil.copyfileobj(src, dst)
    except OSError as e:
        raise CopyError(source, destination, e) from e
    logger.debug(f"Copied {source} to {destination}")
