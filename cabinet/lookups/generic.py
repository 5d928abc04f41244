"""
Generic lookup used for file extensions without a dedicated resolver.
"""

import logging
import os
from typing import Optional

from ..paths import SCRIPT_EXTENSIONS, has_extension, lookup_base, probe_file, strip_loader
from ..types import DEFAULT_FILE_SYSTEM, FileSystem

logger = logging.getLogger(__name__)


def generic_lookup(
    partial: Optional[str],
    filename: str,
    directory: str,
    file_system: Optional[FileSystem] = None,
) -> str:
    """
    Resolve a specifier by plain path probing.

    The specifier is located about the referencing file's directory when it is
    relative and about ``directory`` otherwise. An existing file wins, then the
    first existing file with one of the script extensions appended. Failing
    that, an extensionless specifier is given the referencing file's own
    extension and returned without checking the disk, so callers must not
    assume the result exists.
    """
    if not partial:
        return ''

    fs = file_system or DEFAULT_FILE_SYSTEM
    partial = strip_loader(partial)
    base = lookup_base(partial, filename, directory)

    found = probe_file(fs, base, SCRIPT_EXTENSIONS)
    if found:
        return found

    if has_extension(partial):
        logger.debug(f"generic lookup found nothing for {partial}")
        return base

    ext = os.path.splitext(filename)[1]
    logger.debug(f"appending {ext or 'no extension'} to {base}")
    return base + ext
