"""
Stylus lookup.
"""

import logging
import os
from typing import Optional

from ..paths import has_extension, strip_loader
from ..types import DEFAULT_FILE_SYSTEM, FileSystem

logger = logging.getLogger(__name__)


def stylus_lookup(
    partial: Optional[str],
    filename: str,
    directory: str,
    file_system: Optional[FileSystem] = None,
) -> str:
    """Resolve a Stylus @import/@require to an absolute path, or ''."""
    if not partial:
        return ''

    fs = file_system or DEFAULT_FILE_SYSTEM
    partial = strip_loader(partial)

    search_dirs = [os.path.dirname(os.path.abspath(filename))]
    if directory:
        search_dirs.append(os.path.abspath(directory))

    for search_dir in search_dirs:
        target = os.path.normpath(os.path.join(search_dir, partial))
        if has_extension(partial):
            candidates = [target]
        else:
            candidates = [target + '.styl', os.path.join(target, 'index.styl')]

        for candidate in candidates:
            if fs.isfile(candidate):
                return candidate

    logger.debug(f"could not resolve stylus import {partial}")
    return ''
