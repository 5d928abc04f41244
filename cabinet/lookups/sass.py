"""
Sass/SCSS lookup, also used for Less since their imports share the same shape.

Handles:
- Extensionless imports ("bar" -> bar.scss), preferring the importing file's extension
- Cross-extension imports ("bar" from a .sass file -> bar.scss)
- Underscore partials ("bar" -> _bar.scss)
- Directory imports ("theme" -> theme/_index.scss)
- "~pkg/..." imports from node_modules
"""

import logging
import os
from typing import List, Optional

from ..paths import has_extension, strip_loader
from ..types import DEFAULT_FILE_SYSTEM, FileSystem

logger = logging.getLogger(__name__)

STYLE_EXTENSIONS = ('.scss', '.sass', '.less', '.css')


def sass_lookup(
    partial: Optional[str],
    filename: str,
    directory: str,
    file_system: Optional[FileSystem] = None,
) -> str:
    """
    Resolve a stylesheet import to an absolute path.

    Args:
        partial: Import as written, e.g. "bar", "_bar.scss", "~pkg/theme"
        filename: Stylesheet containing the import
        directory: Root directory searched after the stylesheet's own directory
        file_system: Alternate filesystem implementation

    Returns:
        Absolute path of the resolved stylesheet, or '' if not found
    """
    if not partial:
        return ''

    fs = file_system or DEFAULT_FILE_SYSTEM
    partial = strip_loader(partial)

    if partial.startswith('~'):
        search_dirs = [os.path.join(os.path.abspath(directory or '.'), 'node_modules')]
        partial = partial[1:]
    else:
        search_dirs = [os.path.dirname(os.path.abspath(filename))]
        if directory:
            search_dirs.append(os.path.abspath(directory))

    for search_dir in search_dirs:
        for candidate in _candidates(os.path.join(search_dir, partial), filename):
            if fs.isfile(candidate):
                logger.debug(f"resolved {partial} to {candidate}")
                return candidate

    logger.debug(f"could not resolve stylesheet {partial}")
    return ''


def _candidates(target: str, filename: str) -> List[str]:
    target = os.path.normpath(target)
    dirname, basename = os.path.split(target)

    if has_extension(basename):
        return [target, os.path.join(dirname, '_' + basename)]

    own_ext = os.path.splitext(filename)[1]
    extensions = [own_ext] if own_ext else []
    extensions += [ext for ext in STYLE_EXTENSIONS if ext != own_ext]

    candidates = []
    for ext in extensions:
        candidates.append(target + ext)
        candidates.append(os.path.join(dirname, '_' + basename + ext))
    for ext in extensions:
        candidates.append(os.path.join(target, 'index' + ext))
        candidates.append(os.path.join(target, '_index' + ext))
    return candidates
