"""
Path-shape helpers shared by the lookups.
"""

import os
from typing import Iterable, Optional

from .types import FileSystem

# Extensions probed for script specifiers that omit one.
SCRIPT_EXTENSIONS = ('.js', '.jsx', '.ts', '.tsx')


def strip_loader(partial: str) -> str:
    """
    Drop a bundler loader prefix from a specifier.

    ``"css!style!./foo.css"`` becomes ``"./foo.css"``; specifiers without a
    ``!`` are returned unchanged.
    """
    if '!' not in partial:
        return partial
    return partial[partial.rindex('!') + 1:]


def is_relative(partial: str) -> bool:
    """True for ``.``/``..`` and specifiers starting with ``./`` or ``../``."""
    return (
        partial in ('.', '..')
        or partial.startswith('./')
        or partial.startswith('../')
    )


def has_extension(partial: str) -> bool:
    return bool(os.path.splitext(os.path.basename(partial))[1])


def lookup_base(partial: str, filename: str, directory: str) -> str:
    """
    Compute the filesystem location a specifier points at, before probing.

    Relative specifiers are taken about the referencing file's directory,
    absolute ones as-is, everything else about ``directory``.
    """
    if is_relative(partial):
        return os.path.normpath(os.path.join(os.path.dirname(os.path.abspath(filename)), partial))
    if os.path.isabs(partial):
        return os.path.normpath(partial)
    return os.path.normpath(os.path.join(os.path.abspath(directory or '.'), partial))


def probe_file(fs: FileSystem, base: str, extensions: Iterable[str]) -> Optional[str]:
    """Return ``base`` if it is a file, else the first existing ``base + ext``."""
    if fs.isfile(base):
        return base
    for ext in extensions:
        candidate = base + ext
        if fs.isfile(candidate):
            return candidate
    return None


def probe_index(fs: FileSystem, dir_path: str, extensions: Iterable[str], index_name: str = 'index') -> Optional[str]:
    """Return the first existing ``dir_path/index + ext``."""
    if not fs.isdir(dir_path):
        return None
    for ext in extensions:
        candidate = os.path.join(dir_path, index_name + ext)
        if fs.isfile(candidate):
            return candidate
    return None


def ancestors(start: str):
    """Yield ``start`` and each of its parent directories up to the root."""
    current = os.path.abspath(start)
    while True:
        yield current
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
