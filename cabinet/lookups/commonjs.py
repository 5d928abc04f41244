"""
CommonJS/Node.js lookup.

Resolves require()-style specifiers the way Node does for static analysis:
- Relative specifiers about the referencing file's directory
- Absolute specifiers as-is
- Bare specifiers through node_modules directories, starting at the root
  directory and walking up, then directly under the root directory
- Directories through package.json (with a configurable entry field) and
  index files

Node core modules have no file on disk and resolve to ''.
"""

import json
import logging
import os
from typing import List, Optional

from ..paths import ancestors, is_relative, probe_file, probe_index, strip_loader
from ..types import DEFAULT_FILE_SYSTEM, FileSystem

logger = logging.getLogger(__name__)

EXTENSIONS = ('.js', '.jsx')

NODE_BUILTIN_MODULES = {
    'assert', 'async_hooks', 'buffer', 'child_process', 'cluster', 'console',
    'constants', 'crypto', 'dgram', 'diagnostics_channel', 'dns', 'domain',
    'events', 'fs', 'http', 'http2', 'https', 'inspector', 'module', 'net',
    'os', 'path', 'perf_hooks', 'process', 'punycode', 'querystring',
    'readline', 'repl', 'stream', 'string_decoder', 'sys', 'timers', 'tls',
    'trace_events', 'tty', 'url', 'util', 'v8', 'vm', 'wasi',
    'worker_threads', 'zlib',
    'fs/promises', 'stream/promises', 'timers/promises', 'dns/promises',
    'readline/promises', 'util/types', 'stream/web',
}


def is_builtin(partial: str) -> bool:
    """Check if a specifier names a Node.js core module."""
    return partial.startswith('node:') or partial in NODE_BUILTIN_MODULES


def commonjs_lookup(
    partial: Optional[str],
    filename: str,
    directory: str,
    entry: Optional[str] = None,
    file_system: Optional[FileSystem] = None,
) -> str:
    """
    Resolve a CommonJS dependency to an absolute path.

    Args:
        partial: Dependency specifier, e.g. "./bar", "lodash", "../"
        filename: File containing the dependency
        directory: Root directory for non-relative lookups
        entry: package.json field used instead of "main" when present
        file_system: Alternate filesystem implementation

    Returns:
        Absolute path of the resolved file, or '' if it cannot be resolved
    """
    if not partial:
        return ''

    fs = file_system or DEFAULT_FILE_SYSTEM
    partial = strip_loader(partial)

    if is_builtin(partial):
        logger.debug(f"{partial} is a core module")
        return ''

    directory = os.path.abspath(directory or os.path.dirname(filename))

    if is_relative(partial) or os.path.isabs(partial):
        if is_relative(partial):
            target = os.path.join(os.path.dirname(os.path.abspath(filename)), partial)
        else:
            target = partial
        target = os.path.normpath(target)
        result = _load_as_file(fs, target) or _load_as_directory(fs, target, entry)
    else:
        result = None
        for module_dir in _module_directories(directory):
            target = os.path.join(module_dir, partial)
            result = _load_as_file(fs, target) or _load_as_directory(fs, target, entry)
            if result:
                break

    if not result:
        logger.debug(f"could not resolve {partial}")
        return ''

    logger.debug(f"resolved path: {result}")
    return result


def _module_directories(directory: str) -> List[str]:
    """Directories searched for bare specifiers, nearest first."""
    dirs = []
    for current in ancestors(directory):
        if os.path.basename(current) == 'node_modules':
            continue
        dirs.append(os.path.join(current, 'node_modules'))
        if current == directory:
            # The root directory itself doubles as a module directory
            dirs.append(directory)
    return dirs


def _load_as_file(fs: FileSystem, target: str) -> Optional[str]:
    return probe_file(fs, target, EXTENSIONS)


def _load_as_directory(fs: FileSystem, target: str, entry: Optional[str]) -> Optional[str]:
    if not fs.isdir(target):
        return None

    package_json = _read_package_json(fs, os.path.join(target, 'package.json'))
    if package_json:
        main = package_json.get(entry) if entry else None
        if not isinstance(main, str) or not main:
            main = package_json.get('main')
        if isinstance(main, str) and main:
            main_path = os.path.normpath(os.path.join(target, main))
            result = _load_as_file(fs, main_path) or probe_index(fs, main_path, EXTENSIONS)
            if result:
                return result

    return probe_index(fs, target, EXTENSIONS)


def _read_package_json(fs: FileSystem, path: str) -> dict:
    if not fs.isfile(path):
        return {}
    try:
        data = json.loads(fs.read_text(path))
    except (OSError, ValueError) as e:
        logger.debug(f"ignoring unreadable {path}: {e}")
        return {}
    return data if isinstance(data, dict) else {}
