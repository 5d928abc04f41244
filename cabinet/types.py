"""
Core types for the cabinet resolver.

This module provides the shared dataclasses, enums and protocols used by the
dispatcher, the extension registry and the lookup delegates.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol, Union


class ModuleType(str, Enum):
    """Module system a JavaScript source file is written against."""
    AMD = "amd"
    COMMONJS = "commonjs"
    ES6 = "es6"
    WEBPACK = "webpack"


class FileSystem(Protocol):
    """Minimal filesystem surface the lookups need."""

    def isfile(self, path: str) -> bool:
        ...

    def isdir(self, path: str) -> bool:
        ...

    def read_text(self, path: str) -> str:
        ...


class OSFileSystem:
    """FileSystem backed by the real disk."""

    def isfile(self, path: str) -> bool:
        return os.path.isfile(path)

    def isdir(self, path: str) -> bool:
        return os.path.isdir(path)

    def read_text(self, path: str) -> str:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()


class MemoryFileSystem:
    """
    FileSystem over an in-memory mapping of absolute file paths to contents.

    Directories are implied by the files they contain, so
    ``MemoryFileSystem({"/proj/src/foo.js": ""})`` has the directories
    ``/proj/src``, ``/proj`` and ``/``.
    """

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self._files: Dict[str, str] = {}
        for path, contents in (files or {}).items():
            self.write(path, contents)

    def write(self, path: str, contents: str = "") -> None:
        self._files[os.path.normpath(path)] = contents

    def isfile(self, path: str) -> bool:
        return os.path.normpath(path) in self._files

    def isdir(self, path: str) -> bool:
        prefix = os.path.normpath(path).rstrip(os.sep) + os.sep
        return any(name.startswith(prefix) for name in self._files)

    def read_text(self, path: str) -> str:
        try:
            return self._files[os.path.normpath(path)]
        except KeyError:
            raise FileNotFoundError(path) from None


DEFAULT_FILE_SYSTEM = OSFileSystem()


@dataclass
class ResolutionRequest:
    """
    Parameters of one resolution attempt.

    Attributes:
        partial: Dependency specifier as written in the source (may be empty)
        filename: Path of the file containing the dependency
        directory: Root used for non-relative lookups
        config: AMD (RequireJS) config object or path to one
        config_path: Location of the AMD config when ``config`` is an object
        webpack_config: Path to a bundler (webpack) config file
        ts_config: TypeScript config object or path to a tsconfig file
        ts_config_path: Location of the tsconfig when ``ts_config`` is an object
        node_modules_config: Overrides for node_modules lookups, e.g. ``{"entry": "module"}``
        ast: Pre-parsed tree-sitter tree of ``filename``
        file_system: Alternate filesystem implementation
        no_type_definitions: Prefer compiled ``.js`` over ``.d.ts`` files
    """
    partial: Optional[str]
    filename: str
    directory: str = ""
    config: Union[Dict[str, Any], str, None] = None
    config_path: Optional[str] = None
    webpack_config: Optional[str] = None
    ts_config: Union[Dict[str, Any], str, None] = None
    ts_config_path: Optional[str] = None
    node_modules_config: Optional[Dict[str, Any]] = None
    ast: Any = None
    file_system: Optional[FileSystem] = field(default=None, repr=False)
    no_type_definitions: bool = False

    @property
    def extension(self) -> str:
        """Suffix of ``filename`` starting at the last period of its basename."""
        return os.path.splitext(self.filename)[1]

    @property
    def fs(self) -> FileSystem:
        return self.file_system or DEFAULT_FILE_SYSTEM

    @property
    def entry(self) -> Optional[str]:
        if self.node_modules_config:
            return self.node_modules_config.get('entry')
        return None


# A resolver turns a request into an absolute path, or '' when unresolved.
Resolver = Callable[[ResolutionRequest], str]
