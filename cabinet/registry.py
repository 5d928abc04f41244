"""
Registry mapping file extensions to resolvers.

Built-in extensions map to a ``Strategy`` that the dispatcher expands using
its delegates; custom extensions map to plain resolver callables taking a
``ResolutionRequest``. A process-wide registry backs the module-level
convenience functions; tests and embedders can build their own.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from .types import Resolver


class Strategy(str, Enum):
    """Built-in resolution strategies."""
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    SASS = "sass"
    STYLUS = "stylus"


Entry = Union[Strategy, Resolver]

DEFAULT_LOOKUPS: Tuple[Tuple[str, Strategy], ...] = (
    ('.js', Strategy.JAVASCRIPT),
    ('.jsx', Strategy.JAVASCRIPT),
    ('.ts', Strategy.TYPESCRIPT),
    ('.tsx', Strategy.TYPESCRIPT),
    ('.scss', Strategy.SASS),
    ('.sass', Strategy.SASS),
    ('.styl', Strategy.STYLUS),
    # Less and Sass imports are very similar
    ('.less', Strategy.SASS),
)


class ExtensionRegistry:
    """Extension -> resolver table with a duplicate-free, ordered key list."""

    def __init__(self, defaults: Tuple[Tuple[str, Entry], ...] = ()):
        self._defaults: Dict[str, Entry] = dict(defaults)
        self._lookups: Dict[str, Entry] = {}
        self._extensions: List[str] = []
        for extension, entry in defaults:
            self.register(extension, entry)

    @classmethod
    def with_defaults(cls) -> 'ExtensionRegistry':
        """Registry pre-populated with the built-in script and stylesheet lookups."""
        return cls(DEFAULT_LOOKUPS)

    def register(self, extension: str, resolver: Entry) -> None:
        """
        Use ``resolver`` for files ending in ``extension``.

        Registering an extension again replaces its resolver; the extension is
        listed once no matter how often it is registered.
        """
        self._lookups[extension] = resolver
        if extension not in self._extensions:
            self._extensions.append(extension)

    def unregister(self, extension: str) -> None:
        """Restore the built-in resolver for ``extension``, or forget a custom one."""
        if extension in self._defaults:
            self._lookups[extension] = self._defaults[extension]
            return
        self._lookups.pop(extension, None)
        if extension in self._extensions:
            self._extensions.remove(extension)

    def get(self, extension: str) -> Optional[Entry]:
        """Resolver for ``extension``; None means the generic lookup applies."""
        return self._lookups.get(extension)

    def supported_extensions(self) -> List[str]:
        """Registered extensions in first-registration order (a copy)."""
        return list(self._extensions)

    def __contains__(self, extension: str) -> bool:
        return extension in self._lookups


# Global registry instance
_global_registry = ExtensionRegistry.with_defaults()


def register(extension: str, resolver: Resolver) -> None:
    """Register a custom resolver in the global registry."""
    _global_registry.register(extension, resolver)


def unregister(extension: str) -> None:
    """Undo a registration in the global registry."""
    _global_registry.unregister(extension)


def supported_file_extensions() -> List[str]:
    """Extensions with a dedicated resolver in the global registry."""
    return _global_registry.supported_extensions()


def get_registry() -> ExtensionRegistry:
    """Get the global registry instance (for advanced usage)."""
    return _global_registry
