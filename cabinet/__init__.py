"""
cabinet: resolve dependency specifiers to the files they refer to.

Given a specifier as written in a source file, the file containing it and a
root directory, ``resolve`` returns the absolute path of the dependency (or
'' when it cannot be found), picking the JavaScript, TypeScript, webpack, AMD
or stylesheet rules that apply to the referencing file.
"""

__version__ = "0.1.0"

from .types import (
    ModuleType, ResolutionRequest, Resolver,
    FileSystem, OSFileSystem, MemoryFileSystem
)

from .errors import CabinetError, TsConfigError, ConfigLoadError

from .registry import (
    ExtensionRegistry, Strategy,
    register, unregister, supported_file_extensions, get_registry
)

from .module_type import ModuleDefinition, classify

from .dispatcher import Cabinet, Delegates, resolve, get_cabinet

from .config import CabinetConfig, load_config, find_config_file

__all__ = [
    # Types
    "ModuleType", "ResolutionRequest", "Resolver",
    "FileSystem", "OSFileSystem", "MemoryFileSystem",

    # Errors
    "CabinetError", "TsConfigError", "ConfigLoadError",

    # Registry
    "ExtensionRegistry", "Strategy",
    "register", "unregister", "supported_file_extensions", "get_registry",

    # Resolution
    "ModuleDefinition", "classify", "Cabinet", "Delegates", "resolve", "get_cabinet",

    # Config
    "CabinetConfig", "load_config", "find_config_file",
]
