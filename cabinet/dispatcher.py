"""
Dispatcher: the single entry point turning a dependency specifier into a path.

The referencing file's extension selects a resolver from the extension
registry (or the generic lookup). JavaScript files are further split by module
system and handed to the matching delegate with only the arguments it needs.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .errors import TsConfigError
from .lookups.amd import amd_lookup
from .lookups.commonjs import commonjs_lookup
from .lookups.generic import generic_lookup
from .lookups.sass import sass_lookup
from .lookups.stylus import stylus_lookup
from .lookups.typescript import compiler_options, ts_lookup
from .lookups.webpack import webpack_lookup
from .module_type import ModuleDefinition, classify, configured_module_type, get_module_definition
from .registry import ExtensionRegistry, Strategy, get_registry
from .types import ModuleType, ResolutionRequest

logger = logging.getLogger(__name__)


@dataclass
class Delegates:
    """The lookup implementations a Cabinet dispatches to."""
    commonjs: Callable[..., str] = commonjs_lookup
    amd: Callable[..., str] = amd_lookup
    typescript: Callable[..., str] = ts_lookup
    webpack: Callable[..., str] = webpack_lookup
    sass: Callable[..., str] = sass_lookup
    stylus: Callable[..., str] = stylus_lookup
    generic: Callable[..., str] = generic_lookup
    module_definition: Optional[ModuleDefinition] = field(default=None, repr=False)


class Cabinet:
    """Resolves dependency specifiers using a registry and a set of delegates."""

    def __init__(self, registry: Optional[ExtensionRegistry] = None, delegates: Optional[Delegates] = None):
        self.registry = registry if registry is not None else ExtensionRegistry.with_defaults()
        self.delegates = delegates or Delegates()

        self._strategies: Dict[Strategy, Callable[[ResolutionRequest], str]] = {
            Strategy.JAVASCRIPT: self._js_lookup,
            Strategy.TYPESCRIPT: self._ts_strategy,
            Strategy.SASS: self._sass_lookup,
            Strategy.STYLUS: self._stylus_lookup,
        }
        self._module_type_lookups: Dict[ModuleType, Callable[[ResolutionRequest], str]] = {
            ModuleType.AMD: self._amd_lookup,
            ModuleType.COMMONJS: self._commonjs_lookup,
            ModuleType.WEBPACK: self._webpack_lookup,
            ModuleType.ES6: self._es6_lookup,
        }

    def resolve(self, request: ResolutionRequest) -> str:
        """
        Resolve ``request.partial`` as referenced from ``request.filename``.

        Returns:
            Absolute path of the dependency, or '' when it cannot be resolved

        Raises:
            ValueError: ``request.filename`` is empty
            TsConfigError: A TypeScript config cannot be parsed
        """
        if not request.filename:
            raise ValueError("filename is required to resolve a dependency")

        ext = request.extension
        entry = self.registry.get(ext)

        if entry is None:
            logger.debug(f"using generic resolver for {ext or 'extensionless file'}")
            result = self._generic_lookup(request)
        elif isinstance(entry, Strategy):
            logger.debug(f"found a resolver for {ext}")
            result = self._strategies[entry](request)
        else:
            logger.debug(f"using custom resolver for {ext}")
            result = self._guard('custom', entry, request)

        logger.debug(f"resolved path for {request.partial}: {result}")
        return result

    def _guard(self, name: str, lookup: Callable[..., Any], *args, **kwargs) -> str:
        """Run a delegate, turning its internal failures into ''."""
        try:
            result = lookup(*args, **kwargs)
        except TsConfigError:
            raise
        except Exception as e:
            logger.warning(f"{name} lookup failed: {e}")
            logger.debug(f"{name} lookup traceback", exc_info=True)
            return ''
        return '' if result is None else result

    # -- JavaScript -------------------------------------------------------

    def _js_lookup(self, request: ResolutionRequest) -> str:
        # AMD and webpack configs win over an allowJs tsconfig
        module_type = configured_module_type(request)
        if module_type is None:
            if request.ts_config is not None and self._allows_js(request):
                logger.debug("using typescript resolver for allowJs project")
                return self._typescript_lookup(request)

            definition = self.delegates.module_definition or get_module_definition()
            module_type = classify(request, definition)

        logger.debug(f"using {module_type.value} resolver")
        return self._module_type_lookups[module_type](request)

    def _allows_js(self, request: ResolutionRequest) -> bool:
        options = compiler_options(request.ts_config, request.ts_config_path, request.directory)
        return bool(options.get('allowJs'))

    def _amd_lookup(self, request: ResolutionRequest) -> str:
        return self._guard(
            'amd', self.delegates.amd,
            config=request.config,
            # Optional in case a pre-parsed config is being passed in
            config_path=request.config_path,
            partial=request.partial,
            directory=request.directory,
            filename=request.filename,
            file_system=request.file_system,
        )

    def _commonjs_lookup(self, request: ResolutionRequest) -> str:
        return self._guard(
            'commonjs', self.delegates.commonjs,
            request.partial, request.filename, request.directory,
            entry=request.entry,
            file_system=request.file_system,
        )

    def _webpack_lookup(self, request: ResolutionRequest) -> str:
        return self._guard(
            'webpack', self.delegates.webpack,
            request.partial, request.filename, request.directory, request.webpack_config,
        )

    def _es6_lookup(self, request: ResolutionRequest) -> str:
        result = self._generic_lookup(request)
        if result and request.fs.isfile(result):
            return result

        # Transpiled ES modules are loaded with Node's resolution at runtime
        logger.debug(f"{request.partial} not found by path, retrying with the commonjs resolver")
        return self._commonjs_lookup(request)

    # -- TypeScript -------------------------------------------------------

    def _ts_strategy(self, request: ResolutionRequest) -> str:
        if request.webpack_config not in (None, '') and request.ts_config is None:
            logger.debug("using webpack resolver for typescript")
            return self._webpack_lookup(request)
        return self._typescript_lookup(request)

    def _typescript_lookup(self, request: ResolutionRequest) -> str:
        return self._guard(
            'typescript', self.delegates.typescript,
            request.partial, request.filename, request.directory,
            ts_config=request.ts_config,
            ts_config_path=request.ts_config_path,
            no_type_definitions=request.no_type_definitions,
            file_system=request.file_system,
        )

    # -- Stylesheets and everything else ----------------------------------

    def _sass_lookup(self, request: ResolutionRequest) -> str:
        return self._guard(
            'sass', self.delegates.sass,
            request.partial, request.filename, request.directory,
            file_system=request.file_system,
        )

    def _stylus_lookup(self, request: ResolutionRequest) -> str:
        return self._guard(
            'stylus', self.delegates.stylus,
            request.partial, request.filename, request.directory,
            file_system=request.file_system,
        )

    def _generic_lookup(self, request: ResolutionRequest) -> str:
        return self._guard(
            'generic', self.delegates.generic,
            request.partial, request.filename, request.directory,
            file_system=request.file_system,
        )


_REQUEST_FIELDS = {f.name for f in dataclasses.fields(ResolutionRequest)}

_default_cabinet: Optional[Cabinet] = None


def get_cabinet() -> Cabinet:
    """Process-wide Cabinet over the global extension registry."""
    global _default_cabinet
    if _default_cabinet is None:
        _default_cabinet = Cabinet(registry=get_registry())
    return _default_cabinet


def resolve(partial: Optional[str], filename: str, directory: str = "", **options: Any) -> str:
    """
    Resolve a dependency specifier with the default Cabinet.

    Args:
        partial: Dependency specifier, e.g. "./bar" or "lodash"
        filename: File containing the dependency
        directory: Root directory for non-relative lookups
        **options: Any other ResolutionRequest field (config, webpack_config,
            ts_config, ts_config_path, node_modules_config, ast, file_system,
            no_type_definitions, config_path); unknown keys are ignored

    Returns:
        Absolute path of the dependency, or '' when it cannot be resolved
    """
    unknown = set(options) - _REQUEST_FIELDS
    if unknown:
        logger.debug(f"ignoring unknown options: {sorted(unknown)}")
    known = {key: value for key, value in options.items() if key in _REQUEST_FIELDS}
    request = ResolutionRequest(partial=partial, filename=filename, directory=directory, **known)
    return get_cabinet().resolve(request)
