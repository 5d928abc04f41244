"""
Bundler (webpack) lookup.

Loads a webpack config and resolves specifiers with its ``resolve`` section:
- resolve.alias (exact "name$" aliases and prefix aliases)
- resolve.modules, including legacy resolve.root/resolve.modulesDirectories
- resolve.extensions, resolve.mainFields and resolve.mainFiles
- Loader prefixes ("hgn!module") are ignored

Configs may be JSON, YAML, Python (a ``config`` attribute holding a dict, a
list of dicts or a callable returning either) or JavaScript evaluated with Node.
"""

import importlib.util
import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..errors import ConfigLoadError
from ..paths import ancestors, is_relative, strip_loader
from ..types import DEFAULT_FILE_SYSTEM, FileSystem
from .node_eval import load_js_export

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = ['.js', '.json']
DEFAULT_MAIN_FIELDS = ['main']
DEFAULT_MAIN_FILES = ['index']
DEFAULT_MODULES = ['node_modules']

# (absolute path, mtime) -> normalized resolve options
_resolve_cache: Dict[Tuple[str, float], Dict[str, Any]] = {}


def webpack_lookup(
    partial: Optional[str],
    filename: str,
    directory: str,
    webpack_config: str,
) -> str:
    """
    Resolve a specifier through a webpack config.

    Args:
        partial: Specifier, possibly with loaders ("style!css!./foo.css")
        filename: File containing the dependency
        directory: Root directory for non-relative lookups
        webpack_config: Path to the webpack config file

    Returns:
        Absolute path of the resolved file, or '' if not found

    Raises:
        ConfigLoadError: The config cannot be loaded
    """
    if not partial:
        return ''

    options = resolve_options(webpack_config)
    partial = strip_loader(partial)
    lookup_dir = os.path.dirname(os.path.abspath(filename)) if is_relative(partial) else os.path.abspath(directory)

    resolver = _WebpackResolver(options, DEFAULT_FILE_SYSTEM)
    result = resolver.resolve(lookup_dir, partial)
    logger.debug(f"webpack resolved {partial} to {result or 'nothing'}")
    return result or ''


def resolve_options(webpack_config: str) -> Dict[str, Any]:
    """Load and normalize the ``resolve`` section of a webpack config, cached per file version."""
    config_file = os.path.abspath(webpack_config)
    try:
        mtime = os.path.getmtime(config_file)
    except OSError as e:
        raise ConfigLoadError(config_file, str(e)) from e

    key = (config_file, mtime)
    if key not in _resolve_cache:
        options = normalize_resolve(load_webpack_config(config_file).get('resolve') or {})
        for stale in [cached for cached in _resolve_cache if cached[0] == config_file]:
            del _resolve_cache[stale]
        _resolve_cache[key] = options
    return _resolve_cache[key]


def load_webpack_config(config_file: str) -> Dict[str, Any]:
    """
    Load a webpack config file into a dict.

    Multi-config arrays yield their first entry; callables are called.
    """
    ext = os.path.splitext(config_file)[1].lower()
    logger.debug(f"loading webpack config {config_file}")

    if ext == '.json':
        config = _read_json(config_file)
    elif ext in ('.yml', '.yaml'):
        config = _read_yaml(config_file)
    elif ext == '.py':
        config = _load_python_config(config_file)
    else:
        config = {'resolve': load_js_export(config_file, 'resolve')}

    if callable(config):
        config = config()
    if isinstance(config, list):
        config = config[0] if config else {}
    if not isinstance(config, dict):
        raise ConfigLoadError(config_file, f"expected a config object, got {type(config).__name__}")
    return config


def normalize_resolve(resolve: Dict[str, Any]) -> Dict[str, Any]:
    """Fold legacy root/modulesDirectories options into ``modules``."""
    options = dict(resolve)
    if not options.get('modules') and (options.get('root') or options.get('modulesDirectories')):
        modules: List[str] = []
        for legacy in ('root', 'modulesDirectories'):
            value = options.get(legacy)
            if isinstance(value, str):
                modules.append(value)
            elif isinstance(value, list):
                modules.extend(value)
        options['modules'] = modules
    return options


def _read_json(config_file: str) -> Any:
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigLoadError(config_file, str(e)) from e


def _read_yaml(config_file: str) -> Any:
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigLoadError(config_file, str(e)) from e


def _load_python_config(config_file: str) -> Any:
    spec = importlib.util.spec_from_file_location('_cabinet_webpack_config', config_file)
    if spec is None or spec.loader is None:
        raise ConfigLoadError(config_file, "not an importable Python file")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise ConfigLoadError(config_file, f"{type(e).__name__}: {e}") from e
    if not hasattr(module, 'config'):
        raise ConfigLoadError(config_file, "no 'config' attribute")
    return module.config


class _WebpackResolver:
    """Resolution over one normalized set of resolve options."""

    def __init__(self, options: Dict[str, Any], fs: FileSystem):
        self.fs = fs
        self.extensions = [''] + list(options.get('extensions') or DEFAULT_EXTENSIONS)
        self.main_fields = list(options.get('mainFields') or DEFAULT_MAIN_FIELDS)
        self.main_files = list(options.get('mainFiles') or DEFAULT_MAIN_FILES)
        self.modules = list(options.get('modules') or DEFAULT_MODULES)
        self.aliases = self._alias_entries(options.get('alias') or {})

    @staticmethod
    def _alias_entries(alias: Any) -> List[Tuple[str, str, bool]]:
        """(name, target, exact_only) triples from object or array alias forms."""
        entries = []
        if isinstance(alias, dict):
            for name, target in alias.items():
                if isinstance(target, list):
                    target = target[0] if target else None
                if not isinstance(target, str):
                    continue
                exact = name.endswith('$')
                entries.append((name[:-1] if exact else name, target, exact))
        elif isinstance(alias, list):
            for item in alias:
                if isinstance(item, dict) and isinstance(item.get('alias'), str):
                    entries.append((item.get('name', ''), item['alias'], bool(item.get('onlyModule'))))
        return entries

    def resolve(self, lookup_dir: str, request: str) -> Optional[str]:
        request = self._apply_alias(request)

        if os.path.isabs(request) or is_relative(request):
            target = os.path.normpath(os.path.join(lookup_dir, request))
            return self._load_as_file(target) or self._load_as_directory(target)

        for module_dir in self._module_directories(lookup_dir):
            target = os.path.join(module_dir, request)
            found = self._load_as_file(target) or self._load_as_directory(target)
            if found:
                return found
        return None

    def _apply_alias(self, request: str) -> str:
        for name, target, exact in self.aliases:
            if request == name:
                logger.debug(f"alias {name} -> {target}")
                return target
            if not exact and request.startswith(name + '/'):
                return target + request[len(name):]
        return request

    def _module_directories(self, lookup_dir: str) -> List[str]:
        dirs = []
        for module in self.modules:
            if os.path.isabs(module):
                dirs.append(module)
                continue
            for current in ancestors(lookup_dir):
                if os.path.basename(current) == module:
                    continue
                dirs.append(os.path.join(current, module))
        return dirs

    def _load_as_file(self, target: str) -> Optional[str]:
        for ext in self.extensions:
            if self.fs.isfile(target + ext):
                return target + ext
        return None

    def _load_as_directory(self, target: str) -> Optional[str]:
        if not self.fs.isdir(target):
            return None

        package_json = os.path.join(target, 'package.json')
        if self.fs.isfile(package_json):
            try:
                package = json.loads(self.fs.read_text(package_json))
            except (OSError, ValueError):
                package = {}
            for field in self.main_fields:
                main = package.get(field) if isinstance(package, dict) else None
                if isinstance(main, str) and main:
                    main_path = os.path.normpath(os.path.join(target, main))
                    found = self._load_as_file(main_path) or self._load_index(main_path)
                    if found:
                        return found

        return self._load_index(target)

    def _load_index(self, target: str) -> Optional[str]:
        if not self.fs.isdir(target):
            return None
        for main_file in self.main_files:
            found = self._load_as_file(os.path.join(target, main_file))
            if found:
                return found
        return None
