"""
AMD (RequireJS) lookup.

Handles:
- baseUrl relative to the config file (or the root directory)
- paths mappings on module-id prefixes
- Relative module ids about the referencing file
- Loader plugins ("text!./tpl.html")
- Configs given as objects, JSON/YAML files or RequireJS .js files
"""

import json
import logging
import os
import re
from typing import Any, Dict, Optional, Union

import yaml

from ..errors import ConfigLoadError
from ..paths import SCRIPT_EXTENSIONS, has_extension, is_relative, strip_loader
from ..types import DEFAULT_FILE_SYSTEM, FileSystem
from .node_eval import evaluate_object_literal, load_js_export

logger = logging.getLogger(__name__)

_CONFIG_CALL = re.compile(r'\b(?:requirejs|require)\.config\s*\(\s*\{')


def amd_lookup(
    config: Union[Dict[str, Any], str, None],
    partial: Optional[str],
    directory: str,
    filename: str,
    config_path: Optional[str] = None,
    file_system: Optional[FileSystem] = None,
) -> str:
    """
    Resolve an AMD module id to an absolute path.

    Args:
        config: RequireJS config object, or a path to load one from
        partial: Module id, e.g. "./bar", "jquery", "text!./tpl.html"
        directory: Root directory; the default home of baseUrl
        filename: File containing the dependency
        config_path: Location of ``config`` when an object is passed
        file_system: Alternate filesystem implementation

    Returns:
        Absolute path of the module file if it exists, else ''
    """
    if not partial:
        return ''

    fs = file_system or DEFAULT_FILE_SYSTEM

    if isinstance(config, str):
        config_path = config
        config = load_amd_config(config)
    config = config or {}

    if config_path:
        config_dir = os.path.dirname(os.path.abspath(config_path))
    else:
        config_dir = os.path.abspath(directory or os.path.dirname(filename))

    base_url = os.path.normpath(os.path.join(config_dir, config.get('baseUrl') or './'))
    module_id = strip_loader(partial)

    if is_relative(module_id):
        target = os.path.join(os.path.dirname(os.path.abspath(filename)), module_id)
    elif os.path.isabs(module_id):
        target = module_id
    else:
        target = os.path.join(base_url, _apply_paths(module_id, config.get('paths') or {}))
    target = os.path.normpath(target)

    logger.debug(f"amd lookup of {module_id} -> {target}")

    if has_extension(module_id) and fs.isfile(target):
        return target

    for ext in SCRIPT_EXTENSIONS:
        if fs.isfile(target + ext):
            return target + ext
    return ''


def _apply_paths(module_id: str, paths: Dict[str, Any]) -> str:
    """Rewrite the longest ``paths`` prefix matching ``module_id``."""
    parts = module_id.split('/')
    for i in range(len(parts), 0, -1):
        prefix = '/'.join(parts[:i])
        mapped = paths.get(prefix)
        if isinstance(mapped, list):
            mapped = mapped[0] if mapped else None
        if isinstance(mapped, str):
            return '/'.join([mapped] + parts[i:])
    return module_id


def load_amd_config(config_file: str) -> Dict[str, Any]:
    """
    Load a RequireJS config from disk.

    JSON and YAML files are parsed directly. JavaScript files are searched for
    a ``require.config({...})``/``requirejs.config({...})`` call whose object
    literal is evaluated with Node; a module exporting the config works too.

    Raises:
        ConfigLoadError: The file cannot be read or evaluated
    """
    ext = os.path.splitext(config_file)[1].lower()
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            source = f.read()
    except OSError as e:
        raise ConfigLoadError(config_file, str(e)) from e

    if ext == '.json':
        try:
            return json.loads(source)
        except ValueError as e:
            raise ConfigLoadError(config_file, str(e)) from e
    if ext in ('.yml', '.yaml'):
        try:
            return yaml.safe_load(source) or {}
        except yaml.YAMLError as e:
            raise ConfigLoadError(config_file, str(e)) from e

    literal = _extract_config_literal(source)
    if literal is not None:
        return evaluate_object_literal(literal, config_file) or {}
    return load_js_export(config_file) or {}


def _extract_config_literal(source: str) -> Optional[str]:
    match = _CONFIG_CALL.search(source)
    if not match:
        return None

    start = match.end() - 1
    depth = 0
    quote = None
    i = start
    while i < len(source):
        ch = source[i]
        if quote:
            if ch == '\\':
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ('"', "'", '`'):
            quote = ch
        elif ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                return source[start:i + 1]
        i += 1
    return None
