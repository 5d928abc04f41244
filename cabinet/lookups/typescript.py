"""
TypeScript lookup.

Follows the compiler's module resolution closely enough for dependency graphs:
- Classic resolution by default, node resolution when the config asks for it
- compilerOptions.paths / baseUrl mappings
- .ts, .tsx and .d.ts files before .js/.jsx files
- package.json "types"/"typings"/"main" and index files (node resolution)
- node_modules and node_modules/@types lookups (node resolution)
- Imports of non-TypeScript assets with an explicit extension ("./logo.svg")
- tsconfig files given as objects or paths, with comments and "extends"
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple, Union

from ..errors import TsConfigError
from ..paths import ancestors, is_relative, strip_loader
from ..types import DEFAULT_FILE_SYSTEM, FileSystem

logger = logging.getLogger(__name__)

TS_EXTENSIONS = ('.ts', '.tsx', '.d.ts')
JS_EXTENSIONS = ('.js', '.jsx')
NODE_RESOLUTION_MODES = {'node', 'node10', 'node16', 'nodenext', 'bundler'}

# (absolute path, mtime) -> parsed and extended config
_config_cache: Dict[Tuple[str, float], Dict[str, Any]] = {}


def ts_lookup(
    partial: Optional[str],
    filename: str,
    directory: str,
    ts_config: Union[Dict[str, Any], str, None] = None,
    ts_config_path: Optional[str] = None,
    no_type_definitions: bool = False,
    file_system: Optional[FileSystem] = None,
) -> str:
    """
    Resolve a TypeScript import to an absolute path.

    Args:
        partial: Import specifier, e.g. "./foo", "@app/util", "lodash"
        filename: File containing the import
        directory: Root directory; home of an object config without ts_config_path
        ts_config: tsconfig object, or path to a tsconfig file
        ts_config_path: Location of ``ts_config`` when an object is passed
        no_type_definitions: Return the sibling .js file instead of a .d.ts when one exists
        file_system: Alternate filesystem implementation

    Returns:
        Absolute path of the resolved file, or '' if not found

    Raises:
        TsConfigError: The config cannot be read or parsed
    """
    if not partial:
        return ''

    fs = file_system or DEFAULT_FILE_SYSTEM
    partial = strip_loader(partial)

    options = compiler_options(ts_config, ts_config_path, directory or os.path.dirname(filename))
    node_mode = uses_node_resolution(options)
    logger.debug(f"typescript lookup of {partial} ({'node' if node_mode else 'classic'} resolution)")

    result = None
    for candidate in _candidates(partial, filename, options, node_mode):
        result = _probe(fs, candidate, node_mode)
        if result:
            break

    if not result:
        logger.debug(f"typescript could not resolve {partial}")
        return ''

    result = os.path.abspath(result)
    if no_type_definitions and result.endswith('.d.ts'):
        js_file = result[:-len('.d.ts')] + '.js'
        if fs.isfile(js_file):
            return js_file
    return result


def uses_node_resolution(options: Dict[str, Any]) -> bool:
    """
    Pick the resolution strategy the compiler would use.

    An explicit moduleResolution wins; otherwise CommonJS-style module kinds
    imply node resolution and everything else (including no config) classic.
    """
    mode = str(options.get('moduleResolution') or '').lower()
    if mode:
        return mode in NODE_RESOLUTION_MODES
    module_kind = str(options.get('module') or '').lower()
    return module_kind in ('commonjs', 'node16', 'nodenext', 'preserve')


def _candidates(partial: str, filename: str, options: Dict[str, Any], node_mode: bool) -> List[str]:
    if is_relative(partial):
        return [os.path.normpath(os.path.join(os.path.dirname(os.path.abspath(filename)), partial))]
    if os.path.isabs(partial):
        return [os.path.normpath(partial)]

    candidates = []
    base_url = options.get('baseUrl')
    paths = options.get('paths') or {}
    if paths:
        paths_base = base_url or options.get('_pathsBase')
        for target in match_paths(partial, paths):
            candidates.append(os.path.normpath(os.path.join(paths_base, target)))
    if base_url:
        candidates.append(os.path.normpath(os.path.join(base_url, partial)))

    start = os.path.dirname(os.path.abspath(filename))
    for current in ancestors(start):
        if node_mode:
            if os.path.basename(current) == 'node_modules':
                continue
            modules = os.path.join(current, 'node_modules')
            candidates.append(os.path.join(modules, partial))
            candidates.append(os.path.join(modules, '@types', _types_package(partial)))
        else:
            candidates.append(os.path.join(current, partial))
    return candidates


def match_paths(partial: str, paths: Dict[str, Any]) -> List[str]:
    """
    Substitutions of the ``paths`` pattern that best matches ``partial``.

    Exact patterns beat wildcards; among wildcards the longest prefix wins.
    """
    best: Optional[Tuple[int, List[str]]] = None
    for pattern, targets in paths.items():
        if not isinstance(targets, list):
            continue
        if '*' not in pattern:
            if pattern == partial:
                return [t for t in targets if isinstance(t, str)]
            continue
        prefix, _, suffix = pattern.partition('*')
        if not (partial.startswith(prefix) and partial.endswith(suffix)):
            continue
        if len(partial) < len(prefix) + len(suffix):
            continue
        if best is not None and len(prefix) <= best[0]:
            continue
        star = partial[len(prefix):len(partial) - len(suffix)]
        best = (len(prefix), [t.replace('*', star) for t in targets if isinstance(t, str)])
    return best[1] if best else []


def _types_package(partial: str) -> str:
    """Map a package specifier to its DefinitelyTyped name (@scope/pkg -> scope__pkg)."""
    if partial.startswith('@') and '/' in partial:
        scope, rest = partial[1:].split('/', 1)
        return f"{scope}__{rest}"
    return partial


def _probe(fs: FileSystem, base: str, node_mode: bool) -> Optional[str]:
    lowered = base.lower()

    # "./foo.js" in TypeScript source refers to foo.ts
    for js_ext in ('.js', '.jsx', '.mjs', '.cjs'):
        if lowered.endswith(js_ext):
            stem = base[:-len(js_ext)]
            for ext in TS_EXTENSIONS:
                if fs.isfile(stem + ext):
                    return stem + ext
            break

    if lowered.endswith(TS_EXTENSIONS) and fs.isfile(base):
        return base

    for extensions in (TS_EXTENSIONS, JS_EXTENSIONS):
        for ext in extensions:
            if fs.isfile(base + ext):
                return base + ext
        if node_mode:
            found = _probe_directory(fs, base, extensions)
            if found:
                return found

    if os.path.splitext(base)[1] and fs.isfile(base):
        return base
    return None


def _probe_directory(fs: FileSystem, dir_path: str, extensions: Tuple[str, ...]) -> Optional[str]:
    if not fs.isdir(dir_path):
        return None

    package_json = os.path.join(dir_path, 'package.json')
    if fs.isfile(package_json):
        try:
            package = json.loads(fs.read_text(package_json))
        except (OSError, ValueError) as e:
            logger.debug(f"ignoring unreadable {package_json}: {e}")
            package = {}
        fields = ('types', 'typings', 'main') if extensions == TS_EXTENSIONS else ('main',)
        for field in fields:
            value = package.get(field) if isinstance(package, dict) else None
            if not isinstance(value, str) or not value:
                continue
            target = os.path.normpath(os.path.join(dir_path, value))
            if fs.isfile(target) and target.endswith(extensions):
                return target
            stem = os.path.splitext(target)[0] if target.endswith(JS_EXTENSIONS) else target
            for ext in extensions:
                if fs.isfile(stem + ext):
                    return stem + ext

    for ext in extensions:
        index = os.path.join(dir_path, 'index' + ext)
        if fs.isfile(index):
            return index
    return None


def compiler_options(
    ts_config: Union[Dict[str, Any], str, None],
    ts_config_path: Optional[str],
    directory: str,
) -> Dict[str, Any]:
    """
    Normalize a tsconfig (object, path or JSON text) to its compilerOptions.

    ``baseUrl`` comes back absolute, and ``_pathsBase`` records where ``paths``
    entries are relative to when no baseUrl is set.
    """
    if not ts_config:
        return {}

    if isinstance(ts_config, str):
        stripped = ts_config.lstrip()
        if stripped.startswith('{'):
            raw = parse_jsonc(ts_config, '<string>')
            config_dir = os.path.dirname(os.path.abspath(ts_config_path)) if ts_config_path else os.path.abspath(directory)
            return _finish(raw, config_dir)
        return dict(load_ts_config_file(ts_config).get('compilerOptions') or {})

    if not isinstance(ts_config, dict):
        raise TsConfigError(repr(ts_config), "expected an object or a path")

    config_dir = os.path.dirname(os.path.abspath(ts_config_path)) if ts_config_path else os.path.abspath(directory)
    return _finish(ts_config, config_dir)


def _finish(raw: Dict[str, Any], config_dir: str) -> Dict[str, Any]:
    merged = _merge_extends(_absolutize(raw, config_dir), raw.get('extends'), config_dir)
    return dict(merged.get('compilerOptions') or {})


def load_ts_config_file(config_file: str) -> Dict[str, Any]:
    """
    Read a tsconfig file, following ``extends`` chains.

    Raises:
        TsConfigError: The file is missing or is not valid JSON (comments and
            trailing commas are accepted)
    """
    config_file = os.path.abspath(config_file)
    try:
        mtime = os.path.getmtime(config_file)
        with open(config_file, 'r', encoding='utf-8') as f:
            text = f.read()
    except OSError as e:
        raise TsConfigError(config_file, str(e)) from e

    cached = _config_cache.get((config_file, mtime))
    if cached is not None:
        return cached

    raw = parse_jsonc(text, config_file)
    config_dir = os.path.dirname(config_file)
    config = _merge_extends(_absolutize(raw, config_dir), raw.get('extends'), config_dir)
    # Only the newest version of each file is kept
    for stale in [key for key in _config_cache if key[0] == config_file]:
        del _config_cache[stale]
    _config_cache[(config_file, mtime)] = config
    return config


def _absolutize(raw: Dict[str, Any], config_dir: str) -> Dict[str, Any]:
    config = dict(raw)
    options = dict(config.get('compilerOptions') or {})
    if isinstance(options.get('baseUrl'), str):
        options['baseUrl'] = os.path.normpath(os.path.join(config_dir, options['baseUrl']))
    if options.get('paths') and '_pathsBase' not in options:
        options['_pathsBase'] = config_dir
    config['compilerOptions'] = options
    return config


def _merge_extends(config: Dict[str, Any], extends: Any, config_dir: str) -> Dict[str, Any]:
    if not extends:
        return config

    bases = extends if isinstance(extends, list) else [extends]
    merged_options: Dict[str, Any] = {}
    for base in bases:
        if not isinstance(base, str):
            raise TsConfigError(str(extends), "extends must be a string or a list of strings")
        base_file = _find_extended_config(base, config_dir)
        if base_file is None:
            raise TsConfigError(base, f"extended config not found from {config_dir}")
        merged_options.update(load_ts_config_file(base_file).get('compilerOptions') or {})

    merged_options.update(config.get('compilerOptions') or {})
    result = dict(config)
    result['compilerOptions'] = merged_options
    return result


def _find_extended_config(base: str, config_dir: str) -> Optional[str]:
    if is_relative(base) or os.path.isabs(base):
        target = os.path.normpath(os.path.join(config_dir, base))
        for candidate in (target, target + '.json'):
            if os.path.isfile(candidate):
                return candidate
        return None

    for current in ancestors(config_dir):
        package = os.path.join(current, 'node_modules', base)
        for candidate in (package, package + '.json', os.path.join(package, 'tsconfig.json')):
            if os.path.isfile(candidate):
                return candidate
    return None


def parse_jsonc(text: str, source: str) -> Dict[str, Any]:
    """
    Parse JSON that may contain comments and trailing commas, as tsconfig does.

    Raises:
        TsConfigError: The text is not valid JSON once comments are removed
    """
    try:
        data = json.loads(_strip_jsonc(text))
    except ValueError as e:
        raise TsConfigError(source, str(e)) from e
    if not isinstance(data, dict):
        raise TsConfigError(source, "top-level value must be an object")
    return data


def _strip_jsonc(text: str) -> str:
    out = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == '\\' and i + 1 < n:
                out.append(text[i + 1])
                i += 1
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
            out.append(ch)
        elif text.startswith('//', i):
            end = text.find('\n', i)
            i = n if end == -1 else end
            continue
        elif text.startswith('/*', i):
            end = text.find('*/', i + 2)
            i = n if end == -1 else end + 2
            continue
        elif ch in '}]':
            # Drop a trailing comma before the closing bracket
            j = len(out) - 1
            while j >= 0 and out[j].isspace():
                j -= 1
            if j >= 0 and out[j] == ',':
                del out[j]
            out.append(ch)
        else:
            out.append(ch)
        i += 1
    return ''.join(out)
