"""
Evaluation of JavaScript configuration files through a local Node.js binary.

Bundler and RequireJS configs are executable JavaScript. They are run with
``node`` and their (JSON-serializable) result is read back on stdout.
"""

import json
import logging
import os
import shutil
import subprocess
from typing import Any, Optional

from ..errors import ConfigLoadError

logger = logging.getLogger(__name__)

# Loads the module at argv[1], unwraps ES module defaults, calls exported
# functions and keeps the first entry of multi-config arrays.
_EXPORT_SCRIPT = """
let c = require(process.argv[1]);
if (c && c.__esModule && c.default !== undefined) c = c.default;
if (typeof c === 'function') c = c({}, {});
if (Array.isArray(c)) c = c[0];
const picked = process.argv[2] ? (c || {})[process.argv[2]] : c;
process.stdout.write(JSON.stringify(picked === undefined ? null : picked));
"""

_LITERAL_SCRIPT = """
const src = require('fs').readFileSync(0, 'utf8');
process.stdout.write(JSON.stringify((0, eval)('(' + src + ')')));
"""


def node_binary() -> Optional[str]:
    return shutil.which('node')


def _run(config_file: str, args, stdin: Optional[str] = None) -> Any:
    node = node_binary()
    if node is None:
        raise ConfigLoadError(config_file, "node executable not found on PATH")

    logger.debug(f"evaluating {config_file} with {node}")
    proc = subprocess.run(
        [node, '-e'] + list(args),
        input=stdin,
        capture_output=True,
        text=True,
        cwd=os.path.dirname(os.path.abspath(config_file)) or None,
    )
    if proc.returncode != 0:
        raise ConfigLoadError(config_file, proc.stderr.strip() or f"node exited with {proc.returncode}")

    try:
        return json.loads(proc.stdout or 'null')
    except ValueError as e:
        raise ConfigLoadError(config_file, f"non-JSON output: {e}") from e


def load_js_export(config_file: str, key: Optional[str] = None) -> Any:
    """
    Evaluate a CommonJS module and return its export.

    Args:
        config_file: Path to the JavaScript module
        key: Optional property of the export to return instead of the whole export

    Raises:
        ConfigLoadError: node is missing or the module fails to evaluate
    """
    args = [_EXPORT_SCRIPT, os.path.abspath(config_file)]
    if key:
        args.append(key)
    return _run(config_file, args)


def evaluate_object_literal(source: str, config_file: str) -> Any:
    """Evaluate a JavaScript object literal taken from ``config_file``."""
    return _run(config_file, [_LITERAL_SCRIPT], stdin=source)
