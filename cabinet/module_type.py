"""
Module-type classification for JavaScript files.

Explicit configuration decides first (an AMD config means AMD, a webpack
config means webpack). Without one, the file's syntax is inspected with
tree-sitter:
- a top-level define(...) call, or require([...], fn), is AMD
- import/export statements are ES modules
- require('...') calls or module.exports/exports.x assignments are CommonJS
- anything else is reported as "none" and treated as an ES module
"""

import logging
from typing import Any, Iterator, Optional

import tree_sitter
import tree_sitter_javascript

from .types import DEFAULT_FILE_SYSTEM, FileSystem, ModuleType, ResolutionRequest

logger = logging.getLogger(__name__)

NONE = "none"


def _node_text_to_str(node_text: Any) -> str:
    if node_text is None:
        return ""
    if isinstance(node_text, bytes):
        return node_text.decode('utf-8', errors='ignore')
    return str(node_text)


class ModuleDefinition:
    """Detects which module system a JavaScript syntax tree uses."""

    def __init__(self):
        self._parser = None

    def _get_parser(self) -> tree_sitter.Parser:
        """Get or create the tree-sitter parser."""
        if self._parser is None:
            parser = tree_sitter.Parser()
            parser.language = tree_sitter.Language(tree_sitter_javascript.language())
            self._parser = parser
            logger.debug("JavaScript parser initialized")
        return self._parser

    def parse(self, text: str) -> Any:
        """Parse JavaScript source into a tree-sitter tree."""
        if isinstance(text, str):
            text = text.encode('utf-8')
        return self._get_parser().parse(text)

    def from_file(self, filename: str, file_system: Optional[FileSystem] = None) -> str:
        """Module type of the file at ``filename``; "none" if it cannot be read."""
        fs = file_system or DEFAULT_FILE_SYSTEM
        try:
            source = fs.read_text(filename)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"could not read {filename} to find its module type: {e}")
            return NONE
        return self.from_source(self.parse(source))

    def from_source(self, tree: Any) -> str:
        """
        Module type of a pre-parsed tree.

        Args:
            tree: tree-sitter Tree or Node

        Returns:
            "amd", "es6", "commonjs" or "none"
        """
        if tree is None:
            return NONE
        root = tree.root_node if hasattr(tree, 'root_node') else tree

        is_es6 = False
        is_commonjs = False

        for child in root.children:
            if child.type in ('import_statement', 'export_statement'):
                is_es6 = True
            elif child.type == 'expression_statement' and _is_amd_call(child):
                return ModuleType.AMD.value

        if not is_es6:
            for node in _walk(root):
                if _is_require_call(node) or _is_exports_assignment(node):
                    is_commonjs = True
                    break

        if is_es6:
            return ModuleType.ES6.value
        if is_commonjs:
            return ModuleType.COMMONJS.value
        return NONE


def _walk(root) -> Iterator[Any]:
    """Iterative DFS over a tree-sitter node and its descendants."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _call_name(node) -> str:
    if node is None or node.type != 'call_expression':
        return ""
    function = node.child_by_field_name('function')
    if function is None or function.type != 'identifier':
        return ""
    return _node_text_to_str(function.text)


def _call_arguments(node) -> list:
    arguments = node.child_by_field_name('arguments')
    if arguments is None:
        return []
    return [arg for arg in arguments.children if arg.is_named]


def _is_amd_call(statement) -> bool:
    call = statement.named_children[0] if statement.named_children else None
    name = _call_name(call)
    if name == 'define':
        return True
    if name in ('require', 'requirejs'):
        args = _call_arguments(call)
        return bool(args) and args[0].type == 'array'
    return False


def _is_require_call(node) -> bool:
    if _call_name(node) != 'require':
        return False
    args = _call_arguments(node)
    return bool(args) and args[0].type in ('string', 'template_string')


def _is_exports_assignment(node) -> bool:
    if node.type != 'assignment_expression':
        return False
    left = node.child_by_field_name('left')
    if left is None or left.type != 'member_expression':
        return False
    text = _node_text_to_str(left.text)
    return text.startswith('module.exports') or text.startswith('exports.')


_default_definition: Optional[ModuleDefinition] = None


def get_module_definition() -> ModuleDefinition:
    """Process-wide analyzer; the parser is built on first use."""
    global _default_definition
    if _default_definition is None:
        _default_definition = ModuleDefinition()
    return _default_definition


def configured_module_type(request: ResolutionRequest) -> Optional[ModuleType]:
    """
    Module system forced by configuration, or None when syntax decides.

    Any AMD config counts, including an empty object; it is checked before
    the webpack config.
    """
    if request.config is not None:
        return ModuleType.AMD

    if request.webpack_config not in (None, ''):
        return ModuleType.WEBPACK

    return None


def classify(request: ResolutionRequest, definition: Optional[ModuleDefinition] = None) -> ModuleType:
    """
    Decide which module system governs ``request.filename``.

    Configuration beats syntax: an AMD config forces AMD even for files
    written with import/export, then a webpack config forces webpack. Only
    without either is the supplied tree (or the file itself) analyzed.
    Nothing is cached between calls.
    """
    configured = configured_module_type(request)
    if configured is not None:
        return configured

    definition = definition or get_module_definition()
    if request.ast is not None:
        logger.debug("reusing the given ast")
        detected = definition.from_source(request.ast)
    else:
        logger.debug("using the filename to find the module type")
        detected = definition.from_file(request.filename, request.file_system)

    try:
        return ModuleType(detected)
    except ValueError:
        return ModuleType.ES6
