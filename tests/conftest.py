"""
Shared fixtures: an on-disk project tree covering every resolver.
"""

import os

import pytest


PROJECT_FILES = {
    'js': {
        'es6': {
            'foo.js': 'import bar from "./bar";',
            'foo.jsx': 'import React from "react";\nexport default () => null;',
            'bar.js': 'export default function() {};',
            'es6.js': 'import bar from "./bar";',
            'withCjsDep.js': 'import assign from "lodash.assign";',
        },
        'cjs': {
            'foo.js': 'var bar = require("./bar");',
            'bar.jsx': 'module.exports = function() {};',
        },
        'amd': {
            'foo.js': 'define(["./bar"], function(bar) { return bar; });',
            'bar.js': 'define({});',
            'config.json': '{"baseUrl": "./", "paths": {"lib": "vendor/lib"}}',
            'vendor': {'lib': {'dom.js': ''}},
        },
        'commonjs': {
            'foo.js': 'var bar = require("./bar");',
            'bar.js': 'module.exports = function() {};',
            'barbaz.js': '',
            'index.js': '',
            'module.entry.js': 'var x = require("module.entry");',
            'subdir': {'index.js': '', 'module.js': ''},
        },
        'node_modules': {
            'lodash.assign': {'index.js': 'module.exports = function() {};'},
            'module.entry': {
                'package.json': '{"main": "index.main.js", "module": "index.module.js"}',
                'index.main.js': '',
                'index.module.js': '',
            },
            'nested': {
                'package.json': '{"main": "lib/main.js"}',
                'lib': {'main.js': ''},
            },
        },
        'withIndex': {
            'index.js': 'import sub from "./subdir";',
            'subdir': {'index.js': ''},
        },
        'custom': {'foo.baz': ''},
    },
    'ts': {
        'index.ts': 'import foo from "./foo";',
        'foo.ts': 'export default 1;',
        'module.tsx': '',
        'check-nested.ts': 'import sub from "./subdir";',
        'withTypeDef.d.ts': '',
        'withTypeDef.js': '',
        'withOnlyTypeDef.d.ts': '',
        'image.svg': '',
        'bar.js': 'require("./foo");',
        'subdir': {'index.tsx': '', 'subimage.svg': ''},
        '.tsconfig': '{\n  // node resolution\n  "compilerOptions": {"module": "commonjs", "moduleResolution": "node",},\n}',
        '.tsconfigExtending': '{"extends": "./.tsconfig"}',
        '.tsconfigAllowJs': '{"compilerOptions": {"allowJs": true, "moduleResolution": "node"}}',
        '.tsconfigBroken': '{"compilerOptions": {',
        'node_modules': {
            'image': {'npm-image.svg': ''},
            'typed': {'package.json': '{"types": "lib/typed.d.ts"}', 'lib': {'typed.d.ts': ''}},
            '@types': {'untyped': {'index.d.ts': ''}},
        },
    },
    'root3': {
        'tsconfig.json': '{"compilerOptions": {"baseUrl": ".", "paths": {"#foo/*": ["packages/foo/*"]}}}',
        'packages': {'foo': {'index.ts': '', 'hello.ts': ''}},
    },
    'sass': {
        'foo.scss': '@import "bar";',
        'bar.scss': '',
        'foo.sass': '@import bar',
        'bar.sass': '',
        '_partial.scss': '',
        'theme': {'_index.scss': ''},
        'node_modules': {'pkg': {'_vars.scss': ''}},
    },
    'stylus': {
        'foo.styl': '@import "bar"',
        'bar.styl': '',
        'mixins': {'index.styl': ''},
    },
    'less': {
        'foo.less': '@import "bar";',
        'bar.less': '',
        'bar.css': '',
        'only.css': '',
    },
    'webpack': {
        'index.js': 'var R = require("R");',
        'index.ts': 'import R from "R";',
        'node_modules': {
            'resolve': {'index.js': '', 'package.json': '{"main": "index.js"}'},
        },
        'test': {
            'ast.js': '',
            'foo.jsx': '',
            'root1': {'mod1.js': ''},
            'root2': {'mod2.js': ''},
        },
        'webpack.config.json': '{"resolve": {"alias": {"R": "resolve", "exact$": "./test/ast.js"}, "extensions": [".js", ".jsx"]}}',
        'webpack-root.config.py': (
            'import os\n'
            'config = {"resolve": {\n'
            '    "modulesDirectories": ["test/root1", "node_modules"],\n'
            '    "root": [os.path.join(os.path.dirname(__file__), "test", "root2")],\n'
            '}}\n'
        ),
        'webpack-env.config.py': (
            'def config():\n'
            '    return {"resolve": {"alias": {"F": "./test/foo.jsx"}, "extensions": [".js", ".jsx"]}}\n'
        ),
        'webpack-multiple.config.json': '[{"resolve": {"alias": {"M": "./test/ast.js"}}}, {"resolve": {}}]',
        'webpack.config.yml': 'resolve:\n  alias:\n    Y: ./test/ast.js\n',
        'webpack.config.js': 'module.exports = {resolve: {alias: {J: require("path").join(__dirname, "test/ast.js")}}};',
        'webpack-broken.config.json': '{"resolve": ',
    },
}


def write_tree(root, files):
    """Create ``files`` (a nested dict of name -> contents or subtree) under ``root``."""
    for name, contents in files.items():
        path = os.path.join(str(root), name)
        if isinstance(contents, dict):
            os.makedirs(path, exist_ok=True)
            write_tree(path, contents)
        else:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(contents)


@pytest.fixture(scope="session")
def project(tmp_path_factory):
    """Root of a populated project tree (shared, treat as read-only)."""
    root = tmp_path_factory.mktemp("project")
    write_tree(root, PROJECT_FILES)
    return str(root)


@pytest.fixture
def make_tree(tmp_path):
    """Build a private tree for tests that need their own files."""
    def _make(files):
        write_tree(tmp_path, files)
        return str(tmp_path)
    return _make
