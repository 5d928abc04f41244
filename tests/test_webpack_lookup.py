"""
Tests for the webpack lookup and config loading.
"""

import os
import shutil

import pytest

from cabinet import ConfigLoadError, MemoryFileSystem
from cabinet.lookups.webpack import (
    _WebpackResolver, _resolve_cache, load_webpack_config, normalize_resolve, webpack_lookup
)

requires_node = pytest.mark.skipif(shutil.which('node') is None, reason="node is not installed")


class TestNormalizeResolve:

    def test_legacy_options_fold_into_modules(self):
        options = normalize_resolve({'root': '/abs/root', 'modulesDirectories': ['web_modules', 'node_modules']})
        assert options['modules'] == ['/abs/root', 'web_modules', 'node_modules']

    def test_modules_win_over_legacy_options(self):
        options = normalize_resolve({'modules': ['src'], 'root': '/abs/root'})
        assert options['modules'] == ['src']

    def test_untouched(self):
        assert normalize_resolve({'alias': {'a': 'b'}}) == {'alias': {'a': 'b'}}


class TestWebpackResolver:
    """Resolution over resolve options and an in-memory filesystem."""

    @pytest.fixture
    def fs(self):
        return MemoryFileSystem({
            '/proj/src/app.js': '',
            '/proj/src/components/button.jsx': '',
            '/proj/src/components/main.js': '',
            '/proj/src/components/package.json': '{"browser": "button.jsx"}',
            '/proj/node_modules/lib/package.json': '{"module": "esm/lib.js", "main": "cjs/lib.js"}',
            '/proj/node_modules/lib/esm/lib.js': '',
            '/proj/node_modules/lib/cjs/lib.js': '',
        })

    def test_array_aliases(self, fs):
        options = {'alias': [
            {'name': 'components', 'alias': '/proj/src/components'},
            {'name': 'app', 'alias': '/proj/src/app.js', 'onlyModule': True},
        ]}
        resolver = _WebpackResolver(options, fs)
        assert resolver.resolve('/proj', 'components/main') == '/proj/src/components/main.js'
        assert resolver.resolve('/proj', 'app') == '/proj/src/app.js'
        assert resolver.resolve('/proj', 'app/other') is None

    def test_main_fields(self, fs):
        resolver = _WebpackResolver({'mainFields': ['module', 'main']}, fs)
        assert resolver.resolve('/proj/src', 'lib') == '/proj/node_modules/lib/esm/lib.js'
        assert _WebpackResolver({}, fs).resolve('/proj/src', 'lib') == '/proj/node_modules/lib/cjs/lib.js'

    def test_main_files(self, fs):
        resolver = _WebpackResolver({'mainFiles': ['main']}, fs)
        assert resolver.resolve('/proj/src', './components') == '/proj/src/components/main.js'

    def test_relative_modules_directory(self, fs):
        resolver = _WebpackResolver({'modules': ['src', 'node_modules'], 'extensions': ['.js', '.jsx']}, fs)
        assert resolver.resolve('/proj/src/components', 'components/button') == '/proj/src/components/button.jsx'


class TestLoadWebpackConfig:

    def test_json(self, project):
        config = load_webpack_config(os.path.join(project, 'webpack/webpack.config.json'))
        assert config['resolve']['alias']['R'] == 'resolve'

    def test_python_function(self, project):
        config = load_webpack_config(os.path.join(project, 'webpack/webpack-env.config.py'))
        assert 'F' in config['resolve']['alias']

    def test_python_without_config(self, make_tree):
        root = make_tree({'webpack.config.py': 'resolve = {}\n'})
        with pytest.raises(ConfigLoadError):
            load_webpack_config(os.path.join(root, 'webpack.config.py'))

    def test_python_that_raises(self, make_tree):
        root = make_tree({'webpack.config.py': 'raise RuntimeError("nope")\n'})
        with pytest.raises(ConfigLoadError):
            load_webpack_config(os.path.join(root, 'webpack.config.py'))

    def test_not_an_object(self, make_tree):
        root = make_tree({'webpack.config.json': '"just a string"'})
        with pytest.raises(ConfigLoadError):
            load_webpack_config(os.path.join(root, 'webpack.config.json'))

    def test_lookup_raises_for_missing_config(self, project):
        with pytest.raises(ConfigLoadError):
            webpack_lookup('R', os.path.join(project, 'webpack/index.js'), os.path.join(project, 'webpack'),
                           os.path.join(project, 'webpack/nope.config.json'))

    def test_config_changes_are_picked_up(self, make_tree):
        """Edits to a config file invalidate the cached options."""
        root = make_tree({
            'a.js': '', 'b.js': '', 'index.js': '',
            'webpack.config.json': '{"resolve": {"alias": {"X": "./a.js"}}}',
        })
        config = os.path.join(root, 'webpack.config.json')
        filename = os.path.join(root, 'index.js')
        assert webpack_lookup('X', filename, root, config) == os.path.join(root, 'a.js')

        with open(config, 'w', encoding='utf-8') as f:
            f.write('{"resolve": {"alias": {"X": "./b.js"}}}')
        stat = os.stat(config)
        os.utime(config, (stat.st_atime, stat.st_mtime + 10))

        assert webpack_lookup('X', filename, root, config) == os.path.join(root, 'b.js')
        assert [key for key in _resolve_cache if key[0] == config] == [(config, os.path.getmtime(config))]

    @requires_node
    def test_javascript_config(self, project):
        result = webpack_lookup(
            'J', os.path.join(project, 'webpack/index.js'), os.path.join(project, 'webpack'),
            os.path.join(project, 'webpack/webpack.config.js')
        )
        assert result == os.path.join(project, 'webpack/test/ast.js')
