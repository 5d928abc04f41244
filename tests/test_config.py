"""
Tests for the YAML project configuration.
"""

import logging
import os

from cabinet.config import CabinetConfig, find_config_file, load_config


class TestLoadConfig:

    def test_defaults(self):
        assert load_config(None) == CabinetConfig()
        assert load_config('/does/not/exist.yml') == CabinetConfig()

    def test_paths_are_relative_to_config(self, make_tree):
        root = make_tree({'.cabinet.yml': (
            'directory: src\n'
            'webpack_config: build/webpack.config.js\n'
            'node_modules_entry: module\n'
            'no_type_definitions: true\n'
            'log_level: DEBUG\n'
        )})
        config = load_config(os.path.join(root, '.cabinet.yml'))

        assert config.directory == os.path.join(root, 'src')
        assert config.webpack_config == os.path.join(root, 'build', 'webpack.config.js')
        assert config.node_modules_entry == 'module'
        assert config.no_type_definitions is True
        assert config.log_level == 'DEBUG'
        assert config.ts_config is None

    def test_unknown_keys_warn(self, make_tree, caplog):
        root = make_tree({'cabinet.yml': 'directory: .\nmystery: 1\n'})
        with caplog.at_level(logging.WARNING, logger='cabinet.config'):
            config = load_config(os.path.join(root, 'cabinet.yml'))

        assert config.directory == root
        assert 'mystery' in caplog.text

    def test_invalid_yaml_falls_back(self, make_tree, caplog):
        root = make_tree({'cabinet.yml': 'directory: [unclosed\n'})
        with caplog.at_level(logging.WARNING, logger='cabinet.config'):
            config = load_config(os.path.join(root, 'cabinet.yml'))

        assert config == CabinetConfig()
        assert 'Failed to load config' in caplog.text

    def test_non_mapping_falls_back(self, make_tree):
        root = make_tree({'cabinet.yml': '- a\n- b\n'})
        assert load_config(os.path.join(root, 'cabinet.yml')) == CabinetConfig()

    def test_empty_file(self, make_tree):
        root = make_tree({'cabinet.yml': ''})
        assert load_config(os.path.join(root, 'cabinet.yml')) == CabinetConfig()


class TestFindConfigFile:

    def test_walks_up(self, make_tree):
        root = make_tree({
            '.cabinet.yaml': '',
            'src': {'app': {'main.js': ''}},
        })
        assert find_config_file(os.path.join(root, 'src', 'app', 'main.js')) == os.path.join(root, '.cabinet.yaml')

    def test_preference_order(self, make_tree):
        root = make_tree({'cabinet.yml': '', '.cabinet.yml': ''})
        assert find_config_file(root) == os.path.join(root, '.cabinet.yml')
