"""
Lookup delegates, one per module system or stylesheet language.
"""

from .amd import amd_lookup
from .commonjs import commonjs_lookup
from .generic import generic_lookup
from .sass import sass_lookup
from .stylus import stylus_lookup
from .typescript import ts_lookup
from .webpack import webpack_lookup

__all__ = [
    'amd_lookup',
    'commonjs_lookup',
    'generic_lookup',
    'sass_lookup',
    'stylus_lookup',
    'ts_lookup',
    'webpack_lookup',
]
