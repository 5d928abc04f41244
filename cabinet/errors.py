"""
Exceptions raised by cabinet.

Ordinary "not found" outcomes are never exceptions; resolvers return ''.
"""


class CabinetError(Exception):
    """Base exception for resolver errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TsConfigError(CabinetError, ValueError):
    """A TypeScript config could not be parsed. Propagates to the caller."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            f"Invalid TypeScript config {source}: {reason}",
            details={'source': source, 'reason': reason}
        )


class ConfigLoadError(CabinetError):
    """A bundler or AMD config could not be loaded or evaluated."""

    def __init__(self, config_file: str, reason: str):
        super().__init__(
            f"Could not load config {config_file}: {reason}",
            details={'config_file': config_file, 'reason': reason}
        )
