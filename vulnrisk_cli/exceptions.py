from __future__ import annotations


class VulnRiskError(Exception):
    """Base exception with user-friendly message."""
    pass


class ConfigError(VulnRiskError):
    pass


class ImportFileError(VulnRiskError):
    pass


class UnsupportedFileError(ImportFileError):
    pass
