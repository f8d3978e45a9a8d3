"""Exceptions raised by vimbrowser.

Only startup problems raise; everything else is reported through the
messenger and surfaces to callers as ``None``/``False``.
"""


class BrowserError(Exception):
    """Base class for vimbrowser errors."""


class ConfigError(BrowserError):
    """Invalid configuration, fatal at startup."""
