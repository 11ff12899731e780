# Path: core/errors.py
# Purpose: Define the error taxonomy shared by configuration, indexing, and serving layers.
# Layer: core.
# Details: Fatal startup errors and contained steady-state errors derive from one base class.

from __future__ import annotations


class FotodeckError(Exception):
    """Base class for all errors raised by the album server."""


class ConfigError(FotodeckError, ValueError):
    """Invalid or missing configuration. Fatal at startup, never retried."""


class ScanError(FotodeckError, OSError):
    """The directory walk could not complete; no partial results are returned."""


class CleanupError(FotodeckError, OSError):
    """One or more derivative files could not be deleted."""


class WatchInitError(FotodeckError, RuntimeError):
    """The filesystem notification subsystem could not be started."""


__all__ = ["FotodeckError", "ConfigError", "ScanError", "CleanupError", "WatchInitError"]
