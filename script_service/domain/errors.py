from __future__ import annotations


class ScriptProjectError(Exception):
    """Base class for errors about the script being pushed."""


class MetadataValidationError(ScriptProjectError):
    """The server rejected the script metadata (binary encoding or schema version)."""
