from __future__ import annotations

from .errors import MetadataValidationError, ScriptProjectError
from .models import ConfigUi, Product, RegisteredScript, ScriptMetadata, UserError

__all__ = [
    "ConfigUi",
    "MetadataValidationError",
    "Product",
    "RegisteredScript",
    "ScriptMetadata",
    "ScriptProjectError",
    "UserError",
]
