from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class ScriptMetadata:
    """Metadata compiled alongside the script module."""

    schema_major_version: Any
    schema_minor_version: Any
    uses_binary_encoding: bool = True


@dataclass(frozen=True)
class ConfigUi:
    filename: Optional[str]
    content: Optional[str] = None


@dataclass(frozen=True)
class UserError:
    """Application-level validation failure reported by the script service."""

    message: str = ""
    field: Optional[str] = None
    tag: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "UserError":
        field = raw.get("field")
        if isinstance(field, list):
            field = ".".join(str(f) for f in field)
        return cls(
            message=str(raw.get("message") or ""),
            field=str(field) if field is not None else None,
            tag=str(raw.get("tag") or ""),
        )


@dataclass(frozen=True)
class RegisteredScript:
    uuid: str
    extension_point_name: str = ""
    title: str = ""
    app_key: str = ""
    config_schema: Optional[Any] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "RegisteredScript":
        # The server has reported the key as both appKey and apiKey.
        return cls(
            uuid=str(raw.get("uuid") or ""),
            extension_point_name=str(raw.get("extensionPointName") or ""),
            title=str(raw.get("title") or ""),
            app_key=str(raw.get("appKey") or raw.get("apiKey") or ""),
            config_schema=raw.get("configSchema"),
        )


@dataclass(frozen=True)
class Product:
    variant_id: str
