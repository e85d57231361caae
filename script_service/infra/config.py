from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema

from ..utils.yamlio import read_yaml
from .errors import ValidationError


SCRIPT_SERVICE_URL = "https://script-service.myshopify.io/graphql"
PARTNERS_URL = "https://partners.shopify.com/api/cli/graphql"
PARTNERS_TOKEN_ENV_VAR = "SHOPIFY_PARTNERS_TOKEN"

# Placeholder definition sent with every push until callers provide their own.
DEFAULT_CONFIGURATION_DEFINITION: Dict[str, Any] = {
    "type": "single",
    "schema": [
        {
            "key": "stylePrefix",
            "name": "Product style tag prefix",
            "type": "single_line_text_field",
            "defaultValue": "style:",
        }
    ],
}


def _default_configuration_definition() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_CONFIGURATION_DEFINITION)


@dataclass(frozen=True)
class ClientProfile:
    """Endpoints and request settings for the script service client.

    bypass_proxy:
      - None defers to the BYPASS_PARTNERS_PROXY environment flag
      - True/False forces the direct or proxied transport
    """

    profile_name: str = "default"
    script_service_url: str = SCRIPT_SERVICE_URL
    partners_url: str = PARTNERS_URL
    partners_token_env_var: str = PARTNERS_TOKEN_ENV_VAR
    bypass_proxy: Optional[bool] = None
    timeout_s: float = 60
    upload_timeout_s: float = 120
    configuration_definition: Dict[str, Any] = field(default_factory=_default_configuration_definition)


def resolve_client_profile_path(repo_root: Path, cli_path: Optional[str] = None) -> Path:
    """Resolve the client profile YAML path.

    Precedence:
      1) explicit path argument
      2) SCRIPT_SERVICE_PROFILE
      3) <repo_root>/config/script_service.yml
    """
    if cli_path and str(cli_path).strip():
        return Path(str(cli_path).strip()).expanduser().resolve()

    env_path = str(os.environ.get("SCRIPT_SERVICE_PROFILE", "") or "").strip()
    if env_path:
        return Path(env_path).expanduser().resolve()

    return (Path(repo_root) / "config" / "script_service.yml").resolve()


def _profile_schema() -> Dict[str, Any]:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "required": ["profile_name"],
        "properties": {
            "profile_name": {"type": "string", "minLength": 1},
            "description": {"type": "string"},
            "script_service_url": {"type": "string", "minLength": 1},
            "partners_url": {"type": "string", "minLength": 1},
            "partners_token_env_var": {"type": "string", "minLength": 1},
            "bypass_proxy": {"type": ["boolean", "null"]},
            "timeout_s": {"type": "number", "exclusiveMinimum": 0},
            "upload_timeout_s": {"type": "number", "exclusiveMinimum": 0},
            "configuration_definition": {
                "type": "object",
                "required": ["type", "schema"],
                "properties": {
                    "type": {"type": "string"},
                    "schema": {"type": "array", "items": {"type": "object"}},
                },
            },
        },
        "additionalProperties": False,
    }


def _validate_dict(data: Dict[str, Any], path: Path) -> None:
    try:
        jsonschema.validate(instance=data, schema=_profile_schema())
    except jsonschema.ValidationError as e:
        raise ValidationError(f"client profile schema validation failed: {path}: {e.message}") from e


def load_client_profile(repo_root: Path, cli_path: Optional[str] = None) -> ClientProfile:
    """Load and validate a client profile.

    Environment overrides:
      - SCRIPT_SERVICE_PROFILE (file path)
    """
    path = resolve_client_profile_path(repo_root, cli_path)
    if not path.exists():
        raise ValidationError(f"client profile not found: {path}")

    try:
        data = read_yaml(path)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    _validate_dict(data, path)

    defaults = ClientProfile()
    definition = data.get("configuration_definition")
    return ClientProfile(
        profile_name=str(data["profile_name"]).strip(),
        script_service_url=str(data.get("script_service_url") or defaults.script_service_url),
        partners_url=str(data.get("partners_url") or defaults.partners_url),
        partners_token_env_var=str(data.get("partners_token_env_var") or defaults.partners_token_env_var),
        bypass_proxy=data.get("bypass_proxy"),
        timeout_s=float(data.get("timeout_s", defaults.timeout_s)),
        upload_timeout_s=float(data.get("upload_timeout_s", defaults.upload_timeout_s)),
        configuration_definition=dict(definition) if definition is not None else _default_configuration_definition(),
    )
