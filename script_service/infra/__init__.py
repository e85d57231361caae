from __future__ import annotations

from .errors import (
    InfraError,
    ValidationError,
    QueryNotFoundError,
    TransportError,
    EmptyResponseError,
    ForbiddenError,
    ShopAuthenticationError,
    AppNotInstalledError,
    GraphqlError,
    ScriptRepushError,
    ConfigUiError,
    ConfigUiSyntaxError,
    ConfigUiMissingKeysError,
    ConfigUiInvalidInputModeError,
    ConfigUiFieldsMissingKeysError,
    ConfigUiFieldsInvalidTypeError,
    ScriptUploadError,
)

from .contracts import (
    QueryLoader,
    GraphqlTransport,
    ModuleUploader,
)

from .config import (
    ClientProfile,
    load_client_profile,
    resolve_client_profile_path,
)

from .queries import PackageQueryLoader

from .script_service import (
    MakeRequest,
    UploadScript,
    ScriptService,
    classify_user_errors,
    raise_if_graphql_failed,
)

__all__ = [
    "InfraError",
    "ValidationError",
    "QueryNotFoundError",
    "TransportError",
    "EmptyResponseError",
    "ForbiddenError",
    "ShopAuthenticationError",
    "AppNotInstalledError",
    "GraphqlError",
    "ScriptRepushError",
    "ConfigUiError",
    "ConfigUiSyntaxError",
    "ConfigUiMissingKeysError",
    "ConfigUiInvalidInputModeError",
    "ConfigUiFieldsMissingKeysError",
    "ConfigUiFieldsInvalidTypeError",
    "ScriptUploadError",
    "QueryLoader",
    "GraphqlTransport",
    "ModuleUploader",
    "ClientProfile",
    "load_client_profile",
    "resolve_client_profile_path",
    "PackageQueryLoader",
    "MakeRequest",
    "UploadScript",
    "ScriptService",
    "classify_user_errors",
    "raise_if_graphql_failed",
]
