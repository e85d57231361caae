from __future__ import annotations

from typing import Any, List, Optional


class InfraError(Exception):
    """Base class for infra layer errors."""


class ValidationError(InfraError):
    """Raised when a profile, setting, or input fails validation."""


class QueryNotFoundError(InfraError):
    """Raised when a named GraphQL document is not shipped with the package."""


class TransportError(InfraError):
    """Raised when an HTTP exchange fails before a GraphQL payload is available."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class EmptyResponseError(InfraError):
    """Raised when the transport returned no response object at all."""


class ForbiddenError(InfraError):
    """Raised for the `forbidden` extension code."""


class ShopAuthenticationError(InfraError):
    """Raised for the `forbidden_on_shop` extension code."""


class AppNotInstalledError(InfraError):
    """Raised for the `app_not_installed_on_shop` extension code."""


class GraphqlError(InfraError):
    """Server-reported errors or user errors that have no dedicated kind.

    `errors` keeps the raw list for diagnostics.
    """

    def __init__(self, errors: List[Any]):
        self.errors = list(errors or [])
        messages = [str(e.get("message", "")) if isinstance(e, dict) else str(e) for e in self.errors]
        super().__init__("; ".join(m for m in messages if m) or "GraphQL request failed")


class ScriptRepushError(InfraError):
    """Raised when a script with this uuid already exists and force was not set."""

    def __init__(self, uuid: Optional[str]):
        super().__init__(f"Script {uuid!r} already exists; push again with force to overwrite")
        self.uuid = uuid


class ConfigUiError(InfraError):
    """Base class for configuration-UI documents rejected by the server."""

    def __init__(self, filename: Optional[str], message: str = ""):
        detail = f": {message}" if message else ""
        super().__init__(f"Invalid config UI file {filename!r}{detail}")
        self.filename = filename
        self.message = message


class ConfigUiSyntaxError(ConfigUiError):
    def __init__(self, filename: Optional[str]):
        super().__init__(filename)


class ConfigUiMissingKeysError(ConfigUiError):
    pass


class ConfigUiInvalidInputModeError(ConfigUiError):
    pass


class ConfigUiFieldsMissingKeysError(ConfigUiError):
    pass


class ConfigUiFieldsInvalidTypeError(ConfigUiError):
    pass


class ScriptUploadError(InfraError):
    """Raised when the binary PUT to the upload URL did not return 200."""

    def __init__(self, status_code: Optional[int] = None):
        super().__init__(f"Script upload failed with status {status_code}")
        self.status_code = status_code
