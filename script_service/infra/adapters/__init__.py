from __future__ import annotations

from .graphql_http import (
    GraphqlHttpTransport,
    PartnersProxyAPI,
    ScriptServiceAPI,
    partners_proxy_api,
    script_service_api,
)
from .module_upload import HttpModuleUploader

__all__ = [
    "GraphqlHttpTransport",
    "PartnersProxyAPI",
    "ScriptServiceAPI",
    "partners_proxy_api",
    "script_service_api",
    "HttpModuleUploader",
]
