from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol


class QueryLoader(Protocol):
    def load_query(self, name: str) -> str:
        raise NotImplementedError


class GraphqlTransport(Protocol):
    """Executes one named GraphQL operation and returns the parsed JSON body.

    Returns None when the server answered with an empty body. `api_key` is only
    used by transports that authenticate with the app key themselves.
    """

    def query(
        self,
        query_name: str,
        variables: Optional[Dict[str, Any]] = None,
        *,
        api_key: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        raise NotImplementedError


class ModuleUploader(Protocol):
    """Performs the binary PUT of a compiled module and reports the HTTP status."""

    def put(self, url: str, content: bytes, headers: Mapping[str, str]) -> int:
        raise NotImplementedError
