from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests

from ...context import ExecutionContext
from ..config import ClientProfile
from ..contracts import GraphqlTransport, QueryLoader
from ..errors import TransportError, ValidationError
from ..queries import PackageQueryLoader


logger = logging.getLogger(__name__)


class GraphqlHttpTransport(GraphqlTransport):
    """POSTs `{query, variables}` to a GraphQL endpoint and returns the decoded body."""

    def __init__(
        self,
        *,
        url: str,
        query_loader: Optional[QueryLoader] = None,
        timeout_s: float = 60,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.query_loader: QueryLoader = query_loader if query_loader is not None else PackageQueryLoader()
        self.timeout_s = timeout_s
        self.session = session if session is not None else requests.Session()

    def _headers(self, api_key: Optional[str]) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def query(
        self,
        query_name: str,
        variables: Optional[Dict[str, Any]] = None,
        *,
        api_key: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        payload = {"query": self.query_loader.load_query(query_name), "variables": variables or {}}
        logger.debug("POST %s operation=%s", self.url, query_name)
        try:
            r = self.session.post(
                self.url,
                json=payload,
                headers=self._headers(api_key),
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            raise TransportError(f"GraphQL request {query_name} failed: {e}") from e

        if not 200 <= int(r.status_code) < 300:
            raise TransportError(
                f"GraphQL request {query_name} failed: {r.status_code}: {r.text[:2000]}",
                status_code=int(r.status_code),
                body=r.text[:2000],
            )
        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise TransportError(
                f"GraphQL request {query_name} returned a non-JSON body",
                status_code=int(r.status_code),
                body=r.text[:2000],
            ) from e


class ScriptServiceAPI(GraphqlHttpTransport):
    """Direct transport; authenticates with the app key in a token map header."""

    def _headers(self, api_key: Optional[str]) -> Dict[str, str]:
        headers = super()._headers(api_key)
        tokens = {"APP_KEY": api_key} if api_key is not None else {}
        headers["X-Shopify-Authenticated-Tokens"] = json.dumps(tokens, separators=(",", ":"))
        return headers


class PartnersProxyAPI(GraphqlHttpTransport):
    """Partners GraphQL endpoint; the app key travels inside the proxied variables."""

    def __init__(self, *, token: str, **kwargs: Any):
        super().__init__(**kwargs)
        self._token = token

    def _headers(self, api_key: Optional[str]) -> Dict[str, str]:
        headers = super()._headers(api_key)
        headers["Authorization"] = f"Bearer {self._token}"
        return headers


def script_service_api(
    profile: ClientProfile,
    *,
    query_loader: Optional[QueryLoader] = None,
    session: Optional[requests.Session] = None,
) -> ScriptServiceAPI:
    return ScriptServiceAPI(
        url=profile.script_service_url,
        query_loader=query_loader,
        timeout_s=profile.timeout_s,
        session=session,
    )


def partners_proxy_api(
    ctx: ExecutionContext,
    profile: ClientProfile,
    *,
    query_loader: Optional[QueryLoader] = None,
    session: Optional[requests.Session] = None,
) -> PartnersProxyAPI:
    token = str(ctx.getenv(profile.partners_token_env_var) or "").strip()
    if not token:
        raise ValidationError(
            f"Missing Partners token in env var {profile.partners_token_env_var}. "
            "Required unless BYPASS_PARTNERS_PROXY is set."
        )
    return PartnersProxyAPI(
        token=token,
        url=profile.partners_url,
        query_loader=query_loader,
        timeout_s=profile.timeout_s,
        session=session,
    )
