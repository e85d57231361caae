from __future__ import annotations

import json
import unittest

from _testutil import FakeQueryLoader, ensure_repo_on_path


class FakeResponse:
    def __init__(self, status_code: int = 200, body: bytes = b""):
        self.status_code = status_code
        self.content = body
        self.text = body.decode("utf-8", errors="ignore")

    def json(self):
        return json.loads(self.text)


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response if response is not None else FakeResponse()
        self.exc = exc
        self.posts = []
        self.puts = []

    def post(self, url, **kwargs):
        self.posts.append((url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.response

    def put(self, url, **kwargs):
        self.puts.append((url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.response


class TestScriptServiceAPI(unittest.TestCase):
    def setUp(self) -> None:
        ensure_repo_on_path()

    def test_posts_query_with_app_key_header(self) -> None:
        from script_service.infra.adapters.graphql_http import ScriptServiceAPI

        session = FakeSession(FakeResponse(200, b'{"data": {"appScripts": []}}'))
        api = ScriptServiceAPI(url="https://script-service.test/graphql", query_loader=FakeQueryLoader(), session=session)

        resp = api.query("get_app_scripts", {"appKey": "fake_key"}, api_key="fake_key")

        self.assertEqual(resp, {"data": {"appScripts": []}})
        url, kwargs = session.posts[0]
        self.assertEqual(url, "https://script-service.test/graphql")
        self.assertEqual(kwargs["json"], {"query": "query get_app_scripts", "variables": {"appKey": "fake_key"}})
        self.assertEqual(kwargs["headers"]["X-Shopify-Authenticated-Tokens"], '{"APP_KEY":"fake_key"}')
        self.assertEqual(kwargs["timeout"], 60)

    def test_missing_app_key_sends_empty_token_map(self) -> None:
        from script_service.infra.adapters.graphql_http import ScriptServiceAPI

        session = FakeSession(FakeResponse(200, b"{}"))
        api = ScriptServiceAPI(url="https://script-service.test/graphql", query_loader=FakeQueryLoader(), session=session)

        api.query("module_upload_url_generate")

        self.assertEqual(session.posts[0][1]["headers"]["X-Shopify-Authenticated-Tokens"], "{}")
        self.assertEqual(session.posts[0][1]["json"]["variables"], {})

    def test_empty_body_returns_none(self) -> None:
        from script_service.infra.adapters.graphql_http import ScriptServiceAPI

        api = ScriptServiceAPI(url="u", query_loader=FakeQueryLoader(), session=FakeSession(FakeResponse(200, b"")))

        self.assertIsNone(api.query("get_app_scripts"))

    def test_http_failure_raises_transport_error(self) -> None:
        from script_service.infra.adapters.graphql_http import ScriptServiceAPI
        from script_service.infra.errors import TransportError

        api = ScriptServiceAPI(url="u", query_loader=FakeQueryLoader(), session=FakeSession(FakeResponse(502, b"bad gateway")))

        with self.assertRaises(TransportError) as cm:
            api.query("get_app_scripts")
        self.assertEqual(cm.exception.status_code, 502)
        self.assertEqual(cm.exception.body, "bad gateway")

    def test_non_json_body_raises_transport_error(self) -> None:
        from script_service.infra.adapters.graphql_http import ScriptServiceAPI
        from script_service.infra.errors import TransportError

        api = ScriptServiceAPI(url="u", query_loader=FakeQueryLoader(), session=FakeSession(FakeResponse(200, b"<html>")))

        with self.assertRaises(TransportError):
            api.query("get_app_scripts")

    def test_connection_error_raises_transport_error(self) -> None:
        import requests

        from script_service.infra.adapters.graphql_http import ScriptServiceAPI
        from script_service.infra.errors import TransportError

        api = ScriptServiceAPI(
            url="u",
            query_loader=FakeQueryLoader(),
            session=FakeSession(exc=requests.ConnectionError("refused")),
        )

        with self.assertRaises(TransportError):
            api.query("get_app_scripts")


class TestPartnersProxyAPI(unittest.TestCase):
    def setUp(self) -> None:
        ensure_repo_on_path()

    def test_factory_reads_token_from_context(self) -> None:
        from script_service.context import LocalContext
        from script_service.infra.adapters.graphql_http import partners_proxy_api
        from script_service.infra.config import ClientProfile

        session = FakeSession(FakeResponse(200, b'{"data": {"scriptServiceProxy": "{}"}}'))
        profile = ClientProfile(partners_url="https://partners.test/graphql", timeout_s=5)
        api = partners_proxy_api(
            LocalContext(env={"SHOPIFY_PARTNERS_TOKEN": "tok"}),
            profile,
            query_loader=FakeQueryLoader(),
            session=session,
        )

        api.query("script_service_proxy", {"api_key": "k", "query": "q", "variables": "{}"})

        url, kwargs = session.posts[0]
        self.assertEqual(url, "https://partners.test/graphql")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer tok")
        self.assertNotIn("X-Shopify-Authenticated-Tokens", kwargs["headers"])
        self.assertEqual(kwargs["json"]["query"], "query script_service_proxy")
        self.assertEqual(kwargs["timeout"], 5)

    def test_factory_requires_token(self) -> None:
        from script_service.context import LocalContext
        from script_service.infra.adapters.graphql_http import partners_proxy_api
        from script_service.infra.config import ClientProfile
        from script_service.infra.errors import ValidationError

        with self.assertRaises(ValidationError):
            partners_proxy_api(LocalContext(env={"SHOPIFY_PARTNERS_TOKEN": "  "}), ClientProfile())


class TestHttpModuleUploader(unittest.TestCase):
    def setUp(self) -> None:
        ensure_repo_on_path()

    def test_put_returns_status(self) -> None:
        from script_service.infra.adapters.module_upload import HttpModuleUploader

        session = FakeSession(FakeResponse(200))
        uploader = HttpModuleUploader(timeout_s=30, session=session)

        status = uploader.put("https://some-bucket", b"\x00asm", {"Content-Type": "application/wasm"})

        self.assertEqual(status, 200)
        url, kwargs = session.puts[0]
        self.assertEqual(url, "https://some-bucket")
        self.assertEqual(kwargs["data"], b"\x00asm")
        self.assertEqual(kwargs["headers"], {"Content-Type": "application/wasm"})
        self.assertEqual(kwargs["timeout"], 30)

    def test_request_exception_raises_transport_error(self) -> None:
        import requests

        from script_service.infra.adapters.module_upload import HttpModuleUploader
        from script_service.infra.errors import TransportError

        uploader = HttpModuleUploader(session=FakeSession(exc=requests.Timeout("slow")))

        with self.assertRaises(TransportError):
            uploader.put("https://some-bucket", b"", {})


if __name__ == "__main__":
    unittest.main()
