from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

from ..context import ExecutionContext
from ..domain.errors import MetadataValidationError
from ..domain.models import ConfigUi, RegisteredScript, ScriptMetadata, UserError
from .adapters.graphql_http import partners_proxy_api, script_service_api
from .adapters.module_upload import HttpModuleUploader
from .config import ClientProfile
from .contracts import GraphqlTransport, ModuleUploader, QueryLoader
from .errors import (
    AppNotInstalledError,
    ConfigUiFieldsInvalidTypeError,
    ConfigUiFieldsMissingKeysError,
    ConfigUiInvalidInputModeError,
    ConfigUiMissingKeysError,
    ConfigUiSyntaxError,
    EmptyResponseError,
    ForbiddenError,
    GraphqlError,
    ScriptRepushError,
    ScriptUploadError,
    ShopAuthenticationError,
)
from .queries import PackageQueryLoader


logger = logging.getLogger(__name__)

BYPASS_PROXY_ENV_VAR = "BYPASS_PARTNERS_PROXY"
PROXY_QUERY_NAME = "script_service_proxy"
SCRIPT_JSON_VERSION = "1"
MODULE_CONTENT_TYPE = "application/wasm"

# Recognized `extensions.code` values; the first error entry carrying one of these wins.
ERROR_CODE_KINDS: Dict[str, type] = {
    "forbidden": ForbiddenError,
    "forbidden_on_shop": ShopAuthenticationError,
    "app_not_installed_on_shop": AppNotInstalledError,
}


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def _version_string(value: Any) -> str:
    return "" if value is None else str(value)


def dig(payload: Any, *path: str) -> Any:
    """Read a nested response field, failing with GraphqlError when the shape is unexpected."""
    cur = payload
    for key in path:
        if not isinstance(cur, dict) or key not in cur:
            raise GraphqlError([{"message": f"Unexpected response shape: missing {'.'.join(path)}"}])
        cur = cur[key]
    return cur


def error_code(errors: Sequence[Any]) -> Optional[str]:
    for e in errors or []:
        if not isinstance(e, dict):
            continue
        ext = e.get("extensions")
        code = ext.get("code") if isinstance(ext, dict) else None
        if code in ERROR_CODE_KINDS:
            return str(code)
    return None


def raise_if_graphql_failed(response: Optional[Dict[str, Any]]) -> None:
    if response is None:
        raise EmptyResponseError("Script service returned an empty response")
    if not isinstance(response, dict):
        raise GraphqlError([{"message": "Unexpected response shape: not an object"}])

    if "errors" not in response:
        return
    errors = response.get("errors") or []
    code = error_code(errors)
    if code is not None:
        raise ERROR_CODE_KINDS[code]()
    raise GraphqlError(errors)


class MakeRequest:
    """Runs one named script-service operation, directly or through the Partners proxy.

    The direct transport is used when the profile forces it or when
    BYPASS_PARTNERS_PROXY is set in the context environment.
    """

    def __init__(
        self,
        ctx: ExecutionContext,
        *,
        profile: Optional[ClientProfile] = None,
        query_loader: Optional[QueryLoader] = None,
        direct_transport: Optional[GraphqlTransport] = None,
        proxy_transport: Optional[GraphqlTransport] = None,
    ):
        self.ctx = ctx
        self.profile = profile if profile is not None else ClientProfile()
        self.query_loader: QueryLoader = query_loader if query_loader is not None else PackageQueryLoader()
        self._direct_transport = direct_transport
        self._proxy_transport = proxy_transport

    def bypass_proxy(self) -> bool:
        if self.profile.bypass_proxy is not None:
            return bool(self.profile.bypass_proxy)
        return bool(self.ctx.getenv(BYPASS_PROXY_ENV_VAR))

    def _direct(self) -> GraphqlTransport:
        if self._direct_transport is None:
            self._direct_transport = script_service_api(self.profile, query_loader=self.query_loader)
        return self._direct_transport

    def _proxy(self) -> GraphqlTransport:
        if self._proxy_transport is None:
            self._proxy_transport = partners_proxy_api(self.ctx, self.profile, query_loader=self.query_loader)
        return self._proxy_transport

    def call(
        self,
        query_name: str,
        api_key: Optional[str] = None,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if self.bypass_proxy():
            logger.debug("script service request %s (direct)", query_name)
            resp = self._direct().query(query_name, variables, api_key=api_key)
        else:
            logger.debug("script service request %s (partners proxy)", query_name)
            resp = self.proxy_through_partners(query_name, api_key=api_key, variables=variables)
        raise_if_graphql_failed(resp)
        return resp  # type: ignore[return-value]

    def proxy_through_partners(
        self,
        query_name: str,
        *,
        api_key: Optional[str] = None,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        proxy_variables: Dict[str, Any] = {
            "api_key": api_key,
            "query": self.query_loader.load_query(query_name),
        }
        if variables is not None:
            proxy_variables["variables"] = _compact_json(variables)

        resp = self._proxy().query(PROXY_QUERY_NAME, proxy_variables)
        raise_if_graphql_failed(resp)

        inner = dig(resp, "data", "scriptServiceProxy")
        if inner is None:
            return None
        try:
            return json.loads(inner)
        except (TypeError, ValueError) as e:
            raise GraphqlError([{"message": f"scriptServiceProxy payload is not valid JSON: {e}"}]) from e


class UploadScript:
    """Obtains a single-use upload URL and PUTs the compiled module to it."""

    def __init__(
        self,
        ctx: ExecutionContext,
        *,
        request: Optional[MakeRequest] = None,
        uploader: Optional[ModuleUploader] = None,
        profile: Optional[ClientProfile] = None,
    ):
        self.ctx = ctx
        self.profile = profile if profile is not None else (request.profile if request is not None else ClientProfile())
        self.request = request if request is not None else MakeRequest(ctx, profile=self.profile)
        self.uploader: ModuleUploader = (
            uploader if uploader is not None else HttpModuleUploader(timeout_s=self.profile.upload_timeout_s)
        )

    def call(self, api_key: Optional[str], script_content: Union[bytes, str]) -> str:
        url = self._apply_module_upload_url(api_key)
        self._upload(url, script_content)
        return url

    def _apply_module_upload_url(self, api_key: Optional[str]) -> str:
        resp = self.request.call("module_upload_url_generate", api_key=api_key, variables={})
        user_errors = dig(resp, "data", "moduleUploadUrlGenerate", "userErrors") or []
        if user_errors:
            raise GraphqlError(user_errors)

        url = str(dig(resp, "data", "moduleUploadUrlGenerate", "url") or "").strip()
        if not url:
            raise GraphqlError([{"message": "moduleUploadUrlGenerate returned no url"}])
        return url

    def _upload(self, url: str, script_content: Union[bytes, str]) -> None:
        content = script_content.encode("utf-8") if isinstance(script_content, str) else bytes(script_content)
        status = self.uploader.put(url, content, {"Content-Type": MODULE_CONTENT_TYPE})
        if int(status) != 200:
            raise ScriptUploadError(int(status))


UserErrorBuilder = Callable[[Optional[str], Optional[str], UserError], Exception]

# Evaluated in order; the first rule whose tags match any user error wins,
# independent of where that error sits in the list.
USER_ERROR_RULES: Tuple[Tuple[FrozenSet[str], UserErrorBuilder], ...] = (
    (frozenset({"already_exists_error"}), lambda uuid, filename, e: ScriptRepushError(uuid)),
    (frozenset({"config_ui_syntax_error"}), lambda uuid, filename, e: ConfigUiSyntaxError(filename)),
    (
        frozenset({"config_ui_missing_keys_error"}),
        lambda uuid, filename, e: ConfigUiMissingKeysError(filename, e.message),
    ),
    (
        frozenset({"config_ui_invalid_input_mode_error"}),
        lambda uuid, filename, e: ConfigUiInvalidInputModeError(filename, e.message),
    ),
    (
        frozenset({"config_ui_fields_missing_keys_error"}),
        lambda uuid, filename, e: ConfigUiFieldsMissingKeysError(filename, e.message),
    ),
    (
        frozenset({"config_ui_fields_invalid_type_error"}),
        lambda uuid, filename, e: ConfigUiFieldsInvalidTypeError(filename, e.message),
    ),
    (
        frozenset({"not_use_msgpack_error", "schema_version_argument_error"}),
        lambda uuid, filename, e: MetadataValidationError(),
    ),
)


def classify_user_errors(
    user_errors: Sequence[Dict[str, Any]],
    *,
    uuid: Optional[str],
    config_ui: Optional[ConfigUi],
) -> Exception:
    parsed = [UserError.from_dict(e) for e in user_errors if isinstance(e, dict)]
    filename = config_ui.filename if config_ui is not None else None
    for tags, build in USER_ERROR_RULES:
        match = next((e for e in parsed if e.tag in tags), None)
        if match is not None:
            return build(uuid, filename, match)
    return GraphqlError(list(user_errors))


class ScriptService:
    def __init__(
        self,
        ctx: ExecutionContext,
        *,
        profile: Optional[ClientProfile] = None,
        request: Optional[MakeRequest] = None,
        upload: Optional[UploadScript] = None,
    ):
        self.ctx = ctx
        self.profile = profile if profile is not None else ClientProfile()
        self.request = request if request is not None else MakeRequest(ctx, profile=self.profile)
        self.upload = upload if upload is not None else UploadScript(ctx, request=self.request, profile=self.profile)

    def push(
        self,
        *,
        uuid: Optional[str],
        extension_point_type: str,
        script_name: str,
        script_content: Union[bytes, str],
        metadata: ScriptMetadata,
        config_ui: Optional[ConfigUi],
        api_key: Optional[str] = None,
        force: bool = False,
        configuration_definition: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Upload the module, register it, and return the script uuid assigned by the server."""
        script = self.push_script(
            uuid=uuid,
            extension_point_type=extension_point_type,
            script_name=script_name,
            script_content=script_content,
            metadata=metadata,
            config_ui=config_ui,
            api_key=api_key,
            force=force,
            configuration_definition=configuration_definition,
        )
        return script.uuid

    def push_script(
        self,
        *,
        uuid: Optional[str],
        extension_point_type: str,
        script_name: str,
        script_content: Union[bytes, str],
        metadata: ScriptMetadata,
        config_ui: Optional[ConfigUi],
        api_key: Optional[str] = None,
        force: bool = False,
        configuration_definition: Optional[Dict[str, Any]] = None,
    ) -> RegisteredScript:
        """Same as push, returning the full registered record.

        Raises:
            ScriptUploadError, GraphqlError: the upload step failed.
            ScriptRepushError: the script exists and force was not set.
            ConfigUiError subclasses: the config UI file was rejected.
            MetadataValidationError: encoding or schema version was rejected.
        """
        url = self.upload.call(api_key, script_content)

        definition = (
            configuration_definition
            if configuration_definition is not None
            else self.profile.configuration_definition
        )
        variables = {
            "uuid": uuid,
            "extensionPointName": extension_point_type.upper(),
            "title": script_name,
            "force": force,
            # API expects string values for schema versions
            "schemaMajorVersion": _version_string(metadata.schema_major_version),
            "schemaMinorVersion": _version_string(metadata.schema_minor_version),
            "scriptJsonVersion": SCRIPT_JSON_VERSION,
            "configurationUi": True,
            "configurationDefinition": _compact_json(definition),
            "moduleUploadUrl": url,
        }
        resp = self.request.call("app_script_set", api_key=api_key, variables=variables)

        user_errors = dig(resp, "data", "appScriptSet", "userErrors") or []
        if user_errors:
            logger.debug("app_script_set returned %d user error(s)", len(user_errors))
            raise classify_user_errors(user_errors, uuid=uuid, config_ui=config_ui)

        app_script = dig(resp, "data", "appScriptSet", "appScript")
        if not isinstance(app_script, dict) or not app_script.get("uuid"):
            raise GraphqlError([{"message": "appScriptSet returned no appScript"}])
        return RegisteredScript.from_dict(app_script)

    def get_app_scripts(self, *, api_key: Optional[str], extension_point_type: str) -> List[Dict[str, Any]]:
        variables = {"appKey": api_key, "extensionPointName": extension_point_type.upper()}
        resp = self.request.call("get_app_scripts", api_key=api_key, variables=variables)
        scripts = dig(resp, "data", "appScripts")
        if scripts is None:
            raise GraphqlError([{"message": "appScripts missing from response"}])
        return list(scripts)

    def list_scripts(self, *, api_key: Optional[str], extension_point_type: str) -> List[RegisteredScript]:
        raw = self.get_app_scripts(api_key=api_key, extension_point_type=extension_point_type)
        return [RegisteredScript.from_dict(s) for s in raw if isinstance(s, dict)]
