"""Generic HTTP plumbing for the OneFS Platform API."""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

import httpx

from isilonpapi.const import (
    API_VERSION_PATH,
    CONTENT_TYPE_BINARY,
    CONTENT_TYPE_JSON,
    DEFAULT_VOLUMES_PATH,
    FALLBACK_API_VERSION,
    HEADER_CONTENT_TYPE,
    MIN_API_VERSION,
    STREAM_CHUNK_SIZE,
)
from isilonpapi.core.params import OrderedValues
from isilonpapi.core.utils import build_url, volume_path
from isilonpapi.exceptions import (
    ClientConfigError,
    ErrorDetail,
    IsilonError,
    PapiDecodeError,
    PapiError,
    UnsupportedVersionError,
)

log = logging.getLogger("isilonpapi")

TIMEOUT_MINS = 20
DEFAULT_TIMEOUT = httpx.Timeout(TIMEOUT_MINS * 60, connect=10.0)


@dataclass
class ClientOptions:
    """Optional settings for :class:`PapiClient`.

    Args:
        insecure: Skip TLS certificate verification.
        volumes_path: Directory on the appliance that holds volumes.
        timeout: Overall request timeout in seconds; None keeps the default.
        transport: Custom ``httpx`` transport (connection pools, mocks).
        logger: Logger receiving request/response dumps at DEBUG level.
    """

    insecure: bool = False
    volumes_path: str = ""
    timeout: Optional[float] = None
    transport: Optional[httpx.BaseTransport] = None
    logger: Optional[logging.Logger] = None


@dataclass
class _LatestVersion:
    latest: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "_LatestVersion":
        if not isinstance(data, dict) or data.get("latest") is None:
            return cls()
        return cls(latest=str(data["latest"]))


def parse_api_version(value: str) -> Tuple[int, int]:
    """Split a PAPI version string such as ``"5"`` or ``"8.2"``."""
    major, _, minor = value.partition(".")
    try:
        return int(major), int(minor) if minor else 0
    except ValueError:
        raise IsilonError(f"invalid API version: {value!r}") from None


def _iter_stream(stream) -> Iterator[bytes]:
    try:
        while True:
            chunk = stream.read(STREAM_CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        close = getattr(stream, "close", None)
        if close is not None:
            close()


def marshal_body(body: Any) -> Tuple[Any, Optional[bytes], str]:
    """Turn a request body into ``(content, logged_bytes, content_type)``.

    Byte streams (anything with ``read()``) and raw bytes go out untouched as
    ``binary/octet-stream``. Everything else is JSON: objects exposing
    ``to_dict()`` are converted first, plain dicts and lists are encoded
    directly.
    """
    if hasattr(body, "read"):
        return _iter_stream(body), None, CONTENT_TYPE_BINARY
    if isinstance(body, (bytes, bytearray)):
        return bytes(body), None, CONTENT_TYPE_BINARY
    if hasattr(body, "to_dict"):
        body = body.to_dict()
    encoded = json.dumps(body).encode("utf-8")
    return encoded, encoded, CONTENT_TYPE_JSON


def unmarshal(resp_type: Any, data: Any) -> Any:
    if hasattr(resp_type, "from_dict"):
        return resp_type.from_dict(data)
    return resp_type(data)


def _dump_request(request: httpx.Request, body: Optional[bytes]) -> str:
    lines = [f"{request.method} {request.url}"]
    lines.extend(f"{k}: {v}" for k, v in request.headers.items())
    if body:
        lines.append("")
        lines.append(body.decode("utf-8", errors="replace"))
    return "\n".join(lines)


def _dump_response(response: httpx.Response) -> str:
    lines = [f"{response.http_version} {response.status_code} {response.reason_phrase}"]
    lines.extend(f"{k}: {v}" for k, v in response.headers.items())
    if response.content:
        lines.append("")
        lines.append(response.text)
    return "\n".join(lines)


def status_text(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


def parse_json_error(response: httpx.Response) -> PapiError:
    """Build a :class:`PapiError` from a non-2xx response."""
    errors = []
    try:
        data = json.loads(response.content) if response.content else {}
    except ValueError:
        data = {}
    if isinstance(data, dict):
        errors = [ErrorDetail.from_dict(e) for e in data.get("errors") or [] if isinstance(e, dict)]
    return PapiError(response.status_code, errors, status_text(response))


class PapiClient:
    """Authenticated HTTP client for the OneFS Platform API.

    Probes ``platform/latest`` on construction and refuses appliances older
    than OneFS 8.0. One instance may be shared between threads.

    Args:
        hostname: Base URL of the appliance, e.g. ``https://10.0.0.1:8080``.
        username: User for HTTP basic authentication.
        password: Password for HTTP basic authentication.
        group: Optional group used when assigning volume ownership.
        options: Optional :class:`ClientOptions`.
    """

    def __init__(
        self,
        hostname: str,
        username: str,
        password: str,
        group: str = "",
        options: Optional[ClientOptions] = None,
    ):
        if not hostname or not username or not password:
            raise ClientConfigError("missing endpoint, username, or password")
        options = options or ClientOptions()

        self.hostname = hostname
        self._username = username
        self._group = group or ""
        self._volumes_path = options.volumes_path or DEFAULT_VOLUMES_PATH
        self._auth = httpx.BasicAuth(username, password)
        self._log = options.logger or log
        self.api_version = 0
        self.api_minor_version = 0

        timeout = httpx.Timeout(options.timeout) if options.timeout else DEFAULT_TIMEOUT
        self._http = httpx.Client(
            verify=not options.insecure,
            timeout=timeout,
            transport=options.transport,
        )
        try:
            self._probe_version()
        except BaseException:
            self._http.close()
            raise

    def _probe_version(self):
        try:
            resp = self.get(API_VERSION_PATH, resp_type=_LatestVersion)
        except PapiDecodeError:
            resp = None

        if resp is not None and resp.latest is not None:
            self.api_version, self.api_minor_version = parse_api_version(resp.latest)
        else:
            self.api_version = FALLBACK_API_VERSION

        if self.api_version < MIN_API_VERSION:
            raise UnsupportedVersionError(self.api_version, MIN_API_VERSION)
        self._log.debug("connected to %s, PAPI version %d.%d",
                        self.hostname, self.api_version, self.api_minor_version)

    @property
    def user(self) -> str:
        return self._username

    @property
    def group(self) -> str:
        return self._group

    @property
    def volumes_path(self) -> str:
        return self._volumes_path

    def volume_path(self, name: str) -> str:
        return volume_path(self._volumes_path, name)

    def get(self, path: str, id: str = "", params: Optional[OrderedValues] = None,
            headers: Optional[Dict[str, str]] = None, resp_type: Any = None) -> Any:
        return self.do_with_headers("GET", path, id, params, headers, None, resp_type)

    def post(self, path: str, id: str = "", params: Optional[OrderedValues] = None,
             headers: Optional[Dict[str, str]] = None, body: Any = None, resp_type: Any = None) -> Any:
        return self.do_with_headers("POST", path, id, params, headers, body, resp_type)

    def put(self, path: str, id: str = "", params: Optional[OrderedValues] = None,
            headers: Optional[Dict[str, str]] = None, body: Any = None, resp_type: Any = None) -> Any:
        return self.do_with_headers("PUT", path, id, params, headers, body, resp_type)

    def delete(self, path: str, id: str = "", params: Optional[OrderedValues] = None,
               headers: Optional[Dict[str, str]] = None, resp_type: Any = None) -> Any:
        return self.do_with_headers("DELETE", path, id, params, headers, None, resp_type)

    def do(self, method: str, path: str, id: str = "", params: Optional[OrderedValues] = None,
           body: Any = None, resp_type: Any = None) -> Any:
        return self.do_with_headers(method, path, id, params, None, body, resp_type)

    def do_with_headers(
        self,
        method: str,
        path: str,
        id: str = "",
        params: Optional[OrderedValues] = None,
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
        resp_type: Any = None,
    ) -> Any:
        """Send a request and decode the reply.

        Returns None when ``resp_type`` is None or the 2xx body is empty,
        otherwise the decoded body passed through ``resp_type``. Raises
        :class:`PapiError` for any non-2xx status.
        """
        response = self.do_and_get_response(method, path, id, params, headers, body)
        if self._log.isEnabledFor(logging.DEBUG):
            self._log.debug(_dump_response(response))

        if not 200 <= response.status_code <= 299:
            raise parse_json_error(response)
        if resp_type is None:
            return None
        content = response.content
        if not content.strip():
            return None
        try:
            data = json.loads(content)
        except ValueError as e:
            raise PapiDecodeError(f"invalid JSON from {response.request.url}: {e}", content) from e
        return unmarshal(resp_type, data)

    def do_and_get_response(
        self,
        method: str,
        path: str,
        id: str = "",
        params: Optional[OrderedValues] = None,
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
    ) -> httpx.Response:
        """Send a request and return the raw response without checking the status."""
        url = build_url(self.hostname, path, id, params)
        req_headers = httpx.Headers(headers or {})

        content, logged_body = None, None
        if body is not None:
            content, logged_body, content_type = marshal_body(body)
            if HEADER_CONTENT_TYPE not in req_headers:
                req_headers[HEADER_CONTENT_TYPE] = content_type

        request = self._http.build_request(method, url, headers=req_headers, content=content)
        request = next(self._auth.auth_flow(request))

        if self._log.isEnabledFor(logging.DEBUG):
            self._log.debug(_dump_request(request, logged_body))

        try:
            return self._http.send(request)
        except httpx.HTTPError as e:
            self._log.debug("%s %s failed: %s", method, request.url, e)
            raise

    def close(self):
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
