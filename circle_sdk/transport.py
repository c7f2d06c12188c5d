"""
HTTP transport for the Circle API.

Every Circle endpoint speaks the same envelope protocol:

- success bodies are ``{"data": <payload>}``
- error bodies are ``{"code": <int|null>, "message": <str>}``, with the raw
  body text used as the message when it does not parse

This module builds requests (base URL join, JSON headers, bearer auth),
executes them and unwraps or maps the response. It holds no per-request
state, so one client can be shared across threads. It never retries and
never generates idempotency keys or ciphertexts itself.
"""
import json
import logging
import urllib.parse
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, Union

import requests
from pydantic import BaseModel, ValidationError
from requests.adapters import HTTPAdapter

from ._log import headers_for_log, rate_limited_log, sanitize_payload
from .exceptions import ApiError, ConfigError, DecodeResponseError, TransportError
from .models import ErrorResponse, ResponseEnvelope
from .version import __version__

Body = Union[BaseModel, Mapping[str, Any], None]
QueryParams = Union[BaseModel, Mapping[str, Any], None]


def path_segment(value: Any) -> str:
    """Percent-encode one path segment so IDs containing '/' or '..' stay in place."""
    return urllib.parse.quote(str(value), safe="")


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def build_query_params(params: QueryParams) -> str:
    """
    Flatten query parameters into a percent-encoded query string.

    Parameters that are unset (``None``) or empty strings are left out so no
    meaningless query terms are sent.

    Args:
        params: Pydantic model (dumped by alias) or plain mapping

    Returns:
        Query string without a leading ``?``; empty if nothing remains
    """
    if params is None:
        return ""
    if isinstance(params, BaseModel):
        items = params.model_dump(by_alias=True, mode="json").items()
    elif isinstance(params, Mapping):
        items = params.items()
    else:
        raise TypeError(f"Query parameters must be a model or mapping, got {type(params).__name__}")

    pairs = []
    for key, value in items:
        if value is None:
            continue
        text = _query_value(value)
        if text == "":
            continue
        pairs.append(
            f"{urllib.parse.quote(str(key), safe='')}={urllib.parse.quote(text, safe='')}"
        )
    return "&".join(pairs)


def _serialize_body(body: Body) -> Optional[Dict[str, Any]]:
    if body is None:
        return None
    if isinstance(body, BaseModel):
        return body.model_dump(by_alias=True, exclude_none=True, mode="json")
    return dict(body)


def _unwrap(model: Optional[Type[Any]], payload: Any) -> Any:
    if model is None:
        return payload
    try:
        if isinstance(model, type) and issubclass(model, BaseModel):
            return model.model_validate(payload)
    except ValidationError as e:
        raise DecodeResponseError(f"Response payload does not match {model.__name__}: {e}") from e
    return payload


class HttpClient:
    """
    Low-level client for the Circle REST API.

    Attributes:
        base_url: API base URL, e.g. ``https://api.circle.com``
        timeout: Optional timeout forwarded to ``requests``; None means the
            caller enforces its own deadline
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        pool_maxsize: int = 10,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the client

        Args:
            base_url: API base URL
            api_key: API key sent as a bearer token (optional)
            session: Pre-configured requests session (optional)
            timeout: Request timeout in seconds (optional)
            pool_maxsize: Connection pool size per host
            logger: Optional logger instance to use for debug logging

        Raises:
            ConfigError: If the base URL is malformed or not https (unless
                it points at localhost/127.0.0.1)
        """
        parsed = urllib.parse.urlparse(base_url or "")
        if not parsed.scheme or not parsed.netloc:
            raise ConfigError(f"Invalid base URL: {base_url!r}")
        is_local = parsed.hostname in ('localhost', '127.0.0.1')
        if parsed.scheme != 'https' and not is_local:
            raise ConfigError(f"base_url must use https:// for security (got: {parsed.scheme}://)")

        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._base = parsed
        self._api_key = api_key
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

        if session is None:
            session = requests.Session()
            # Pooling only; the SDK never retries on its own
            adapter = HTTPAdapter(pool_maxsize=pool_maxsize, max_retries=0)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

    @property
    def has_credentials(self) -> bool:
        return bool(self._api_key)

    def build_url(self, path: str) -> str:
        """
        Join a path onto the base URL.

        Raises:
            ConfigError: If the path would leave the configured host
        """
        url = urllib.parse.urljoin(self.base_url, path)
        joined = urllib.parse.urlparse(url)
        if (joined.scheme, joined.netloc) != (self._base.scheme, self._base.netloc):
            raise ConfigError(f"Path {path!r} escapes the base URL {self.base_url!r}")
        return url

    def headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"circle-sdk-python/{__version__}",
        }
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def send(self, method: str, path: str, body: Body = None) -> requests.Response:
        """
        Send a request and return the raw response.

        Raises:
            ConfigError: If the path escapes the base URL
            TransportError: On network-level failures
        """
        url = self.build_url(path)
        payload = _serialize_body(body)
        headers = self.headers()

        if payload is not None:
            self.logger.debug(
                f"{method} {url} headers={headers_for_log(headers)} "
                f"body={sanitize_payload(payload)}"
            )
        else:
            self.logger.debug(f"{method} {url} headers={headers_for_log(headers)}")

        try:
            return self.session.request(
                method.upper(),
                url,
                data=json.dumps(payload) if payload is not None else None,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self.logger.error(f"Request to {url} failed: {e}")
            raise TransportError(f"HTTP request error: {e}") from e

    def _raise_for_error(self, response: requests.Response, text: str) -> None:
        status = response.status_code
        if 200 <= status < 300:
            return

        try:
            error = ErrorResponse.model_validate_json(text)
            message, code = error.message, error.code
        except ValidationError:
            message, code = text, None

        if status >= 500:
            rate_limited_log(
                f"Circle API server error {status} on {response.url}: {message}",
                level="warning",
                logger_instance=self.logger,
            )
        else:
            self.logger.debug(f"Circle API error {status}: {message}")
        raise ApiError(status=status, message=message, code=code)

    def handle_response(self, response: requests.Response, model: Optional[Type[Any]] = None) -> Any:
        """
        Unwrap a ``{"data": ...}`` envelope or raise the mapped error.

        Args:
            response: Raw HTTP response
            model: Optional pydantic model to validate the payload into

        Returns:
            The payload inside the envelope

        Raises:
            ApiError: For non-2xx statuses
            DecodeResponseError: If a 2xx body is not a valid envelope
        """
        text = response.text
        self._raise_for_error(response, text)

        try:
            envelope = ResponseEnvelope[Any].model_validate_json(text)
        except ValidationError as e:
            raise DecodeResponseError(f"Invalid response envelope: {e}", body=text) from e
        return _unwrap(model, envelope.data)

    def execute(
        self,
        method: str,
        path: str,
        body: Body = None,
        model: Optional[Type[Any]] = None
    ) -> Any:
        """
        Execute a request and return the unwrapped payload.

        Mutating bodies must already carry their idempotency key and
        entity secret ciphertext.
        """
        response = self.send(method, path, body)
        return self.handle_response(response, model)

    def execute_with_query(
        self,
        path: str,
        query: QueryParams,
        model: Optional[Type[Any]] = None
    ) -> Any:
        """Execute a GET request with flattened query parameters."""
        query_string = build_query_params(query)
        full_path = f"{path}?{query_string}" if query_string else path
        return self.execute("GET", full_path, model=model)

    def execute_plain(
        self,
        method: str,
        path: str,
        body: Body = None,
        model: Optional[Type[Any]] = None
    ) -> Any:
        """
        Execute a request whose success body is plain JSON, not an envelope.

        Only the health-check endpoint answers this way.
        """
        response = self.send(method, path, body)
        text = response.text
        self._raise_for_error(response, text)

        try:
            payload = json.loads(text)
        except ValueError as e:
            raise DecodeResponseError(f"Invalid JSON response: {e}", body=text) from e
        return _unwrap(model, payload)

    def execute_empty(self, method: str, path: str, body: Body = None) -> None:
        """
        Execute a request whose success body is expected to be empty.

        An empty body is success. A non-empty body must still be a valid
        envelope; anything else is a decode failure.
        """
        response = self.send(method, path, body)
        text = response.text
        self._raise_for_error(response, text)

        if not text.strip():
            return None
        try:
            ResponseEnvelope[Any].model_validate_json(text)
        except ValidationError as e:
            raise DecodeResponseError(f"Invalid response envelope: {e}", body=text) from e
        return None

    def execute_no_content(self, method: str, path: str, body: Body = None) -> None:
        """
        Execute a request that answers success with no payload, e.g. a DELETE
        returning 204.

        Any 2xx status is success and whatever body came back is ignored.

        Raises:
            ApiError: For non-2xx statuses
        """
        response = self.send(method, path, body)
        self._raise_for_error(response, response.text)
        return None

    def close(self) -> None:
        self.session.close()
