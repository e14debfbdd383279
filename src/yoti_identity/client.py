# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""YotiClient: async HTTP client for the Yoti platform REST API.

The client covers three operations:

1. **Receipt retrieval**: exchanging the encrypted one-time token handed to
   the application's callback for the user's shared profile
   (:meth:`YotiClient.get_activity_details`). Opening the receipt itself is
   done locally by :func:`~activity.build_activity_details`.
2. **AML checks**: :meth:`YotiClient.perform_aml_check`.
3. **Dynamic sharing**: :meth:`YotiClient.create_share_url`.

Every request is signed with the application's RSA key: the
``X-Yoti-Auth-Key`` header carries the public key and
``X-Yoti-Auth-Digest`` an RSA-SHA256 signature over
``METHOD&ENDPOINT[&BASE64(BODY)]``. Timeouts and retries are left to the
underlying :class:`httpx.AsyncClient`.
"""

from __future__ import annotations

import json
import logging
import os
import time
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from .activity import ActivityDetails, build_activity_details
from .aml import AmlProfile, AmlResult, parse_aml_result
from .crypto import (
    decrypt_token,
    generate_nonce,
    get_auth_digest,
    get_auth_key,
    load_private_key,
)
from .dynamic import DynamicScenario, ShareURL, parse_share_url
from .profile import DEFAULT_ATTRIBUTE_NAMES, AttributeNames
from .types import ParseError, ProfileNotFoundError, RequestFailedError

logger = logging.getLogger(__name__)

SDK_IDENTIFIER = "Python"
SDK_VERSION = "0.1.0"  # distribution version; pyproject.toml reads it

DEFAULT_API_URL = "https://api.yoti.com/api/v1"
API_URL_ENV_VAR = "YOTI_API_URL"

AUTH_KEY_HEADER = "X-Yoti-Auth-Key"
AUTH_DIGEST_HEADER = "X-Yoti-Auth-Digest"
SDK_HEADER = "X-Yoti-SDK"
SDK_VERSION_HEADER = "X-Yoti-SDK-Version"

# Status code -> message; -1 is the fallback for unlisted codes.
PROFILE_ERROR_MESSAGES = {404: "profile not found"}
SHARE_URL_ERROR_MESSAGES = {
    400: "JSON is incorrect, contains invalid data",
    404: "Application was not found",
}


class YotiClient:
    """Async client for the Yoti platform REST API.

    Parameters
    ----------
    sdk_id:
        The application's SDK ID (not the App ID) from the Yoti Hub.
    key:
        The application's PEM-encoded RSA private key. It is parsed once,
        here, so an unusable key fails fast.
    api_url:
        Override for the API root. When omitted the ``YOTI_API_URL``
        environment variable is used, then :data:`DEFAULT_API_URL`.
    timeout:
        Per-request timeout in seconds. Defaults to 10.
    http_client:
        Optional pre-configured :class:`httpx.AsyncClient`. Useful for
        injecting test transports, retries or custom SSL contexts.
    names:
        Attribute-name vocabulary used by the returned profiles.

    Raises
    ------
    ValueError
        If *sdk_id* is empty.
    InvalidKeyError
        If *key* is not a PEM RSA private key.

    Examples
    --------
    >>> async with YotiClient(sdk_id, pem_bytes) as client:
    ...     activity = await client.get_activity_details(token)
    ...     print(activity.user_profile.given_names().value)
    """

    def __init__(
        self,
        sdk_id: str,
        key: bytes | str,
        *,
        api_url: str | None = None,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
        names: AttributeNames = DEFAULT_ATTRIBUTE_NAMES,
    ) -> None:
        if not sdk_id:
            raise ValueError("YotiClient: sdk_id must not be empty")
        self._sdk_id = sdk_id
        self._key = load_private_key(key)
        self._api_url = _resolve_api_url(api_url)
        self._names = names
        self._owned_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    # ------------------------------------------------------------------
    # Context manager support
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "YotiClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if it was created internally."""
        if self._owned_client:
            await self._http.aclose()

    @property
    def sdk_id(self) -> str:
        return self._sdk_id

    @property
    def api_url(self) -> str:
        return self._api_url

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_activity_details(self, encrypted_token: str) -> ActivityDetails:
        """Retrieve and open the receipt for a one-time token.

        Raises
        ------
        TokenDecryptionError
            If the token cannot be decrypted with the application key.
        ProfileNotFoundError
            If the platform answers 404.
        RequestFailedError
            On any other non-2xx response or transport failure.
        ParseError, SharingFailureError, KeyUnwrapError, PayloadDecryptionError
            From :func:`~activity.build_activity_details`.
        """
        token = decrypt_token(encrypted_token, self._key)
        endpoint = f"/profile/{quote(token, safe='')}?{self._query()}"

        response = await self._request("GET", endpoint)
        if response.status_code == 404:
            raise ProfileNotFoundError(
                status_code=404,
                endpoint=endpoint,
                message=format_error_message(response, PROFILE_ERROR_MESSAGES),
            )
        _raise_for_status(response, endpoint)
        return build_activity_details(response.content, self._key, names=self._names)

    async def perform_aml_check(self, profile: AmlProfile) -> AmlResult:
        """Check a person against PEP, fraud and watch lists."""
        endpoint = f"/aml-check?{self._query()}"
        raw = await self._post_json(endpoint, profile.to_dict())
        try:
            return parse_aml_result(raw)
        except ValueError as exc:
            raise ParseError(str(exc)) from exc

    async def create_share_url(self, scenario: DynamicScenario) -> ShareURL:
        """Create a share URL (QR code) for a dynamic sharing scenario."""
        endpoint = f"/qrcodes/apps/{quote(self._sdk_id, safe='')}?{self._query(app_id=False)}"
        raw = await self._post_json(endpoint, scenario.to_dict(), SHARE_URL_ERROR_MESSAGES)
        try:
            return parse_share_url(raw)
        except ValueError as exc:
            raise ParseError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Private HTTP helpers
    # ------------------------------------------------------------------

    def _query(self, *, app_id: bool = True) -> str:
        params = {"nonce": generate_nonce(), "timestamp": str(int(time.time() * 1000))}
        if app_id:
            params["appId"] = self._sdk_id
        return urlencode(params)

    def _signed_headers(self, method: str, endpoint: str, body: bytes | None) -> dict[str, str]:
        headers = {
            AUTH_KEY_HEADER: get_auth_key(self._key),
            AUTH_DIGEST_HEADER: get_auth_digest(method, endpoint, body, self._key),
            SDK_HEADER: SDK_IDENTIFIER,
            SDK_VERSION_HEADER: f"{SDK_IDENTIFIER}-{SDK_VERSION}",
            "Accept": "application/json",
        }
        if body is not None:
            headers["Content-Type"] = "application/json"
        return headers

    async def _request(
        self, method: str, endpoint: str, body: bytes | None = None
    ) -> httpx.Response:
        url = f"{self._api_url}{endpoint}"
        headers = self._signed_headers(method, endpoint, body)
        logger.debug("%s %s", method, url.split("?", 1)[0])
        try:
            return await self._http.request(method, url, content=body, headers=headers)
        except httpx.TimeoutException as exc:
            raise RequestFailedError(
                status_code=0, endpoint=endpoint, message=f"request timed out: {exc}"
            ) from exc
        except httpx.RequestError as exc:
            raise RequestFailedError(
                status_code=0, endpoint=endpoint, message=f"request failed: {exc}"
            ) from exc

    async def _post_json(
        self,
        endpoint: str,
        payload: dict[str, Any],
        error_messages: dict[int, str] | None = None,
    ) -> Any:
        body = json.dumps(payload).encode()
        response = await self._request("POST", endpoint, body)
        _raise_for_status(response, endpoint, error_messages)
        try:
            return response.json()
        except ValueError as exc:
            raise ParseError(f"{endpoint}: response is not valid JSON: {exc}") from exc


# ------------------------------------------------------------------
# Module-level helpers
# ------------------------------------------------------------------


def _resolve_api_url(api_url: str | None) -> str:
    url = api_url or os.environ.get(API_URL_ENV_VAR) or DEFAULT_API_URL
    return url.rstrip("/")


def format_error_message(
    response: httpx.Response,
    error_messages: dict[int, str] | None = None,
) -> str:
    """Describe a failed response.

    A structured platform error body ``{"code", "message", "errors"}`` gives
    ``"<status>: <code> - <message>[: <property>: '<message>', ...]"``.
    Otherwise the message registered for the status code (or ``-1``), or
    ``"unknown HTTP error"``, is followed by the raw body when there is one.
    """
    status = response.status_code
    text = response.text

    try:
        body = json.loads(text) if text else None
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get("code") and body.get("message"):
        message = f"{status}: {body['code']} - {body['message']}"
        details = [
            f"{item['property']}: '{item['message']}'"
            for item in body.get("errors") or []
            if isinstance(item, dict) and item.get("property") and item.get("message")
        ]
        if details:
            message += ": " + ", ".join(details)
        return message

    messages = error_messages or {}
    default = messages.get(status, messages.get(-1, "unknown HTTP error"))
    message = f"{status}: {default}"
    if text:
        message += f" - {text}"
    return message


def _raise_for_status(
    response: httpx.Response,
    endpoint: str,
    error_messages: dict[int, str] | None = None,
) -> None:
    if response.is_success:
        return
    raise RequestFailedError(
        status_code=response.status_code,
        endpoint=endpoint,
        message=format_error_message(response, error_messages),
    )
