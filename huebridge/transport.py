"""HTTP plumbing shared by every bridge call.

Requests go out as plain HTTP to ``http://{address}{path}`` with a fixed
timeout. Each response is run through :func:`handle_response`, which turns
the bridge's error envelope into a :class:`BridgeError`.
"""

from __future__ import annotations

import io
import json
import logging
from typing import Any, Optional

import requests

from .config import REQUEST_TIMEOUT
from .errors import BridgeError, EncodeError, TransportError

_LOGGER = logging.getLogger(__name__)


def uri(address: str, path: str) -> str:
    return f"http://{address}{path}"


def _encode(method: str, params: Any) -> bytes:
    try:
        return json.dumps(params).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise EncodeError(
            f"unable to marshal {method} request parameters: {exc}"
        ) from exc


def _error_entry(payload: Any) -> Optional[dict]:
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        return None
    for item in payload:
        if isinstance(item, dict) and isinstance(item.get("error"), dict):
            return item["error"]
    return None


def handle_response(resp: requests.Response) -> tuple[bytes, io.BytesIO]:
    _LOGGER.debug("code: %s", resp.status_code)
    _LOGGER.debug("headers: %s", dict(resp.headers))

    try:
        body = resp.content
    except requests.RequestException as exc:
        raise TransportError(f"unable to read response body: {exc}") from exc

    try:
        payload = json.loads(body)
    except ValueError:
        payload = None

    error = _error_entry(payload)
    if error is not None:
        raise BridgeError(
            type=error.get("type", 0),
            description=str(error.get("description", "")),
            address=str(error.get("address", "")),
        )

    if resp.status_code >= 400:
        raise TransportError(f"unexpected HTTP status {resp.status_code} from {resp.url}")

    return body, io.BytesIO(body)


def request(
    method: str,
    address: str,
    path: str,
    data: Optional[bytes] = None,
) -> requests.Response:
    target = uri(address, path)
    _LOGGER.debug("%s: %s", method, target)
    headers = {"Content-Type": "application/json"} if data else None
    try:
        return requests.request(
            method, target, data=data, headers=headers, timeout=REQUEST_TIMEOUT
        )
    except requests.RequestException as exc:
        raise TransportError(f"unable to access bridge: {exc}") from exc


def get(address: str, path: str) -> tuple[bytes, io.BytesIO]:
    return handle_response(request("GET", address, path))


def put(address: str, path: str, params: Any) -> tuple[bytes, io.BytesIO]:
    data = _encode("PUT", params)
    return handle_response(request("PUT", address, path, data))


def post(address: str, path: str, params: Any = None) -> tuple[bytes, io.BytesIO]:
    # An empty body is how the bridge is told to start a search rather than
    # create something.
    data = _encode("POST", params) if params else None
    return handle_response(request("POST", address, path, data))


def delete(address: str, path: str) -> None:
    handle_response(request("DELETE", address, path))
