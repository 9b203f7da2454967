"""Request construction and single-call HTTP handling for the Fivetran API."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from .errors import ApiError, ErrorData
from .types import RequestParams

logger = logging.getLogger(__name__)

__all__ = [
    "HTTP_METHODS",
    "basic_auth_header",
    "ParamBuilder",
    "HttpCaller",
]

HTTP_METHODS = ("GET", "PATCH", "POST", "DELETE")
_METHODS_WITH_BODY = ("PATCH", "POST")


def basic_auth_header(api_key: str, api_secret: str) -> Dict[str, str]:
    """Return the ``Authorization`` header for *api_key* and *api_secret*."""
    token = base64.b64encode(f"{api_key}:{api_secret}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


class ParamBuilder:
    """Builds the method, headers and body of a request.

    Pure data transform; nothing here touches the network.
    """

    def __init__(self, auth_header: Mapping[str, str], api_version: int = 1):
        self.auth_header = dict(auth_header)
        self.api_version = api_version

    def build(self, method: str, payload: Optional[Dict[str, Any]] = None) -> RequestParams:
        """Return ``RequestParams`` for *method*.

        PATCH and POST serialize *payload* (``{}`` when omitted) as JSON;
        GET and DELETE never carry a body.
        """
        method = method.upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        headers = {
            **self.auth_header,
            "Accept": f"application/json;version={self.api_version}",
            "Content-Type": "application/json",
        }
        content = None
        if method in _METHODS_WITH_BODY:
            content = json.dumps(payload if payload is not None else {})
        return RequestParams(method=method, headers=headers, content=content)


class HttpCaller:
    """Issues one request and turns a non-2xx status into ``ApiError``.

    No retries: a failed call surfaces immediately and the caller decides
    what it means.
    """

    def __init__(self, client: httpx.Client):
        self.client = client

    def call(
        self,
        url: str,
        params: RequestParams,
        query: Optional[Dict[str, Any]] = None,
        quiet: bool = False,
    ) -> httpx.Response:
        response = self.client.request(
            params.method,
            url,
            headers=params.headers,
            content=params.content,
            params=query,
        )
        status = response.status_code

        if not 200 <= status <= 299:
            logger.warning("ResponseError: Response Code=%s, %s %s", status, params.method, url)
            raise ApiError(ErrorData(status_code=status, body=response.text))

        level = logging.DEBUG if quiet else logging.INFO
        logger.log(level, "ResponseSuccess: Response Code=%s, %s", status, self._success_message(response))
        return response

    @staticmethod
    def _success_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message") is not None:
            return str(body["message"])
        return "HTTP request success"
