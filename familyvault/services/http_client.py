"""
familyvault/services/http_client.py

Purpose: Authorized HTTP access to the backend REST API

- Bearer-token injection from the auth token holder
- JSON vs multipart content negotiation
- Uniform error surfacing (RemoteError / TransportError)
- Binary downloads with their content-disposition header
"""

import json
import logging
from typing import Optional, Dict, Any, Tuple, Callable, Awaitable

import httpx

from familyvault.core.exceptions import RemoteError, TransportError
from familyvault.schemas.documents import DownloadedBlob

TokenProvider = Callable[[], Awaitable[str]]


class MultipartBody:
    """
    Multipart form envelope. httpx writes its own boundary, so the client
    never sets Content-Type for it.

    Args:
        files: field name -> (filename, bytes, mime type)
        data: plain text fields
    """

    def __init__(self, files: Dict[str, Tuple[str, bytes, str]], data: Optional[Dict[str, str]] = None):
        self.files = files
        self.data = {k: v for k, v in (data or {}).items() if v is not None}


def ensure_success(payload: Dict[str, Any], fallback: str) -> Dict[str, Any]:
    """
    Some endpoints answer 2xx with ``{"success": false, "message": ...}``.
    Treat that as a remote failure.
    """
    if isinstance(payload, dict) and payload.get("success") is False:
        raise RemoteError(200, payload.get("message") or fallback)
    return payload


class HttpClient:
    """
    Thin wrapper over httpx.AsyncClient used by every gateway.
    """

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider,
        logger: logging.Logger,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.logger = logger
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def _send(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        headers: Dict[str, str] = {}
        kwargs: Dict[str, Any] = {}

        # NotAuthenticatedError propagates before anything is sent
        if authenticated:
            token = await self.token_provider()
            headers["Authorization"] = f"Bearer {token}"

        if isinstance(body, MultipartBody):
            kwargs["files"] = body.files
            kwargs["data"] = body.data
        else:
            headers["Content-Type"] = "application/json"
            if body is not None:
                kwargs["content"] = json.dumps(body)

        try:
            response = await self._client.request(method, path, headers=headers, params=params, **kwargs)
        except httpx.TimeoutException as e:
            self.logger.error(f"{method} {path} timed out")
            raise TransportError("The server is taking too long to respond.") from e
        except httpx.RequestError as e:
            self.logger.error(f"{method} {path} failed: {e}")
            raise TransportError(f"Unable to reach the server: {e}") from e

        if not 200 <= response.status_code < 300:
            message = self._error_message(response)
            self.logger.warning(f"{method} {path} -> {response.status_code} {message}")
            raise RemoteError(response.status_code, message)

        self.logger.debug(f"{method} {path} -> {response.status_code}")
        return response

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return ""
        if isinstance(payload, dict):
            return payload.get("message") or payload.get("error") or ""
        return ""

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        params: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        """
        Issues a request and returns the parsed JSON body.

        Args:
            method: HTTP method
            path: Path below the API base, e.g. "/documents"
            body: JSON-serializable body or a MultipartBody
            params: Query parameters
            authenticated: Attach the bearer token (default True)

        Returns:
            Parsed JSON ({} for an empty body)

        Raises:
            NotAuthenticatedError: No token available, nothing sent
            TransportError: Network failure
            RemoteError: Non-2xx response
        """
        response = await self._send(method, path, body, params, authenticated)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(response.status_code, "Invalid response from server") from e

    async def download(self, path: str) -> DownloadedBlob:
        """
        Fetches a binary resource with auth.
        """
        response = await self._send("GET", path)
        return DownloadedBlob(
            content=response.content,
            content_type=response.headers.get("content-type"),
            content_disposition=response.headers.get("content-disposition"),
        )

    async def close(self):
        await self._client.aclose()
