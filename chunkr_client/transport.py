"""Authenticated HTTP transport for the Chunkr API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urljoin

import requests

from .config import ClientConfig
from .errors import TransportError, TransportFailure

LOGGER = logging.getLogger(__name__)


class ChunkrTransport:
    """Issues JSON requests against the configured Chunkr base URL.

    Headers are fixed at construction time and no per-call state is kept,
    so a single transport can be shared by threads polling different tasks.
    A ``session`` passed in is modified in place: the JSON headers and the
    bearer token are written to ``session.headers`` and sent on every
    request that session makes, including ones not issued through this
    transport.
    """

    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None) -> None:
        self._config = config
        self._base_url = config.api_url.rstrip("/") + "/"
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": config.user_agent,
            }
        )
        if config.api_key:
            self._session.headers["Authorization"] = f"Bearer {config.api_key}"
        else:
            LOGGER.warning("No Chunkr API key configured; requests will be sent unauthenticated")

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Perform a request and return the decoded JSON body, or ``None`` if empty."""

        method = method.upper()
        url = self._url(path)
        try:
            response = self._session.request(
                method,
                url,
                params=dict(params) if params else None,
                json=json,
                timeout=self._config.request_timeout_seconds,
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            LOGGER.error("Chunkr API no response: %s %s (%s)", method, path, exc)
            raise TransportError(
                f"No response from Chunkr API for {method} {path}: {exc}",
                kind=TransportFailure.NO_RESPONSE,
                method=method,
                path=path,
            ) from exc
        except requests.RequestException as exc:
            LOGGER.error("Chunkr API request error: %s %s (%s)", method, path, exc)
            raise TransportError(
                f"Could not send {method} {path} to Chunkr API: {exc}",
                kind=TransportFailure.REQUEST_SETUP,
                method=method,
                path=path,
            ) from exc

        if not response.ok:
            body = _decode_error_body(response)
            LOGGER.error(
                "Chunkr API error: %s %s returned %s: %s", method, path, response.status_code, body
            )
            raise TransportError(
                f"Chunkr API returned HTTP {response.status_code} for {method} {path}: {_summarise(body)}",
                kind=TransportFailure.HTTP_STATUS,
                method=method,
                path=path,
                status_code=response.status_code,
                body=body,
            )

        if not response.content or not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as exc:
            LOGGER.error("Chunkr API returned a non-JSON body for %s %s", method, path)
            raise TransportError(
                f"Chunkr API returned malformed JSON for {method} {path}",
                kind=TransportFailure.MALFORMED_RESPONSE,
                method=method,
                path=path,
                status_code=response.status_code,
                body=response.text,
            ) from exc

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "ChunkrTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _url(self, path: str) -> str:
        return urljoin(self._base_url, path.lstrip("/"))


def _decode_error_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _summarise(body: Any) -> str:
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if body.get(key):
                return str(body[key])
    text = str(body) if body not in (None, "") else "<empty body>"
    return text if len(text) <= 200 else text[:197] + "..."
