from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from spotlist.services.lookup import MalformedResponse, RemoteFailure

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class SerialClient:
    """Async JSON client that sends one request at a time.

    Every request waits ``delay`` seconds first and holds a lock for its
    whole duration, so callers sharing the client never overlap.
    """

    def __init__(
        self,
        delay: float = 0.1,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.delay = delay
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._lock = asyncio.Lock()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _headers(self) -> Dict[str, str]:
        return {}

    async def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        async with self._lock:
            if self.delay:
                await asyncio.sleep(self.delay)
            headers = await self._headers()
            logger.debug("GET %s %s", url, params or "")
            try:
                return await self._client.get(url, params=params, headers=headers)
            except httpx.TimeoutException as exc:
                raise RemoteFailure(f"Request to {url} timed out after {self.timeout}s") from exc
            except httpx.HTTPError as exc:
                raise RemoteFailure(f"Request to {url} failed: {exc}") from exc

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = await self.get(url, params)
        return decode_response(response, url)


def decode_response(response: httpx.Response, url: str) -> Dict[str, Any]:
    if response.status_code != 200:
        raise RemoteFailure(
            f"Request to {url} returned status {response.status_code}",
            status_code=response.status_code,
        )
    try:
        body = response.json()
    except ValueError as exc:
        raise MalformedResponse(f"Response from {url} is not valid JSON") from exc
    if not isinstance(body, dict):
        raise MalformedResponse(f"Response from {url} is not a JSON object")
    if body.get("error"):
        raise RemoteFailure(f"Request to {url} returned an error: {body['error']}")
    return body


def parse_model(model: Type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponse(f"Unexpected {model.__name__} payload: {exc}") from exc


__all__ = ["SerialClient", "decode_response", "parse_model"]
