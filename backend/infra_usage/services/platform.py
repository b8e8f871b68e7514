from __future__ import annotations

import logging
from typing import Any

import httpx

from infra_usage.core.config import settings

logger = logging.getLogger(__name__)


class PlatformAPIError(Exception):
    """Raised when the platform API rejects a request or cannot be reached."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        self.message = message or "Platform API error"
        super().__init__(f"{self.message} ({status_code})")


class ProjectNotFoundError(PlatformAPIError):
    def __init__(self, project_ref: str) -> None:
        super().__init__(404, f"Project {project_ref} not found")
        self.project_ref = project_ref


class PlatformClient:
    """Thin async wrapper over the platform REST API.

    Pass ``http_client`` to share a connection pool or to plug in a mock
    transport. A client created here is owned and closed by ``aclose``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if api_key is None and settings.platform_api_key is not None:
            api_key = settings.platform_api_key.get_secret_value()
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url or settings.platform_api_url,
            timeout=timeout or settings.platform_timeout_seconds,
        )
        self._headers = headers

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "PlatformClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = await self._client.get(path, params=params, headers=self._headers)
        except httpx.HTTPError as exc:
            logger.warning("Platform request to %s failed: %s", path, exc)
            raise PlatformAPIError(502, f"Platform API unreachable: {exc}") from exc

        if response.status_code >= 400:
            logger.warning("Platform API returned %s for %s", response.status_code, path)
            raise PlatformAPIError(response.status_code, _error_message(response))

        try:
            return response.json()
        except ValueError as exc:
            raise PlatformAPIError(502, "Platform API returned invalid JSON") from exc


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if payload.get("message"):
            return str(payload["message"])
    return response.reason_phrase


__all__ = ["PlatformAPIError", "PlatformClient", "ProjectNotFoundError"]
