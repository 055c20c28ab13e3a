"""Canva Connect REST API client."""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote, urlencode

import httpx
import structlog

from ..core.config import get_settings
from ..domain.canva import (
    CanvaBrandKit,
    CanvaDesign,
    CanvaExport,
    CanvaTemplate,
    CanvaTokenResponse,
    ExportFormat,
)

logger = structlog.get_logger(__name__)

OAUTH_SCOPES = "designs:read designs:write brand_kit:read brand_kit:write"


class CanvaConfigError(RuntimeError):
    """Raised when Canva configuration is missing or invalid."""


class CanvaAPIError(RuntimeError):
    """Raised when Canva returns an error response or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def access_token_for(user_id: object) -> str:
    """Placeholder Canva token for a user; OAuth tokens are not persisted."""

    return f"mock_canva_token_{user_id}"


class CanvaClient:
    """Thin async wrapper around the Canva designs, templates and brand kit endpoints."""

    def __init__(
        self,
        *,
        base_url: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise CanvaConfigError("Canva API base URL is not configured")
        self._base_url = base_url.rstrip("/")
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def authorize_url(self, state: str) -> str:
        query = urlencode(
            {
                "client_id": self._client_id,
                "redirect_uri": self._redirect_uri,
                "response_type": "code",
                "scope": OAUTH_SCOPES,
                "state": state,
            }
        )
        return f"{self._base_url}/oauth/authorize?{query}"

    async def exchange_code(self, code: str) -> CanvaTokenResponse:
        if not self._client_id or not self._client_secret:
            raise CanvaConfigError("Canva OAuth credentials are not configured")
        payload = await self._request(
            "POST",
            "/oauth/token",
            json={
                "grant_type": "authorization_code",
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "code": code,
                "redirect_uri": self._redirect_uri,
            },
        )
        return CanvaTokenResponse(
            access_token=payload.get("access_token"),
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
        )

    async def create_design(self, access_token: str, template_id: str) -> CanvaDesign:
        payload = await self._request(
            "POST",
            "/v1/designs",
            token=access_token,
            json={"template_id": template_id, "brand_kit_id": None},
        )
        return CanvaDesign(
            id=str(payload.get("id")),
            template_id=template_id,
            status=payload.get("status"),
            edit_url=payload.get("edit_url"),
            preview_url=payload.get("preview_url"),
        )

    async def export_design(
        self, access_token: str, design_id: str, export_format: ExportFormat
    ) -> CanvaExport:
        payload = await self._request(
            "POST",
            f"/v1/designs/{quote(design_id, safe='')}/export",
            token=access_token,
            json={
                "format": export_format.value.lower(),
                "quality": "high",
                "size": "original",
            },
        )
        return CanvaExport(
            id=str(payload.get("id")),
            status=payload.get("status"),
            download_url=payload.get("download_url"),
            expires_at=payload.get("expires_at"),
        )

    async def apply_brand_kit(self, access_token: str, design_id: str, brand_kit_id: str) -> None:
        await self._request(
            "POST",
            f"/v1/designs/{quote(design_id, safe='')}/brand-kit",
            token=access_token,
            json={"brand_kit_id": brand_kit_id},
        )

    async def list_templates(
        self, access_token: str, *, category: str = "real-estate", limit: int = 50
    ) -> list[CanvaTemplate]:
        payload = await self._request(
            "GET",
            "/v1/templates",
            token=access_token,
            params={"category": category, "limit": limit},
        )
        return [
            CanvaTemplate(
                id=str(item.get("id")),
                name=item.get("name"),
                type=item.get("type"),
                thumbnail=item.get("thumbnail_url"),
                category=item.get("category"),
                description=item.get("description"),
                canva_template_id=str(item.get("id")),
            )
            for item in payload.get("templates") or []
        ]

    async def list_brand_kits(self, access_token: str) -> list[CanvaBrandKit]:
        payload = await self._request("GET", "/v1/brand-kits", token=access_token)
        return [
            CanvaBrandKit(
                id=str(item.get("id")),
                name=item.get("name"),
                logo=item.get("logo_url"),
                colors=item.get("colors") or [],
                fonts=item.get("fonts") or [],
            )
            for item in payload.get("brand_kits") or []
        ]

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        json: Any = None,
        params: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method, path, headers=headers, json=json, params=params
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "canva.request_failed",
                method=method,
                path=path,
                status_code=exc.response.status_code,
            )
            raise CanvaAPIError(
                f"Canva API returned {exc.response.status_code} for {method} {path}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("canva.request_error", method=method, path=path, error=str(exc))
            raise CanvaAPIError(f"Canva API request failed: {exc}") from exc

        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as exc:
            raise CanvaAPIError(f"Canva API returned invalid JSON for {method} {path}") from exc
        return body if isinstance(body, dict) else {}


def build_canva_client_from_settings(
    transport: httpx.AsyncBaseTransport | None = None,
) -> CanvaClient:
    settings = get_settings()
    return CanvaClient(
        base_url=settings.canva_api_base_url,
        client_id=settings.canva_client_id or "",
        client_secret=settings.canva_client_secret or "",
        redirect_uri=settings.canva_redirect_uri,
        timeout=settings.canva_timeout_seconds,
        transport=transport,
    )
