from __future__ import annotations
from typing import Any, Dict, Optional
import httpx
from app.core.config import Settings, require_square_credentials, settings as default_settings
from app.core.logging import square_logger, timed


class UpstreamFetchError(RuntimeError):
    def __init__(self, status_code: int, message: str, details: Optional[dict] = None):
        super().__init__(f"[Square {status_code}] {message}")
        self.status_code = status_code
        self.message = message
        self.details = details or {}


GATEWAY_TIMEOUT = 504
BAD_GATEWAY = 502


class SquareClient:
    """
    Read-only client for the Square Connect v2 API.

    One instance wraps one httpx.AsyncClient and is shared for the lifetime
    of the application; it is passed to repositories explicitly. Every call
    is a single attempt bounded by the client timeout; any failure surfaces
    as UpstreamFetchError.
    """

    def __init__(
        self,
        access_token: str,
        *,
        base_url: str,
        api_version: str = "2023-10-18",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
                "Square-Version": api_version,
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        cfg: Settings | None = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "SquareClient":
        cfg = cfg or default_settings
        access_token, _ = require_square_credentials(cfg)
        return cls(
            access_token,
            base_url=cfg.square_base_url,
            api_version=cfg.SQUARE_API_VERSION,
            timeout=cfg.SQUARE_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "SquareClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        try:
            with timed(square_logger, "Square request", method=method, path=path) as outcome:
                resp = await self._http.request(method, path, params=params, json=json_body)
                outcome["status"] = resp.status_code
        except httpx.TimeoutException as exc:
            square_logger.error("Square request timed out", method=method, path=path)
            raise UpstreamFetchError(
                GATEWAY_TIMEOUT, f"Timeout calling Square {path}", {"error": str(exc)}
            ) from exc
        except httpx.TransportError as exc:
            square_logger.error("Square request failed", method=method, path=path, exc=exc)
            raise UpstreamFetchError(
                BAD_GATEWAY, f"Network error calling Square {path}", {"error": str(exc)}
            ) from exc

        if not (200 <= resp.status_code < 300):
            try:
                details = resp.json()
            except ValueError:
                details = {"raw": resp.text[:500]}
            square_logger.error(
                "Square API error", method=method, path=path, status=resp.status_code
            )
            raise UpstreamFetchError(resp.status_code, f"Square API error on {path}", details)

        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamFetchError(
                resp.status_code, "Invalid JSON from Square", {"error": str(exc)}
            ) from exc

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------

    async def search_orders(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/orders/search", json_body=body)

    async def search_team_members(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/team-members/search", json_body=body)

    async def list_locations(self) -> Dict[str, Any]:
        return await self._request("GET", "/locations")

    async def list_payments(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("GET", "/payments", params=params)

    async def search_timecards(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/labor/timecards/search", json_body=body)
