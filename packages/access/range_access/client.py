"""
Backend client: fetches the membership and organization snapshot.

Talks to the managed backend's PostgREST-style RPC endpoints. Transport and
HTTP status errors are logged and re-raised unchanged; retrying is left to
the caller.
"""

from __future__ import annotations

from typing import Any, Iterable

import httpx
import structlog

from .config import Settings
from .schemas import Membership, OrganizationNode

log = structlog.get_logger()


class BackendClient:
    """Async snapshot source backed by the managed backend's RPC API."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        access_token: str | None = None,
        verify_tls: bool = True,
        request_timeout: int = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._access_token = access_token
        self._verify_tls = verify_tls
        self._request_timeout = request_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings, access_token: str | None = None) -> BackendClient:
        return cls(
            settings.backend_url,
            api_key=settings.backend_api_key,
            access_token=access_token,
            request_timeout=settings.request_timeout_seconds,
        )

    async def open(self) -> None:
        headers = {}
        if self._api_key:
            headers["apikey"] = self._api_key
        token = self._access_token or self._api_key
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._request_timeout),
            verify=self._verify_tls,
            headers=headers,
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> BackendClient:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _rpc(self, name: str, payload: dict[str, Any]) -> list[dict[str, Any]]:
        assert self._client
        try:
            resp = await self._client.post(f"{self._base_url}/rest/v1/rpc/{name}", json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            log.error("client.rpc_error", rpc=name, status=exc.response.status_code)
            raise
        except httpx.TransportError as exc:
            log.error("client.rpc_unreachable", rpc=name, error=str(exc))
            raise
        return resp.json() or []

    # --- Snapshot source ---

    async def fetch_user_memberships(self, user_id: str) -> list[Membership]:
        rows = await self._rpc("get_user_orgs", {"p_user_id": user_id})
        return [Membership.model_validate(row) for row in rows]

    async def fetch_all_organizations(self, user_id: str) -> list[OrganizationNode]:
        rows = await self._rpc("get_user_accessible_orgs", {"p_user_id": user_id})
        return [OrganizationNode.model_validate(row) for row in rows]

    async def fetch_child_counts(self, org_ids: Iterable[str]) -> dict[str, int]:
        # Assumed batch RPC; the service itself only exposes per-org get_org_children.
        rows = await self._rpc("get_org_child_counts", {"p_org_ids": list(org_ids)})
        return {row["org_id"]: int(row["child_count"]) for row in rows}
