from __future__ import annotations

from typing import Any

import httpx

from dealscout.config.settings import settings
from dealscout.core.logging import logger
from dealscout.schemas.models import ImportRequest


class DealsApiClient:
    """
    Cliente mínimo de la API REST de deals.
    Respeta API_BASE_URL y API_TIMEOUT_SECS de .env

    Cada llamada abre su propio httpx.AsyncClient; no hay sesión compartida
    que cerrar. Los errores de red/HTTP se propagan como httpx.HTTPError y un
    cuerpo que no es JSON como ValueError: quien llama decide qué hacer.
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.API_TIMEOUT_SECS

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Content-Type": "application/json"},
        )

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        async with self._client() as cli:
            resp = await cli.request(method, path, **kwargs)
            resp.raise_for_status()
            return resp.json()

    # ====== importación (jobs) ======
    async def submit_import(self, location: str, restaurants: list[str]) -> Any:
        body = ImportRequest(location=location, restaurants=list(restaurants))
        logger.debug("api POST /scrape/ubereats location=%r units=%d", location, len(restaurants))
        return await self._request("POST", "/scrape/ubereats", json=body.model_dump())

    async def get_import_job(self, job_id: str) -> Any:
        return await self._request("GET", f"/scrape/ubereats/jobs/{job_id}")

    # ====== deals ======
    async def get_deals(
        self,
        *,
        restaurant: str | None = None,
        sort_by: str | None = None,
        limit: int | None = None,
    ) -> Any:
        params: dict[str, Any] = {}
        if restaurant:
            params["restaurant"] = restaurant
        if sort_by:
            params["sort_by"] = sort_by
        if limit:
            params["limit"] = int(limit)
        return await self._request("GET", "/deals", params=params)

    async def get_top_deals(self, limit: int = 10) -> Any:
        return await self._request("GET", "/deals/top", params={"limit": int(limit)})
