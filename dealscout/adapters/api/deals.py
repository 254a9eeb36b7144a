from __future__ import annotations

import httpx
from pydantic import ValidationError

from dealscout.adapters.api.client import DealsApiClient
from dealscout.config.settings import settings
from dealscout.core.logging import logger
from dealscout.schemas.models import Deal
from dealscout.utils.retry import retry


class DealsReader:
    """
    Recarga la lista de deals rankeados con los filtros actuales.

    GET idempotente: se reintenta con backoff ante fallos de red. Un cuerpo
    que no es una lista se considera error del servidor (ValueError).
    """

    def __init__(
        self,
        api: DealsApiClient | None = None,
        *,
        restaurant: str | None = None,
        sort_by: str | None = None,
        limit: int | None = None,
        top: bool = False,
    ):
        self.api = api or DealsApiClient()
        self.restaurant = restaurant
        self.sort_by = sort_by or settings.DEALS_SORT_BY
        self.limit = limit or settings.DEALS_LIMIT
        # top: ranking global del servidor, sin filtros
        self.top = top
        self._fetch = retry(
            "deals",
            tries=settings.READ_RETRY_TRIES,
            base_delay=settings.READ_RETRY_BASE_DELAY,
            retry_on=(httpx.TransportError, httpx.HTTPStatusError),
        )(self._fetch_once)

    async def _fetch_once(self):
        if self.top:
            return await self.api.get_top_deals(self.limit)
        return await self.api.get_deals(
            restaurant=self.restaurant, sort_by=self.sort_by, limit=self.limit
        )

    async def reload(self) -> list[Deal]:
        data = await self._fetch()
        if not isinstance(data, list):
            raise ValueError(f"unexpected /deals payload: {type(data).__name__}")
        deals: list[Deal] = []
        for raw in data:
            try:
                deals.append(Deal.model_validate(raw))
            except ValidationError as e:
                logger.warning("skipping malformed deal %r: %s", raw, e.error_count())
        logger.info(
            "deals reloaded count=%d top=%s restaurant=%r sort_by=%s",
            len(deals),
            self.top,
            self.restaurant,
            self.sort_by,
        )
        return deals
