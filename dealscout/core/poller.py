from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable

import httpx
from pydantic import ValidationError

from dealscout.adapters.api.client import DealsApiClient
from dealscout.config.settings import settings
from dealscout.core.errors import PollTimeout, PollTransportError
from dealscout.core.logging import logger
from dealscout.core.progress import RawProgressSnapshot
from dealscout.core.state import is_active
from dealscout.schemas.models import JobStatusPayload


class JobPoller:
    """
    Polling del estado de un job a intervalo fijo, con número máximo de intentos.

    `poll()` es un generador asíncrono: entrega cada snapshot y no pide el
    siguiente hasta que el consumidor vuelve a iterar, así que la reconciliación
    del poll N siempre termina antes de emitir el poll N+1.
    """

    def __init__(
        self,
        api: DealsApiClient,
        *,
        interval_ms: int | None = None,
        max_attempts: int | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.api = api
        self.interval_ms = interval_ms if interval_ms is not None else settings.POLL_INTERVAL_MS
        self.max_attempts = max_attempts if max_attempts is not None else settings.POLL_MAX_ATTEMPTS
        self._sleep = sleep

    async def _fetch(self, job_id: str, attempt: int) -> RawProgressSnapshot:
        try:
            data = await self.api.get_import_job(job_id)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("poll failed job_id=%s attempt=%d err=%r", job_id, attempt, e)
            raise PollTransportError(
                f"status request failed: {e!r}", job_id=job_id, attempt=attempt, cause=e
            ) from e

        if not isinstance(data, dict):
            logger.warning("poll job_id=%s attempt=%d non-object payload ignored", job_id, attempt)
            data = {}
        try:
            payload = JobStatusPayload.model_validate(data)
        except ValidationError as e:
            logger.warning("poll job_id=%s attempt=%d invalid payload: %s", job_id, attempt, e)
            payload = JobStatusPayload()
        return RawProgressSnapshot.from_payload(payload)

    async def poll(
        self,
        job_id: str,
        interval_ms: int | None = None,
        max_attempts: int | None = None,
    ) -> AsyncIterator[RawProgressSnapshot]:
        interval = (interval_ms if interval_ms is not None else self.interval_ms) / 1000.0
        attempts = max(1, max_attempts if max_attempts is not None else self.max_attempts)

        for attempt in range(1, attempts + 1):
            snap = await self._fetch(job_id, attempt)
            logger.debug(
                "poll job_id=%s attempt=%d/%d status=%s completed=%s failed=%s total=%s",
                job_id,
                attempt,
                attempts,
                snap.status,
                snap.completed_count,
                snap.failed_count,
                snap.total_count,
            )
            yield snap
            if not is_active(snap.status):
                return
            # tras el último intento no tiene sentido esperar
            if attempt < attempts:
                await self._sleep(interval)

        logger.warning("poll timeout job_id=%s after %d attempts", job_id, attempts)
        raise PollTimeout(job_id, attempts)
