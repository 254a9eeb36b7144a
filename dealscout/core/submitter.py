from __future__ import annotations

from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from dealscout.adapters.api.client import DealsApiClient
from dealscout.core.errors import SubmissionFailed
from dealscout.core.logging import logger
from dealscout.core.state import ACTIVE_STATUSES, SUCCESS_STATUSES
from dealscout.schemas.models import ImportSummary, SubmitResponse


@dataclass(frozen=True)
class Terminal:
    """El servidor terminó el trabajo en la misma petición."""

    status: str
    summary: ImportSummary | None = None


@dataclass(frozen=True)
class Accepted:
    """Job asíncrono creado; hay que hacer polling con este id."""

    job_id: str
    status: str | None = None


SubmitResult = Terminal | Accepted


class JobSubmitter:
    def __init__(self, api: DealsApiClient):
        self.api = api

    async def submit(self, location: str, units: list[str]) -> SubmitResult:
        """
        Crea el job de importación y normaliza las dos respuestas posibles del
        servidor (terminal inmediata vs. job_id). No reintenta.
        """
        try:
            data = await self.api.submit_import(location, units)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("submit failed location=%r err=%r", location, e)
            raise SubmissionFailed(f"transport error: {e!r}", cause=e) from e

        if not isinstance(data, dict):
            raise SubmissionFailed(f"unexpected submit payload: {type(data).__name__}")
        try:
            resp = SubmitResponse.model_validate(data)
        except ValidationError as e:
            raise SubmissionFailed(f"invalid submit payload: {e.error_count()} errors", cause=e) from e

        # Éxito inmediato manda aunque venga job_id: no hace falta seguir el job
        if resp.status in SUCCESS_STATUSES:
            logger.info(
                "import finished synchronously status=%s job_id=%s", resp.status, resp.job_id
            )
            return Terminal(status=resp.status, summary=ImportSummary.from_payload(data))

        if resp.job_id:
            logger.info("import job accepted job_id=%s status=%s", resp.job_id, resp.status)
            return Accepted(job_id=resp.job_id, status=resp.status)

        if resp.status and resp.status not in ACTIVE_STATUSES:
            logger.info("import finished synchronously status=%s", resp.status)
            return Terminal(status=resp.status, summary=ImportSummary.from_payload(data))

        raise SubmissionFailed(
            f"response has neither a terminal status nor a job_id (status={resp.status!r})"
        )
