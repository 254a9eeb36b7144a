from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from dealscout.adapters.api.deals import DealsReader
from dealscout.config.settings import settings
from dealscout.core.errors import ImportRunError, RemoteJobFailed
from dealscout.core.logging import logger
from dealscout.core.poller import JobPoller
from dealscout.core.progress import LocalProgress, initial_progress, reconcile
from dealscout.core.state import SUCCESS_STATUSES
from dealscout.core.store import KeyValueStore
from dealscout.core.submitter import Accepted, JobSubmitter
from dealscout.schemas.models import Deal, ImportSummary

ProgressCallback = Callable[[LocalProgress], Any]


@dataclass
class ImportOutcome:
    kind: str  # skipped | cached | completed | partial | failed
    location: str | None = None
    status: str | None = None
    job_id: str | None = None
    summary: ImportSummary | None = None
    error: ImportRunError | None = None
    message: str = ""
    deals: list[Deal] = field(default_factory=list)
    deals_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ImportOrchestrator:
    """
    Punto de entrada de "traer deals para mi ubicación" / "importar menús".

    Decide si reusar la última importación, envía el job, sigue el polling
    reconciliando el progreso y refresca la lista de deals al final. Todos los
    fallos de la corrida se convierten en un ImportOutcome; `run` no lanza.

    Asume una sola corrida activa a la vez (ver core.runner).
    """

    def __init__(
        self,
        submitter: JobSubmitter,
        poller: JobPoller,
        reader: DealsReader,
        store: KeyValueStore,
        *,
        cache_key: str | None = None,
        on_progress: ProgressCallback | None = None,
    ):
        self.submitter = submitter
        self.poller = poller
        self.reader = reader
        self.store = store
        self.cache_key = cache_key or settings.CACHE_KEY_NAME
        self.on_progress = on_progress
        self.progress: LocalProgress | None = None

    async def _emit(self, progress: LocalProgress) -> None:
        self.progress = progress
        if self.on_progress is None:
            return
        try:
            res = self.on_progress(progress)
            if inspect.isawaitable(res):
                await res
        except Exception as e:
            logger.warning("progress observer failed err=%r", e)

    async def _reload(self, outcome: ImportOutcome) -> None:
        try:
            outcome.deals = await self.reader.reload()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("deals reload failed err=%r", e)
            outcome.deals_error = "Failed to load deals. Make sure the backend is running."

    async def _track(self, job_id: str, default_total: int) -> tuple[str | None, ImportSummary | None]:
        last = None
        async for snap in self.poller.poll(job_id):
            await self._emit(reconcile(self.progress, snap, default_total))
            last = snap
        status = last.status if last else None
        summary = ImportSummary.from_payload({"result": last.result}) if last else None
        return status, summary

    async def run(
        self, location: str | None, units: list[str] | None = None, *, force: bool = False
    ) -> ImportOutcome:
        location = (location or "").strip()
        if not location:
            return ImportOutcome(kind="skipped", message="Set your location first.")

        units = list(units) if units is not None else list(settings.DEFAULT_RESTAURANTS)

        if not force and self.store.get(self.cache_key) == location:
            logger.info("import cache hit location=%r, reloading deals only", location)
            outcome = ImportOutcome(kind="cached", location=location, message="Deals already imported.")
            await self._reload(outcome)
            return outcome

        outcome = ImportOutcome(kind="failed", location=location)
        logger.info("import start location=%r units=%d force=%s", location, len(units), force)
        await self._emit(initial_progress(len(units)))
        try:
            try:
                result = await self.submitter.submit(location, units)
                if isinstance(result, Accepted):
                    outcome.job_id = result.job_id
                    status, summary = await self._track(result.job_id, len(units))
                else:
                    status, summary = result.status, result.summary
                outcome.status, outcome.summary = status, summary
                if status not in SUCCESS_STATUSES:
                    raise RemoteJobFailed(
                        status or "unknown", job_id=outcome.job_id, summary=summary
                    )
            except ImportRunError as e:
                logger.error("import failed location=%r kind=%s err=%s", location, e.kind, e)
                outcome.error = e
                outcome.message = e.user_message
                # igual refrescamos para no dejar datos viejos en pantalla
                await self._reload(outcome)
                return outcome

            outcome.kind = status
            outcome.message = _summary_message(summary)
            await self._reload(outcome)
            self.store.set(self.cache_key, location)
            logger.info("import done location=%r status=%s job_id=%s", location, status, outcome.job_id)
            return outcome
        finally:
            if self.progress is not None:
                await self._emit(self.progress.model_copy(update={"visible": False}))
            self.progress = None


def _summary_message(summary: ImportSummary | None) -> str:
    if summary is None:
        return "Import complete."
    return (
        f"Import complete.\nCreated: {summary.created}\nUpdated: {summary.updated}\n"
        f"Ranked: {summary.ranked}\nSkipped: {len(summary.skipped)}"
    )
