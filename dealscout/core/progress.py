"""
Reconciliación de progreso de jobs de importación.

El servidor reporta el avance por un canal eventualmente consistente: puede
omitir campos, mandar `total_stores=0` a mitad de corrida o incluso devolver un
`completed` menor al anterior. `reconcile` fusiona cada snapshot con la vista
local de forma que la barra de progreso nunca retroceda.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict

from dealscout.core.state import JobStatus
from dealscout.schemas.models import JobStatusPayload


class RawProgressSnapshot(BaseModel):
    """Un poll tal cual llegó. Cualquier contador puede faltar (None)."""

    model_config = ConfigDict(frozen=True)

    completed_count: int | None = None
    failed_count: int | None = None
    total_count: int | None = None
    status: str | None = None
    result: dict[str, Any] | None = None

    @classmethod
    def from_payload(cls, payload: JobStatusPayload) -> RawProgressSnapshot:
        prog = payload.progress

        def _count(v: int | None) -> int | None:
            # negativos = dato basura, igual que ausente
            return v if v is not None and v >= 0 else None

        return cls(
            completed_count=_count(prog.completed) if prog else None,
            failed_count=_count(prog.failed) if prog else None,
            total_count=prog.total_stores if prog else None,
            status=payload.status,
            result=payload.result,
        )


class LocalProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    completed_count: int = 0
    failed_count: int = 0
    total_count: int = 0
    status: str = JobStatus.QUEUED.value
    visible: bool = False


def initial_progress(default_total: int) -> LocalProgress:
    return LocalProgress(
        completed_count=0,
        failed_count=0,
        total_count=max(0, int(default_total)),
        status=JobStatus.QUEUED.value,
        visible=True,
    )


def reconcile(
    previous: LocalProgress, snapshot: RawProgressSnapshot, default_total: int
) -> LocalProgress:
    """
    Fusiona el snapshot con el progreso previo.

    - completed_count nunca baja (max contra el histórico de completados+fallidos).
    - failed_count toma el último valor presente del servidor.
    - total_count: total positivo del servidor > total previo > default_total.
    - status: el del snapshot si viene, si no el previo.

    Función pura: no hace I/O ni muta sus argumentos.
    """
    prev_completed_only = max(0, previous.completed_count - previous.failed_count)
    completed_only = (
        snapshot.completed_count if snapshot.completed_count is not None else prev_completed_only
    )
    failed = snapshot.failed_count if snapshot.failed_count is not None else previous.failed_count
    done_now = completed_only + failed

    if snapshot.total_count is not None and snapshot.total_count > 0:
        total = snapshot.total_count
    elif previous.total_count > 0:
        total = previous.total_count
    else:
        total = default_total

    return LocalProgress(
        completed_count=max(previous.completed_count, done_now),
        failed_count=failed,
        total_count=total,
        status=snapshot.status or previous.status,
        visible=True,
    )


def progress_percent(progress: LocalProgress, placeholder: int = 10) -> int:
    """Porcentaje entero para la barra; sin total conocido se muestra el placeholder."""
    if progress.total_count <= 0:
        return placeholder
    # redondeo half-up (no bancario)
    pct = math.floor(100 * progress.completed_count / progress.total_count + 0.5)
    return max(0, min(100, pct))


def scrape_stage(progress: LocalProgress) -> str:
    if not progress.total_count:
        return "Starting up…"
    if progress.completed_count <= 0:
        return "Spinning up store checks…"
    pct = math.floor(100 * progress.completed_count / progress.total_count + 0.5)
    if pct < 34:
        return "Pulling menus…"
    if pct < 67:
        return "Parsing items…"
    if pct < 100:
        return "Ranking deals…"
    return "Finalizing results…"
