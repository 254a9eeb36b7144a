from enum import Enum


class JobStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


# Estados en los que el job sigue vivo en el servidor
ACTIVE_STATUSES = frozenset({JobStatus.QUEUED.value, JobStatus.RUNNING.value})
# Terminales que cuentan como importación exitosa (actualizan la clave de caché)
SUCCESS_STATUSES = frozenset({JobStatus.COMPLETED.value, JobStatus.PARTIAL.value})


def is_active(status: str | None) -> bool:
    """Un status ausente se trata como 'sigue corriendo'."""
    return not status or status in ACTIVE_STATUSES
