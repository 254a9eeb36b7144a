from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dealscout.schemas.models import ImportSummary


class ImportRunError(RuntimeError):
    """Base de los fallos de una corrida de importación."""

    kind = "import_error"
    user_message = "Failed to load deals. Please try refreshing."

    def __init__(self, detail: str = "", *, cause: BaseException | None = None):
        super().__init__(detail or self.user_message)
        self.detail = detail
        self.cause = cause


class SubmissionFailed(ImportRunError):
    """Error de transporte o de protocolo al crear el job. No se reintenta."""

    kind = "submission_failed"
    user_message = "Could not start the menu import. Make sure the backend is running."


class PollTransportError(ImportRunError):
    """Falló una petición de estado durante el polling."""

    kind = "poll_transport_error"
    user_message = "Lost contact with the import job while checking its progress."

    def __init__(self, detail: str = "", *, job_id: str | None = None, attempt: int = 0, cause=None):
        super().__init__(detail, cause=cause)
        self.job_id = job_id
        self.attempt = attempt


class PollTimeout(ImportRunError):
    kind = "poll_timeout"
    user_message = (
        "The import is taking longer than expected. It may still be running on the server; "
        "try again in a few minutes."
    )

    def __init__(self, job_id: str, attempts: int):
        super().__init__(f"job {job_id} not terminal after {attempts} polls")
        self.job_id = job_id
        self.attempts = attempts


class RemoteJobFailed(ImportRunError):
    """El servidor reportó el job como terminado con fallo."""

    kind = "remote_job_failed"
    user_message = "The menu import failed on the server."

    def __init__(
        self,
        status: str,
        *,
        job_id: str | None = None,
        summary: ImportSummary | None = None,
    ):
        super().__init__(f"remote job ended with status={status!r}")
        self.status = status
        self.job_id = job_id
        self.summary = summary
