from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _finite_count(value: Any) -> int | None:
    """Sólo números finitos cuentan; cualquier otra cosa equivale a 'ausente'."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


class ImportRequest(BaseModel):
    location: str
    restaurants: list[str]


class ImportSummary(BaseModel):
    model_config = ConfigDict(extra="allow")

    created: int = 0
    updated: int = 0
    ranked: int = 0
    skipped: list[Any] = Field(default_factory=list)

    @field_validator("created", "updated", "ranked", mode="before")
    @classmethod
    def _counts(cls, v):
        return _finite_count(v) or 0

    @field_validator("skipped", mode="before")
    @classmethod
    def _skipped(cls, v):
        return list(v) if isinstance(v, (list, tuple)) else []

    @classmethod
    def from_payload(cls, payload: dict | None) -> ImportSummary | None:
        """
        Extrae el resumen de una respuesta. El servidor lo manda en `result`,
        pero las versiones síncronas viejas lo ponen al nivel raíz.
        """
        if not isinstance(payload, dict):
            return None
        result = payload.get("result")
        if isinstance(result, dict):
            return cls.model_validate(result)
        if any(k in payload for k in ("created", "updated", "ranked", "skipped")):
            return cls.model_validate(
                {k: payload[k] for k in ("created", "updated", "ranked", "skipped") if k in payload}
            )
        return None


class SubmitResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    job_id: str | None = None
    status: str | None = None
    result: dict[str, Any] | None = None

    @field_validator("job_id", mode="before")
    @classmethod
    def _job_id(cls, v):
        if v is None or v == "":
            return None
        return str(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        return (v.strip().lower() or None) if isinstance(v, str) else None

    @field_validator("result", mode="before")
    @classmethod
    def _result(cls, v):
        return v if isinstance(v, dict) else None


class JobProgressPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    completed: int | None = None
    failed: int | None = None
    total_stores: int | None = None

    @field_validator("completed", "failed", "total_stores", mode="before")
    @classmethod
    def _counts(cls, v):
        return _finite_count(v)


class JobStatusPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: str | None = None
    progress: JobProgressPayload | None = None
    result: dict[str, Any] | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        return (v.strip().lower() or None) if isinstance(v, str) else None

    @field_validator("progress", "result", mode="before")
    @classmethod
    def _objects(cls, v):
        return v if isinstance(v, dict) else None


class Deal(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int | str | None = None
    restaurant_name: str | None = None
    item_name: str | None = None
    price: float | None = None
    value_score: float | None = None
    calories: float | None = None
    protein_grams: float | None = None
    category: str | None = None
    deal_type: str | None = None
    description: str | None = None
    portion_size: str | None = None
