from __future__ import annotations

import pytest

from dealscout.core.store import MemoryKVStore
from dealscout.schemas.models import Deal


class FakeApi:
    """
    Sustituto de DealsApiClient con respuestas programadas.
    Cada entrada de `submits`/`polls` es un dict (respuesta) o una excepción (se lanza).
    """

    def __init__(self, submits=None, polls=None, deals=None):
        self.submits = list(submits or [])
        self.polls = list(polls or [])
        self.deals = deals if deals is not None else []
        self.submit_calls = []
        self.poll_calls = []
        self.deals_calls = []

    async def submit_import(self, location, restaurants):
        self.submit_calls.append((location, list(restaurants)))
        item = self.submits.pop(0) if self.submits else {}
        if isinstance(item, BaseException):
            raise item
        return item

    async def get_import_job(self, job_id):
        self.poll_calls.append(job_id)
        # el último estado se repite indefinidamente
        item = self.polls.pop(0) if len(self.polls) > 1 else (self.polls[0] if self.polls else {})
        if isinstance(item, BaseException):
            raise item
        return item

    async def get_top_deals(self, limit=10):
        self.deals_calls.append({"top": True, "limit": limit})
        if isinstance(self.deals, BaseException):
            raise self.deals
        return self.deals

    async def get_deals(self, *, restaurant=None, sort_by=None, limit=None):
        self.deals_calls.append({"restaurant": restaurant, "sort_by": sort_by, "limit": limit})
        if isinstance(self.deals, BaseException):
            raise self.deals
        return self.deals


class FakeReader:
    def __init__(self, deals=None, error: BaseException | None = None):
        self.deals = deals if deals is not None else [Deal(item_name="Big Mac", price=5.99)]
        self.error = error
        self.calls = 0

    async def reload(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.deals)


async def no_sleep(_secs: float) -> None:
    return None


@pytest.fixture
def memory_store():
    return MemoryKVStore()


@pytest.fixture
def temp_db_path(tmp_path):
    return tmp_path / "dealscout.db"
