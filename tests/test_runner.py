from __future__ import annotations

import asyncio

import pytest

import dealscout.core.runner as runner
from dealscout.core.orchestrator import ImportOutcome


class SlowOrchestrator:
    def __init__(self):
        self.started = []
        self.release = asyncio.Event()

    async def run(self, location, units=None, *, force=False):
        self.started.append((location, force))
        await self.release.wait()
        return ImportOutcome(kind="completed", location=location)


@pytest.mark.asyncio
async def test_only_one_import_in_flight(monkeypatch):
    monkeypatch.setattr(runner, "RUN_TASK", None)
    orch = SlowOrchestrator()

    ok1 = await runner.launch_import_background(orch, "Austin", force=True)
    await asyncio.sleep(0)
    ok2 = await runner.launch_import_background(orch, "Austin")

    assert ok1 is True and ok2 is False
    assert runner.is_import_running()

    orch.release.set()
    outcome = await runner.wait_current_import()
    assert outcome.kind == "completed"
    assert orch.started == [("Austin", True)]
    assert not runner.is_import_running()

    # terminada la anterior, se puede lanzar otra
    assert await runner.launch_import_background(orch, "Denver") is True
    await runner.wait_current_import()


@pytest.mark.asyncio
async def test_wait_without_runs(monkeypatch):
    monkeypatch.setattr(runner, "RUN_TASK", None)
    assert await runner.wait_current_import() is None
