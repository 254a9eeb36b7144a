from __future__ import annotations

import httpx
import pytest
from conftest import FakeApi

from dealscout.core.errors import PollTimeout, PollTransportError
from dealscout.core.poller import JobPoller


class SleepRecorder:
    def __init__(self):
        self.calls = []

    async def __call__(self, secs: float) -> None:
        self.calls.append(secs)


async def collect(poller: JobPoller, job_id: str, **kw):
    out = []
    async for s in poller.poll(job_id, **kw):
        out.append(s)
    return out


@pytest.mark.asyncio
async def test_timeout_after_exactly_max_attempts():
    api = FakeApi(polls=[{"status": "running", "progress": {"completed": 1}}])
    sleeper = SleepRecorder()
    poller = JobPoller(api, interval_ms=2000, max_attempts=3, sleep=sleeper)

    seen = []
    with pytest.raises(PollTimeout) as exc:
        async for s in poller.poll("job-1"):
            seen.append(s)

    assert len(api.poll_calls) == 3
    assert len(seen) == 3
    assert exc.value.attempts == 3 and exc.value.job_id == "job-1"
    # espera entre intentos, no después del último
    assert sleeper.calls == [2.0, 2.0]


@pytest.mark.asyncio
async def test_stops_on_terminal_status_after_emitting_it():
    api = FakeApi(
        polls=[
            {"status": "queued"},
            {"status": "running", "progress": {"completed": 2, "total_stores": 3}},
            {"status": "completed", "progress": {"completed": 3, "total_stores": 3}, "result": {"created": 4}},
        ]
    )
    sleeper = SleepRecorder()
    snaps = await collect(JobPoller(api, interval_ms=10, max_attempts=10, sleep=sleeper), "j")

    assert [s.status for s in snaps] == ["queued", "running", "completed"]
    assert snaps[-1].result == {"created": 4}
    assert len(api.poll_calls) == 3
    assert sleeper.calls == [0.01, 0.01]


@pytest.mark.asyncio
async def test_missing_status_keeps_polling_and_unknown_status_stops():
    api = FakeApi(polls=[{"progress": {"completed": 1}}, {}, {"status": "cancelled"}])
    snaps = await collect(JobPoller(api, interval_ms=0, max_attempts=10, sleep=SleepRecorder()), "j")
    assert [s.status for s in snaps] == [None, None, "cancelled"]


@pytest.mark.asyncio
async def test_call_arguments_override_defaults():
    api = FakeApi(polls=[{"status": "running"}])
    poller = JobPoller(api, interval_ms=5000, max_attempts=50, sleep=SleepRecorder())
    with pytest.raises(PollTimeout):
        await collect(poller, "j", interval_ms=1, max_attempts=2)
    assert len(api.poll_calls) == 2


@pytest.mark.asyncio
async def test_transport_error_is_not_retried():
    api = FakeApi(polls=[{"status": "running"}, httpx.ConnectError("down"), {"status": "completed"}])
    poller = JobPoller(api, interval_ms=0, max_attempts=10, sleep=SleepRecorder())

    with pytest.raises(PollTransportError) as exc:
        await collect(poller, "job-9")

    assert len(api.poll_calls) == 2
    assert exc.value.attempt == 2 and exc.value.job_id == "job-9"


@pytest.mark.asyncio
async def test_non_object_payload_counts_as_empty_snapshot():
    api = FakeApi(polls=[["weird"], {"status": "partial"}])
    snaps = await collect(JobPoller(api, interval_ms=0, max_attempts=5, sleep=SleepRecorder()), "j")
    assert snaps[0].status is None and snaps[0].completed_count is None
    assert snaps[-1].status == "partial"
