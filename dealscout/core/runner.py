from __future__ import annotations

import asyncio

from dealscout.core.logging import logger
from dealscout.core.orchestrator import ImportOrchestrator, ImportOutcome

# Corrida de importación en vuelo (a lo sumo una por proceso)
RUN_TASK: asyncio.Task[ImportOutcome] | None = None


def is_import_running() -> bool:
    return RUN_TASK is not None and not RUN_TASK.done()


async def launch_import_background(
    orchestrator: ImportOrchestrator,
    location: str | None,
    units: list[str] | None = None,
    *,
    force: bool = False,
) -> bool:
    """Programa la corrida como tarea y vuelve al instante. False si ya hay una en curso."""
    global RUN_TASK
    if is_import_running():
        logger.info("import already running; ignoring request location=%r", location)
        return False
    RUN_TASK = asyncio.create_task(orchestrator.run(location, units, force=force))
    return True


async def wait_current_import() -> ImportOutcome | None:
    if RUN_TASK is None:
        return None
    return await RUN_TASK
