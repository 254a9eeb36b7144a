from __future__ import annotations

import asyncio
import inspect
import random
import time
from collections.abc import Callable, Iterator


def _delays(tries: int, base_delay: float, jitter: bool) -> Iterator[float]:
    """Esperas entre intentos: backoff exponencial (x2) con jitter opcional."""
    delay = base_delay
    for _ in range(max(1, tries) - 1):
        yield delay + (random.uniform(0, delay) if jitter else 0.0)
        delay *= 2


def retry(
    source_type: str,
    tries: int = 3,
    base_delay: float = 0.5,
    jitter: bool = True,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
):
    """
    Decorador de reintentos con backoff exponencial.
    - source_type: etiqueta para logs.
    - tries: intentos totales (incluye el primero).
    - retry_on: sólo estas excepciones se reintentan; el resto se propaga al instante.

    Pensado para lecturas idempotentes. NO usar en el envío de jobs ni en el polling.
    """

    def _wrap(fn: Callable):
        if inspect.iscoroutinefunction(fn):

            async def _arun(*args, **kwargs):
                from dealscout.core.logging import logger

                waits = _delays(tries, base_delay, jitter)
                attempt = 0
                while True:
                    attempt += 1
                    try:
                        return await fn(*args, **kwargs)
                    except retry_on as e:
                        sleep = next(waits, None)
                        if sleep is None:
                            logger.error(
                                "retry/%s exhausted after %d tries: %r", source_type, attempt, e
                            )
                            raise
                        logger.warning(
                            "retry/%s attempt=%d err=%r sleep=%.2fs", source_type, attempt, e, sleep
                        )
                        await asyncio.sleep(sleep)

            _arun.__name__ = getattr(fn, "__name__", "_arun")
            _arun.__doc__ = fn.__doc__
            return _arun

        def _run(*args, **kwargs):
            from dealscout.core.logging import logger

            waits = _delays(tries, base_delay, jitter)
            attempt = 0
            while True:
                attempt += 1
                try:
                    return fn(*args, **kwargs)
                except retry_on as e:
                    sleep = next(waits, None)
                    if sleep is None:
                        logger.error("retry/%s exhausted after %d tries: %r", source_type, attempt, e)
                        raise
                    logger.warning(
                        "retry/%s attempt=%d err=%r sleep=%.2fs", source_type, attempt, e, sleep
                    )
                    time.sleep(sleep)

        _run.__name__ = getattr(fn, "__name__", "_run")
        _run.__doc__ = fn.__doc__
        return _run

    return _wrap
