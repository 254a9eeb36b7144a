from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from dealscout.config.settings import settings


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
            "time": self.formatTime(record, "%Y-%m-%d %H:%M:%S"),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str = "INFO", log_dir: Path | None = None) -> logging.Logger:
    logger = logging.getLogger("dealscout")
    if logger.handlers:
        return logger
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Consola (humano)
    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(logger.level)
    sh.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(sh)

    # Archivo (JSON, rotación)
    log_file = None
    try:
        directory = Path(log_dir or settings.LOG_DIR)
        directory.mkdir(parents=True, exist_ok=True)
        log_file = directory / "dealscout.log"
        fh = RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=5, encoding="utf-8")
        fh.setLevel(logger.level)
        fh.setFormatter(_JsonFormatter())
        logger.addHandler(fh)
    except OSError as e:
        # sin disco escribible seguimos sólo con consola
        logger.warning("file logging disabled dir=%s err=%r", log_dir or settings.LOG_DIR, e)
        log_file = None

    logger.propagate = False
    logger.debug("logging initialized (file=%s)", str(log_file))
    return logger


logger = setup_logging(settings.LOG_LEVEL)
