"""
Логирование с идентификатором соединения.

У каждого принятого соединения свой trace_id. Он лежит в ContextVar,
поэтому виден из любой корутины этого соединения, а Filter
подставляет его в каждую запись:

    2025-01-15 12:30:45 | INFO | [3f9a01bc] GET /echo/abc | 200 | 41B | 0.35ms
"""
import logging
import time
import uuid
from contextvars import ContextVar
from contextlib import contextmanager
from dataclasses import dataclass
from typing import IO, Iterator, Optional

LOGGER_NAME = "httpd"

LOG_FORMAT = "%(asctime)s | %(levelname)s | [%(trace_id)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

trace_id_var: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)


def new_trace_id() -> str:
    """
    Выдаёт новый trace_id и делает его текущим.

    8 hex-символов из uuid4 — для логов одного процесса хватает.
    """
    trace_id = uuid.uuid4().hex[:8]
    trace_id_var.set(trace_id)
    return trace_id


def get_trace_id() -> Optional[str]:
    return trace_id_var.get()


class TraceIdFilter(logging.Filter):
    """Кладёт trace_id в запись; вне соединения — "-"."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = trace_id_var.get() or "-"
        return True


@dataclass
class RequestLog:
    """Строка access-лога, заполняется по ходу обработки."""
    method: str
    path: str
    status: int = 0
    bytes_sent: int = 0
    duration_ms: float = 0


def setup_logger(level: str = "info", stream: Optional[IO[str]] = None) -> logging.Logger:
    """
    Настраивает логгер "httpd".

    Повторный вызов заменяет хэндлер, а не добавляет второй.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(TraceIdFilter())
    logger.addHandler(handler)
    return logger


@contextmanager
def log_request(logger: logging.Logger, method: str, path: str) -> Iterator[RequestLog]:
    """
    Пишет access-лог по выходу из блока, даже если внутри было исключение.

        with log_request(logger, "GET", "/echo/abc") as log:
            log.status = 200
            log.bytes_sent = 42
    """
    log = RequestLog(method=method, path=path)
    started = time.perf_counter()
    try:
        yield log
    finally:
        log.duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{log.method} {log.path} | {log.status} | "
            f"{log.bytes_sent}B | {log.duration_ms:.2f}ms"
        )
