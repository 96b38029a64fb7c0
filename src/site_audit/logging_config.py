"""
Logging configuration for Site Audit.

Console output goes through Rich on stderr, so ``--json`` output on stdout
stays machine readable. Several audits may run on one event loop at once;
every record is stamped with the id of the job whose task emitted it
(``-`` outside a job) so interleaved lines can be told apart.
"""

import contextlib
import contextvars
import logging
from typing import Iterator, Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "site_audit"

# Third-party loggers that report every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

_current_job: contextvars.ContextVar[str] = contextvars.ContextVar("site_audit_job", default="-")


class JobContextFilter(logging.Filter):
    """Copy the current job id onto ``record.job_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.job_id = _current_job.get()
        return True


@contextlib.contextmanager
def job_context(job_id: str) -> Iterator[None]:
    """Tag records logged inside the block with ``job_id``.

    Tasks and threads started inside the block copy the context, so
    collectors and analysers launched by a job inherit its id.
    """
    token = _current_job.set(job_id)
    try:
        yield
    finally:
        _current_job.reset(token)


def current_job() -> str:
    return _current_job.get()


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure console (and optionally file) logging.

    Args:
        verbose: DEBUG level, with source paths and locals in tracebacks
        quiet: Only ERROR and above
        log_file: Also append plain-text records to this file

    Returns:
        The ``site_audit`` logger
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    job_filter = JobContextFilter()

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_time=True,
        show_path=verbose,
    )
    console_handler.setFormatter(logging.Formatter("[%(job_id)s] %(message)s", datefmt="[%X]"))
    console_handler.addFilter(job_filter)
    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)s %(name)s [%(job_id)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        file_handler.addFilter(job_filter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger in the ``site_audit`` namespace; bare names are prefixed."""
    if not name:
        return logging.getLogger(ROOT_LOGGER)
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
