"""Console logging for the service: one readable line per record, context as JSON.

Modules log through ``logging.getLogger(__name__)`` and pass request context
(post ids, attachment ids, URLs) via ``extra={...}``::

    2024-05-01 09:05:00 | INFO     | postanalyzer.services.images.aggregator | Aggregated post images {"post_id": 42, "unique": 3}
"""

import json
import logging
import sys

ROOT_LOGGER = "postanalyzer"

# httpx logs every request at INFO; the WordPress client already logs what matters
NOISY_LOGGERS = ("httpx", "httpcore")

# Attributes every LogRecord carries; anything else arrived through ``extra``
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


def record_context(record: logging.LogRecord) -> dict[str, object]:
    """The ``extra`` fields attached to a record."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JSONExtrasFormatter(logging.Formatter):
    """``timestamp | LEVEL | logger | message {context}`` lines."""

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        line = " | ".join(
            (
                self.formatTime(record, self.datefmt),
                f"{record.levelname:<8}",
                record.name,
                record.message,
            )
        )

        context = record_context(record)
        if context:
            line = f"{line} {json.dumps(context, default=str, ensure_ascii=False)}"

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            line = f"{line}\n{record.exc_text}"
        if record.stack_info:
            line = f"{line}\n{self.formatStack(record.stack_info)}"
        return line


def setup_logging(level: int = logging.INFO) -> None:
    """Attach the console handler to the ``postanalyzer`` logger once."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    if logger.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONExtrasFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.propagate = False
