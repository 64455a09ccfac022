"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` in the lambda package's `__init__.py`
before any other logging is done.

Each record is written to stdout as one JSON line:
{
    "timestamp": "2026-01-12T08:30:00.000Z",
    "level": "INFO",
    "logger": "idemshort.core.service",
    "message": "Replaying short link for duplicate request.",
    "cacheKey": "Qm9vdHN0"
}

Fields passed through `extra={...}` are attached to the top-level object.
Tracebacks from `logger.exception()` land in the "exception" field.
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC

from idemshort.constants import ENV


# Third-party loggers that are too chatty at DEBUG/INFO
QUIET_LOGGERS = ('botocore', 'boto3', 'urllib3')


class JsonFormatter(logging.Formatter):
    """JSON formatter that includes LogRecord extras"""

    STANDARD_ATTRS = frozenset(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime', 'taskName'}

    def format(self, record: logging.LogRecord) -> str:
        # fmt: off
        timestamp = datetime.fromtimestamp(record.created, tz=UTC) \
                            .isoformat(timespec='milliseconds') \
                            .replace('+00:00', 'Z')
        # fmt: on

        log = {
            'timestamp': timestamp,
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in self.STANDARD_ATTRS:
                log[key] = value

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        # Extras are arbitrary objects; never let one of them break the log line
        return json.dumps(log, default=str)


def initialize_logging(level: str | None = None) -> None:
    log_level = (level or os.getenv(ENV.App.LOG_LEVEL, 'INFO')).upper()
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'json': {
                    '()': JsonFormatter,
                }
            },
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                }
            },
            'loggers': {name: {'level': 'WARNING'} for name in QUIET_LOGGERS},
            'root': {
                'level': log_level,
                'handlers': ['stdout'],
            },
        }
    )
