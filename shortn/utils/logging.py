"""Application-wide logging initialization

IMPORTANT: Call `initialize_logging()` once at process start, before the store
is built and before any other logging is done.

Every record is a single JSON line. Fields passed through `extra=` are merged
into the top level next to the standard ones.

A failed lookup, as logged by ShortURLCassandraDAO:
{
    "timestamp": "2026-10-17T12:00:00.000Z",
    "level": "ERROR",
    "logger": "shortn.dao.cassandra.short_url_cassandra_dao",
    "message": "Request to database backend timed out.",
    "shortcode": "VM749C8",
    "event": "timeout",
    "error": "Operation timed out - received only 0 responses."
}

A retried connect, as logged by CassandraClientMixin:
{
    "timestamp": "2026-10-17T12:00:00.250Z",
    "level": "WARNING",
    "logger": "shortn.dao.cassandra.mixins",
    "message": "Reconnect to Cassandra failed. Retrying...",
    "attempt": 1,
    "sleep": 0.083,
    "error": "('Unable to connect to any servers', {})"
}

Fields used by the store:
    shortcode, owner        the record a DAO operation works on
    event                   outcome of a failed request, same as the `reason` metric label
    address, keyspace       the cluster a connection targets
    attempt, attempts       reconnect progress
    sleep                   backoff before the next attempt, in seconds
    error                   str() of the driver exception
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC

from shortn.constants import ENV


class JsonFormatter(logging.Formatter):
    """JSON formatter that includes LogRecord extras"""

    STANDARD_ATTRS = frozenset(
        {
            'args',
            'asctime',
            'created',
            'exc_info',
            'exc_text',
            'filename',
            'funcName',
            'levelname',
            'levelno',
            'lineno',
            'module',
            'msecs',
            'msg',
            'name',
            'pathname',
            'process',
            'processName',
            'relativeCreated',
            'stack_info',
            'thread',
            'threadName',
            'taskName',
        }
    )

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
        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in self.STANDARD_ATTRS:
                log[key] = value

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
            'root': {
                'level': log_level,
                'handlers': ['stdout'],
            },
            'loggers': {
                # the driver is chatty about every node it (re)discovers
                'cassandra': {'level': 'WARNING'},
            },
        }
    )
