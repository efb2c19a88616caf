from datetime import datetime, UTC

from cassandra import (
    DriverException,
    OperationTimedOut,
    RequestValidationException,
    Timeout,
    Unavailable,
)
from cassandra.cluster import NoHostAvailable
from cassandra.connection import ConnectionException

from shortn.models import Outcome


__all__ = ['CASSANDRA_ERRORS', 'classify_cassandra_error', 'write_timestamp']

# Everything a single statement execution may raise from the driver or socket
CASSANDRA_ERRORS = (DriverException, NoHostAvailable, ConnectionException, OSError)


def classify_cassandra_error(error: BaseException) -> Outcome:
    """Map a driver exception onto exactly one error outcome

    Args:
        error (BaseException):
            Exception raised by Session.execute().

    Returns:
        Outcome:
            INVALID_REQUEST for rejected statements (InvalidRequest, syntax, auth),
            UNAVAILABLE when not enough replicas are alive,
            TIMEOUT for coordinator (Read/WriteTimeout) and client-side timeouts,
            OS_ERROR for anything else (no host, broken socket, protocol errors).

    Example:
        >>> classify_cassandra_error(Unavailable('Cannot achieve consistency level ONE'))
        <Outcome.UNAVAILABLE: 'unavailable'>
    """
    if isinstance(error, RequestValidationException):
        return Outcome.INVALID_REQUEST
    if isinstance(error, Unavailable):
        return Outcome.UNAVAILABLE
    if isinstance(error, (Timeout, OperationTimedOut)):
        return Outcome.TIMEOUT
    return Outcome.OS_ERROR


def write_timestamp() -> int:
    """Return the current time in microseconds since the epoch (CQL write timestamp)"""
    return int(datetime.now(UTC).timestamp() * 1_000_000)
