"""Unit tests for the Cassandra helper functions

Test coverage includes:

1. classify_cassandra_error()
   - Ensures each driver failure maps onto exactly one error outcome.

2. write_timestamp()
   - Ensures write timestamps are microseconds since the epoch.
"""

from datetime import datetime, UTC

import pytest
from cassandra import (
    AlreadyExists,
    InvalidRequest,
    OperationTimedOut,
    ReadTimeout,
    Unauthorized,
    Unavailable,
    WriteTimeout,
)
from cassandra.cluster import NoHostAvailable
from cassandra.connection import ConnectionException
from cassandra.policies import WriteType
from freezegun import freeze_time

from shortn.models import Outcome
from shortn.dao.cassandra.helpers import classify_cassandra_error, write_timestamp


# -------------------------------
# 1. classify_cassandra_error()
# -------------------------------


@pytest.mark.parametrize(
    'error, outcome',
    [
        (InvalidRequest('unconfigured table links'), Outcome.INVALID_REQUEST),
        (Unauthorized('User has no SELECT permission'), Outcome.INVALID_REQUEST),
        (AlreadyExists(keyspace='shortn', table='links'), Outcome.INVALID_REQUEST),
        (Unavailable('Cannot achieve consistency level ONE'), Outcome.UNAVAILABLE),
        (ReadTimeout('Operation timed out'), Outcome.TIMEOUT),
        (WriteTimeout('Operation timed out', write_type=WriteType.SIMPLE), Outcome.TIMEOUT),
        (OperationTimedOut(), Outcome.TIMEOUT),
        (NoHostAvailable('Unable to complete the operation against any hosts', {}), Outcome.OS_ERROR),
        (ConnectionException('Connection reset by peer'), Outcome.OS_ERROR),
        (OSError('Broken pipe'), Outcome.OS_ERROR),
    ],
)
def test_classify_cassandra_error(error, outcome):
    assert classify_cassandra_error(error) is outcome


# -------------------------------
# 2. write_timestamp()
# -------------------------------


@freeze_time('2026-10-17 12:00:00')
def test_write_timestamp():
    expected = int(datetime(2026, 10, 17, 12, tzinfo=UTC).timestamp()) * 1_000_000
    assert write_timestamp() == expected
