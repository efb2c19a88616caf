"""Cassandra mixin providing shared connection setup and the reconnect loop.

Responsibilities:
    - Build the cluster factory and the CassandraConnection
    - Retry opening the connection with bounded, jittered exponential backoff
    - Healthcheck the connection on initialization

Classes:
    - CassandraClientMixin: Base mixin to inject the Cassandra connection, reconnect policy & healthcheck.

Example:
    Typical usage with a DAO implementation:

        >>> class ShortURLCassandraDAO(CassandraClientMixin, ShortURLBaseDAO):
        ...     pass
        ...
        >>> dao = ShortURLCassandraDAO(cassandra_hosts=['cassandra'], cassandra_keyspace='shortn')
        >>> dao._healthcheck()
        True
"""

import logging
import functools
from collections.abc import Callable, Sequence
from typing import Optional

from cassandra import ConsistencyLevel
from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import Cluster
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_random_exponential,
)

from shortn.constants import CassandraDefaults, ReconnectPolicy
from shortn.dao.exceptions import ConnectError, ConnectionRetriesExhaustedError
from shortn.dao.cassandra.connection import CassandraConnection
from shortn.dao.cassandra.cql_schema import CQLSchema


logger = logging.getLogger(__name__)


def consistency_level(name: str | int) -> int:
    """Resolve a consistency level given by name ('ONE', 'local_quorum') or value"""
    if isinstance(name, int):
        if name not in ConsistencyLevel.value_to_name:
            raise ValueError(f'Unknown consistency level {name}.')
        return name
    try:
        return ConsistencyLevel.name_to_value[name.upper()]
    except KeyError:
        raise ValueError(f"Unknown consistency level '{name}'.") from None


def _default(value, default):
    return default if value is None else value


def _log_reconnect_attempt(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception()
    logger.warning(
        'Reconnect to Cassandra failed. Retrying...',
        extra={
            'attempt': retry_state.attempt_number,
            'sleep': round(retry_state.next_action.sleep, 3) if retry_state.next_action else None,
            'error': str(error),
        },
    )


class CassandraClientMixin:
    """Mixin Cassandra connection setup and reconnect policy for Cassandra-backed DAOs.

    Attributes:
        connection (CassandraConnection):
            Connection manager shared by every operation of the DAO.

    Methods:
        _reconnect() -> None:
            Call connection.ensure_open() until it succeeds or the retry budget runs out.

        _healthcheck(raise_error: bool = True) -> bool:
            Open the connection to verify connectivity.
            Optionally raise a DataStoreError if unreachable.
    """

    def __init__(
        self,
        cassandra_hosts: Optional[Sequence[str] | str] = CassandraDefaults.HOSTS,
        cassandra_port: Optional[int] = CassandraDefaults.PORT,
        cassandra_keyspace: Optional[str] = CassandraDefaults.KEYSPACE,
        cassandra_corpus: Optional[str] = CassandraDefaults.CORPUS,
        cassandra_consistency: Optional[str | int] = CassandraDefaults.CONSISTENCY,
        cassandra_username: Optional[str] = None,
        cassandra_password: Optional[str] = None,
        cassandra_connect_timeout: Optional[float] = CassandraDefaults.CONNECT_TIMEOUT,
        cassandra_request_timeout: Optional[float] = CassandraDefaults.REQUEST_TIMEOUT,
        cassandra_reconnect_attempts: Optional[int] = ReconnectPolicy.MAX_ATTEMPTS,
        cassandra_reconnect_backoff: Optional[float] = ReconnectPolicy.BACKOFF,
        cassandra_reconnect_max_backoff: Optional[float] = ReconnectPolicy.MAX_BACKOFF,
        cassandra_cluster_factory: Optional[Callable[[], Cluster]] = None,
        cassandra_connection: Optional[CassandraConnection] = None,
    ):
        """Initialize a Cassandra-based DAO

        The option is given to either use an existing CassandraConnection, a
        custom cluster factory, or create one via the connection parameters.
        A parameter given as None falls back to its default, except for
        cassandra_reconnect_attempts (None retries forever) and
        cassandra_request_timeout (None keeps the driver's deadline).

        Args:
            cassandra_hosts (Optional[Sequence[str] | str]):
                Contact points, as a list or a comma separated string. Defaults to 'localhost'.

            cassandra_port (Optional[int]):
                CQL native protocol port. Defaults to 9042.

            cassandra_keyspace (Optional[str]):
                Keyspace selected on every connection. Defaults to 'shortn'.

            cassandra_corpus (Optional[str]):
                Table holding the short links. Defaults to 'links'.

            cassandra_consistency (Optional[str | int]):
                Consistency level for every statement. Defaults to 'ONE'.

            cassandra_username (Optional[str]):
                Username for PasswordAuthenticator (if required).

            cassandra_password (Optional[str]):
                Password for PasswordAuthenticator (if required).

            cassandra_connect_timeout (Optional[float]):
                Seconds to wait for a node to accept a connection.

            cassandra_request_timeout (Optional[float]):
                Client-side deadline of a single statement.

            cassandra_reconnect_attempts (Optional[int]):
                Connect attempts before giving up. None retries forever.

            cassandra_reconnect_backoff (Optional[float]):
                Base of the jittered exponential backoff, in seconds.

            cassandra_reconnect_max_backoff (Optional[float]):
                Upper bound of a single backoff sleep, in seconds.

            cassandra_cluster_factory (Optional[Callable[[], Cluster]]):
                Builds a new Cluster for each connect attempt. If None, one is
                created from the connection parameters.

            cassandra_connection (Optional[CassandraConnection]):
                Pre-built connection manager. Takes precedence over everything above.

        Raises:
            ConnectionRetriesExhaustedError:
                If the connection can't be opened within the retry budget.
        """
        if cassandra_reconnect_attempts is not None and int(cassandra_reconnect_attempts) < 1:
            raise ValueError(f'Reconnect attempts must be positive or None (given value: {cassandra_reconnect_attempts}).')

        # null in the configuration document means "use the default"
        cassandra_hosts = _default(cassandra_hosts, CassandraDefaults.HOSTS)
        cassandra_port = _default(cassandra_port, CassandraDefaults.PORT)
        cassandra_keyspace = _default(cassandra_keyspace, CassandraDefaults.KEYSPACE)
        cassandra_corpus = _default(cassandra_corpus, CassandraDefaults.CORPUS)
        cassandra_consistency = _default(cassandra_consistency, CassandraDefaults.CONSISTENCY)
        cassandra_connect_timeout = _default(cassandra_connect_timeout, CassandraDefaults.CONNECT_TIMEOUT)
        cassandra_reconnect_backoff = _default(cassandra_reconnect_backoff, ReconnectPolicy.BACKOFF)
        cassandra_reconnect_max_backoff = _default(cassandra_reconnect_max_backoff, ReconnectPolicy.MAX_BACKOFF)

        if isinstance(cassandra_hosts, str):
            cassandra_hosts = [host.strip() for host in cassandra_hosts.split(',') if host.strip()]
        hosts = list(cassandra_hosts)
        port = int(cassandra_port)

        if cassandra_connection is None:
            if cassandra_cluster_factory is None:
                auth_provider = None
                if cassandra_username is not None:
                    auth_provider = PlainTextAuthProvider(username=cassandra_username, password=cassandra_password)
                cassandra_cluster_factory = functools.partial(
                    Cluster,
                    contact_points=hosts,
                    port=port,
                    auth_provider=auth_provider,
                    connect_timeout=cassandra_connect_timeout,
                )

            cassandra_connection = CassandraConnection(
                cassandra_cluster_factory,
                keyspace=cassandra_keyspace,
                schema=CQLSchema(cassandra_corpus),
                consistency_level=consistency_level(cassandra_consistency),
                request_timeout=cassandra_request_timeout,
                address=f'{",".join(hosts)}:{port}',
            )

        self.connection = cassandra_connection
        self._reconnect_attempts = None if cassandra_reconnect_attempts is None else int(cassandra_reconnect_attempts)
        self._reconnect_backoff = float(cassandra_reconnect_backoff)
        self._reconnect_max_backoff = float(cassandra_reconnect_max_backoff)

        self._healthcheck()

    def _reconnect(self) -> None:
        """Open the connection, retrying with jittered exponential backoff

        Raises:
            ConnectionRetriesExhaustedError:
                If every attempt within the budget failed. Chained to the last ConnectError.
        """
        stop = stop_never if self._reconnect_attempts is None else stop_after_attempt(self._reconnect_attempts)
        retrying = Retrying(
            retry=retry_if_exception_type(ConnectError),
            stop=stop,
            wait=wait_random_exponential(multiplier=self._reconnect_backoff, max=self._reconnect_max_backoff),
            before_sleep=_log_reconnect_attempt,
            reraise=False,
        )
        try:
            retrying(self.connection.ensure_open)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            logger.error(
                'Giving up on reconnecting to Cassandra.',
                extra={'address': self.connection.address, 'attempts': e.last_attempt.attempt_number},
            )
            raise ConnectionRetriesExhaustedError(
                f'Cassandra at {self.connection.address} still unreachable after {e.last_attempt.attempt_number} attempts: {last_error}'
            ) from last_error

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """Open the connection to healthcheck connectivity

        Args:
            raise_error (bool):
                If True, raises ConnectionRetriesExhaustedError on failure. Defaults to True.

        Returns:
            bool:
                True if Cassandra is reachable, False otherwise (only if raise_error=False).
        """
        try:
            self._reconnect()
        except ConnectionRetriesExhaustedError:
            if raise_error:
                raise
            return False
        else:
            return True

    def close(self) -> None:
        self.connection.close()
