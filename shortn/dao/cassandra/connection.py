"""Connection manager owning the link to the Cassandra cluster.

Responsibilities:
    - Open the cluster, select the keyspace and prepare the fixed statements;
    - Re-open lazily, under an exclusive lock, when a caller finds it closed;
    - Hand out the live session to many concurrent callers under a shared lock.

Classes:
    CassandraConnection:
        Process-wide connection with open/closed state and a reconnect sequence.
    CassandraHandle:
        Immutable pair of a live session and its prepared statements.

Example:
    >>> connection = CassandraConnection(lambda: Cluster(['localhost']), keyspace='shortn')
    >>> connection.ensure_open()
    >>> with connection.acquire() as handle:
    ...     handle.session.execute(handle.statements.select_url, ('VM749C8',)).one()

NOTE: The manager imposes no retry policy. A failed `ensure_open()` raises
      ConnectError and leaves the connection closed. Callers decide whether
      and how often to try again (see CassandraClientMixin._reconnect).
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from collections.abc import Callable, Iterator
from typing import Optional

from cassandra import ConsistencyLevel, DriverException
from cassandra.cluster import Cluster, NoHostAvailable, Session
from cassandra.connection import ConnectionException
from cassandra.query import PreparedStatement

from shortn.constants import CassandraDefaults
from shortn.dao.exceptions import ConnectError
from shortn.dao.cassandra.cql_schema import CQLSchema, validate_identifier
from shortn.utils.locks import ReadWriteLock


logger = logging.getLogger(__name__)

# Failures of a single connect attempt (transport, DNS, keyspace selection, prepare)
CONNECT_ERRORS = (NoHostAvailable, ConnectionException, DriverException, OSError)


@dataclass(frozen=True)
class PreparedStatements:
    select_url: PreparedStatement
    insert_url: PreparedStatement
    insert_owner: PreparedStatement
    insert_record: PreparedStatement


@dataclass(frozen=True)
class CassandraHandle:
    session: Session
    statements: PreparedStatements


class CassandraConnection:
    """Lazily (re)opened connection to a Cassandra keyspace.

    Attributes:
        keyspace (str):
            Keyspace selected on every new session.
        schema (CQLSchema):
            Statements for the corpus table, prepared on every new session.
        consistency_level (int):
            cassandra.ConsistencyLevel applied to all prepared statements.
        address (str):
            Human readable cluster address used in diagnostics.
    """

    def __init__(
        self,
        cluster_factory: Callable[[], Cluster],
        keyspace: str = CassandraDefaults.KEYSPACE,
        schema: Optional[CQLSchema] = None,
        consistency_level: int = ConsistencyLevel.ONE,
        request_timeout: Optional[float] = CassandraDefaults.REQUEST_TIMEOUT,
        address: str = 'cassandra',
    ):
        self._cluster_factory = cluster_factory
        self.keyspace = validate_identifier(keyspace, 'keyspace')
        self.schema = schema if schema is not None else CQLSchema(CassandraDefaults.CORPUS)
        self.consistency_level = consistency_level
        self.request_timeout = request_timeout
        self.address = address

        self._lock = ReadWriteLock()
        self._cluster: Optional[Cluster] = None
        self._handle: Optional[CassandraHandle] = None

    @property
    def is_open(self) -> bool:
        handle = self._handle
        return handle is not None and not handle.session.is_shutdown

    def ensure_open(self) -> None:
        """Make sure the shared session is usable

        Returns immediately when the connection is open. Otherwise takes the
        exclusive lock, checks again and runs the connect sequence.

        Raises:
            ConnectError:
                If the cluster can't be reached, the keyspace can't be selected
                or the statements can't be prepared.
        """
        if self.is_open:
            return

        with self._lock.write_locked():
            # Another caller may have reconnected while we waited for the lock.
            if self.is_open:
                return
            self._open()

    def _open(self) -> None:
        self._teardown()

        cluster = None
        try:
            cluster = self._cluster_factory()
            session = cluster.connect()
            session.set_keyspace(self.keyspace)
            if self.request_timeout is not None:
                session.default_timeout = self.request_timeout
            statements = self._prepare(session)
        except CONNECT_ERRORS as e:
            logger.error(
                'Error opening connection to Cassandra.',
                extra={'address': self.address, 'keyspace': self.keyspace, 'error': str(e)},
            )
            self._shutdown(cluster)
            raise ConnectError(f"Can't connect to Cassandra at {self.address}/{self.keyspace}: {e}") from e

        self._cluster = cluster
        self._handle = CassandraHandle(session=session, statements=statements)
        logger.info('Connected to Cassandra.', extra={'address': self.address, 'keyspace': self.keyspace})

    def _prepare(self, session: Session) -> PreparedStatements:
        prepared = {}
        for name in ('select_url', 'insert_url', 'insert_owner', 'insert_record'):
            statement = session.prepare(getattr(self.schema, name)())
            statement.consistency_level = self.consistency_level
            prepared[name] = statement
        return PreparedStatements(**prepared)

    @contextmanager
    def acquire(self, reconnect: Optional[Callable[[], None]] = None) -> Iterator[CassandraHandle]:
        """Hold the shared lock on a live connection

        While the connection is closed, the shared lock is dropped, `reconnect`
        is called (defaults to `ensure_open`) and the shared lock is taken again.

        Args:
            reconnect (Optional[Callable[[], None]]):
                Callable that opens the connection or raises.

        Yields:
            CassandraHandle: the live session and its prepared statements.
        """
        reconnect = reconnect or self.ensure_open

        self._lock.acquire_read()
        try:
            while not self.is_open:
                self._lock.release_read()
                try:
                    reconnect()
                finally:
                    self._lock.acquire_read()
            yield self._handle
        finally:
            self._lock.release_read()

    def invalidate(self, handle: CassandraHandle) -> None:
        """Mark the connection closed after a transport failure on `handle`

        Does nothing if the connection was already replaced by a newer one.
        Must not be called while holding the shared lock.
        """
        with self._lock.write_locked():
            if self._handle is not handle:
                return
            logger.warning('Dropping Cassandra connection after a transport error.', extra={'address': self.address})
            self._teardown()

    def close(self) -> None:
        with self._lock.write_locked():
            self._teardown()

    def _teardown(self) -> None:
        cluster = self._cluster
        self._cluster = None
        self._handle = None
        self._shutdown(cluster)

    @staticmethod
    def _shutdown(cluster: Optional[Cluster]) -> None:
        if cluster is None:
            return
        try:
            cluster.shutdown()
        except CONNECT_ERRORS:
            logger.debug('Ignoring error while shutting down a Cassandra cluster.', exc_info=True)
