"""Data Access Object (DAO) implementation for managing shortened URLs in Cassandra

This module provides a Cassandra-based implementation of ShortURLBaseDAO.

Responsibilities:
    - Derive the shortcode of a URL and store the URL and its owner under it;
    - Resolve shortcodes back into destination URLs;
    - Classify every backend outcome and count it in StoreMetrics;
    - Reconnect transparently when the connection was lost.

Classes:
    ShortURLCassandraDAO:
        DAO for storing and retrieving short URLs in a Cassandra keyspace.

Example:
    >>> from shortn.dao.cassandra import ShortURLCassandraDAO

    >>> dao = ShortURLCassandraDAO(cassandra_hosts=['cassandra'], cassandra_keyspace='shortn')

    >>> dao.add_url('https://example.com/x', 'alice')
    '/VM749C8'

    >>> dao.lookup_url('VM749C8')
    'https://example.com/x'

    >>> dao.fetch('nothere')
    LookupResult(outcome=<Outcome.NOT_FOUND: 'not-found'>, value=None, message=None)
"""

import logging
from typing import Optional

from beartype import beartype

from shortn.constants import Column
from shortn.models import LookupResult, Outcome, ShortURLModel
from shortn.dao.base import ShortURLBaseDAO
from shortn.dao.cassandra.connection import CassandraHandle
from shortn.dao.cassandra.mixins import CassandraClientMixin
from shortn.dao.cassandra.helpers import CASSANDRA_ERRORS, classify_cassandra_error, write_timestamp
from shortn.dao.exceptions import ERRORS_BY_OUTCOME, REQUEST_ERRORS, ShortURLCollisionError, TransportError
from shortn.utils.helpers import get_short_link
from shortn.utils.metrics import StoreMetrics
from shortn.utils.shortener import generate_shortcode


logger = logging.getLogger(__name__)

DIAGNOSTICS = {
    Outcome.INVALID_REQUEST: 'Invalid request to Cassandra.',
    Outcome.UNAVAILABLE: 'Cassandra replicas unavailable.',
    Outcome.TIMEOUT: 'Request to database backend timed out.',
    Outcome.OS_ERROR: 'Error talking to Cassandra.',
}


class ShortURLCassandraDAO(CassandraClientMixin, ShortURLBaseDAO):
    """Cassandra-based Data Access Object (DAO) for managing short URL records

    Attributes (see CassandraClientMixin):
        connection (CassandraConnection):
            Connection manager shared by all operations.
        metrics (StoreMetrics):
            Sink for the cassandra-found / cassandra-not-found / cassandra-errors counters.
        atomic_writes (bool):
            If True, url and owner are written by a single INSERT (atomic for one
            partition). If False, they are written by two independent statements and
            a failure of the second leaves a record without owner.
        reject_collisions (bool):
            If True, add_url() refuses to overwrite a shortcode holding a different URL.

    Methods:
        fetch(shortcode: str, **kwargs) -> LookupResult:
            Resolve a shortcode into a tagged result.
            Raises ConnectionRetriesExhaustedError when the backend stays unreachable.

        lookup_url(shortcode: str, **kwargs) -> str:
            Resolve a shortcode into its URL, '' when unknown or on backend error.

        add_url(url: str, owner: str, **kwargs) -> str:
            Store url and owner under the URL's shortcode, return '/<shortcode>'.
            Raises InvalidRequestError, BackendUnavailableError, BackendTimeoutError,
            TransportError on write failure, ShortURLCollisionError when rejecting a collision.
    """

    def __init__(
        self,
        atomic_writes: bool = True,
        reject_collisions: bool = False,
        metrics: Optional[StoreMetrics] = None,
        **cassandra_config,
    ):
        self.atomic_writes = atomic_writes
        self.reject_collisions = reject_collisions
        self.metrics = metrics if metrics is not None else StoreMetrics()
        super().__init__(**cassandra_config)

    @beartype
    def fetch(self, shortcode: str, **kwargs) -> LookupResult:
        """Resolve a shortcode into a tagged lookup result

        Args:
            shortcode (str):
                The shortcode identifier of the record.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            LookupResult:
                FOUND with the URL, NOT_FOUND when no URL is stored, or the
                error outcome of the failed request.

        Raises:
            ConnectionRetriesExhaustedError:
                If the connection can't be re-established within the retry budget.

        Example:
            >>> dao.fetch('VM749C8')
            LookupResult(outcome=<Outcome.FOUND: 'found'>, value='https://example.com/x', message=None)
        """
        handle = None
        try:
            with self.connection.acquire(self._reconnect) as handle:
                row = self._execute(handle, handle.statements.select_url, (shortcode,), shortcode=shortcode).one()
        except REQUEST_ERRORS as e:
            if isinstance(e, TransportError):
                self.connection.invalidate(handle)
            return LookupResult.error(e.reason, str(e))

        url = getattr(row, Column.URL, None) if row is not None else None
        if url is None:
            self.metrics.not_found()
            return LookupResult.not_found()

        self.metrics.found()
        logger.debug('Short URL record found.', extra={'shortcode': shortcode, 'event': Outcome.FOUND})
        return LookupResult.found(url)

    @beartype
    def lookup_url(self, shortcode: str, **kwargs) -> str:
        return super().lookup_url(shortcode, **kwargs)

    @beartype
    def add_url(self, url: str, owner: str, **kwargs) -> str:
        """Store a URL and its owner under the URL's shortcode

        Both columns carry the same client-side write timestamp and no TTL.
        Adding the same URL again overwrites the record with equal content.

        Args:
            url (str):
                Destination URL.
            owner (str):
                Identity of the principal creating the record.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            str: The short link ('/' + shortcode).

        Raises:
            InvalidRequestError, BackendUnavailableError, BackendTimeoutError, TransportError:
                If a write is rejected or fails. In split-write mode the url column
                may already be stored when the owner write fails.
            ShortURLCollisionError:
                If reject_collisions is set and the shortcode holds a different URL.
            ConnectionRetriesExhaustedError:
                If the connection can't be re-established within the retry budget.

        Example:
            >>> dao.add_url('https://example.com/x', 'alice')
            '/VM749C8'
        """
        short_url = ShortURLModel(shortcode=generate_shortcode(url), target=url, owner=owner)
        timestamp = write_timestamp()

        handle = None
        try:
            with self.connection.acquire(self._reconnect) as handle:
                if self.reject_collisions:
                    self._check_collision(handle, short_url)
                self._insert(handle, short_url, timestamp)
        except TransportError:
            self.connection.invalidate(handle)
            raise

        logger.info('Short URL record stored.', extra={'shortcode': short_url.shortcode, 'owner': owner})
        return get_short_link(short_url.shortcode)

    def _insert(self, handle: CassandraHandle, short_url: ShortURLModel, timestamp: int) -> None:
        statements = handle.statements
        shortcode = short_url.shortcode

        if self.atomic_writes:
            params = (shortcode, short_url.target, short_url.owner, timestamp)
            self._execute(handle, statements.insert_record, params, shortcode=shortcode)
            return

        # NOTE: The two INSERTs are independent mutations. If the owner write
        #       fails, the url column stays behind and the shortcode already
        #       resolves, but the record has no owner.
        self._execute(handle, statements.insert_url, (shortcode, short_url.target, timestamp), shortcode=shortcode)
        try:
            self._execute(handle, statements.insert_owner, (shortcode, short_url.owner, timestamp), shortcode=shortcode)
        except REQUEST_ERRORS:
            logger.warning('Short URL record stored without owner.', extra={'shortcode': shortcode, 'owner': short_url.owner})
            raise

    def _check_collision(self, handle: CassandraHandle, short_url: ShortURLModel) -> None:
        row = self._execute(handle, handle.statements.select_url, (short_url.shortcode,), shortcode=short_url.shortcode).one()
        existing = getattr(row, Column.URL, None) if row is not None else None
        if existing is not None and existing != short_url.target:
            logger.warning(
                'Shortcode collision rejected.',
                extra={'shortcode': short_url.shortcode, 'existing': existing, 'target': short_url.target},
            )
            raise ShortURLCollisionError(f"Short URL with code '{short_url.shortcode}' already points to a different URL.")

    def _execute(self, handle: CassandraHandle, statement, params: tuple, shortcode: str):
        """Execute one statement, turning driver errors into counted DataStoreErrors"""
        try:
            return handle.session.execute(statement, params)
        except CASSANDRA_ERRORS as e:
            outcome = classify_cassandra_error(e)
            self.metrics.error(outcome)
            logger.error(DIAGNOSTICS[outcome], extra={'shortcode': shortcode, 'event': outcome, 'error': str(e)})
            raise ERRORS_BY_OUTCOME[outcome](str(e) or type(e).__name__) from e
