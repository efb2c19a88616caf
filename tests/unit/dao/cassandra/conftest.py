import re
from collections import namedtuple
from unittest.mock import MagicMock

import pytest
from cassandra.cluster import Cluster, Session
from cassandra.query import PreparedStatement

from shortn.dao.cassandra import ShortURLCassandraDAO
from shortn.utils.metrics import StoreMetrics


Row = namedtuple('Row', ['url'])

COLUMNS = re.compile(r'\(([^)]*)\)')


class FakeResultSet:
    def __init__(self, row=None):
        self._row = row

    def one(self):
        return self._row


class FakeLinksTable:
    """In-memory stand-in for the links table, driven by the prepared CQL text.

    `fail_on(column, error)` makes the next INSERT writing `column` (or the next
    SELECT when column='select') raise `error`.
    """

    def __init__(self):
        self.rows: dict[str, dict] = {}
        self.executed: list[tuple[str, tuple]] = []
        self._failures: dict[str, list[Exception]] = {}

    def fail_on(self, column: str, error: Exception) -> None:
        self._failures.setdefault(column, []).append(error)

    def _maybe_fail(self, key: str) -> None:
        errors = self._failures.get(key)
        if errors:
            raise errors.pop(0)

    def execute(self, statement, params=None):
        query = statement.query_string
        self.executed.append((query, params))

        if query.startswith('SELECT'):
            self._maybe_fail('select')
            row = self.rows.get(params[0])
            if row is None or row.get('url') is None:
                return FakeResultSet(None)
            return FakeResultSet(Row(url=row['url']))

        columns = [c.strip() for c in COLUMNS.search(query).group(1).split(',')]
        for column in columns[1:]:
            self._maybe_fail(column)
        values = dict(zip(columns, params[: len(columns)]))
        self.rows.setdefault(values.pop('shortcode'), {}).update(values)
        return FakeResultSet(None)


@pytest.fixture
def links_table() -> FakeLinksTable:
    return FakeLinksTable()


@pytest.fixture
def session(links_table) -> Session:
    """Mock a live Cassandra session backed by the in-memory table."""
    _session = MagicMock(spec=Session)
    _session.is_shutdown = False
    _session.prepare.side_effect = lambda query: MagicMock(spec=PreparedStatement, query_string=query)
    _session.execute.side_effect = links_table.execute
    return _session


@pytest.fixture
def cluster(session) -> Cluster:
    _cluster = MagicMock(spec=Cluster)
    _cluster.connect.return_value = session
    return _cluster


@pytest.fixture
def cluster_factory(cluster) -> MagicMock:
    return MagicMock(return_value=cluster)


@pytest.fixture
def metrics() -> StoreMetrics:
    return StoreMetrics()


@pytest.fixture
def dao_config(cluster_factory, metrics) -> dict:
    """Keyword arguments of a DAO that never sleeps between reconnect attempts."""
    return {
        'cassandra_cluster_factory': cluster_factory,
        'cassandra_reconnect_attempts': 3,
        'cassandra_reconnect_backoff': 0,
        'cassandra_reconnect_max_backoff': 0,
        'metrics': metrics,
    }


@pytest.fixture
def dao(dao_config) -> ShortURLCassandraDAO:
    return ShortURLCassandraDAO(**dao_config)
