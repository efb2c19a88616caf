from shortn.dao.cassandra.cql_schema import CQLSchema
from shortn.dao.cassandra.connection import CassandraConnection, CassandraHandle
from shortn.dao.cassandra.mixins import CassandraClientMixin
from shortn.dao.cassandra.short_url_cassandra_dao import ShortURLCassandraDAO


__all__ = [
    'CQLSchema',
    'CassandraConnection',
    'CassandraHandle',
    'CassandraClientMixin',
    'ShortURLCassandraDAO',
]
