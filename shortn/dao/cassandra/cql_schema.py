import re

from shortn.constants import Column


__all__ = ['CQLSchema']

# CQL identifiers are interpolated into statements, never bound
IDENTIFIER = re.compile(r'^[A-Za-z][A-Za-z0-9_]{0,47}$')


def validate_identifier(name: str, kind: str) -> str:
    if not isinstance(name, str):
        raise TypeError(f'{kind.capitalize()} must be of type string (given type: {type(name)}).')
    if not IDENTIFIER.match(name):
        raise ValueError(f"Invalid {kind} name '{name}' (expected letters, digits and underscores, max 48 characters).")
    return name


class CQLSchema:
    """Provide the CQL statements used to store short URL records.

    All statements target one table (the corpus) inside the keyspace selected
    on the session. Every write is stamped with a client-side timestamp and
    stored without a TTL.
    """

    def __init__(self, corpus: str):
        self.corpus = validate_identifier(corpus, 'corpus')

    def select_url(self) -> str:
        return f'SELECT {Column.URL} FROM {self.corpus} WHERE {Column.SHORTCODE} = ?'

    def insert_url(self) -> str:
        return f'INSERT INTO {self.corpus} ({Column.SHORTCODE}, {Column.URL}) VALUES (?, ?) USING TIMESTAMP ? AND TTL 0'

    def insert_owner(self) -> str:
        return f'INSERT INTO {self.corpus} ({Column.SHORTCODE}, {Column.OWNER}) VALUES (?, ?) USING TIMESTAMP ? AND TTL 0'

    def insert_record(self) -> str:
        return (
            f'INSERT INTO {self.corpus} ({Column.SHORTCODE}, {Column.URL}, {Column.OWNER}) '
            f'VALUES (?, ?, ?) USING TIMESTAMP ? AND TTL 0'
        )

    def create_keyspace(self, keyspace: str, replication_factor: int = 1) -> str:
        validate_identifier(keyspace, 'keyspace')
        if not isinstance(replication_factor, int) or replication_factor < 1:
            raise ValueError(f'Replication factor must be a positive integer (given value: {replication_factor}).')
        return (
            f'CREATE KEYSPACE IF NOT EXISTS {keyspace} '
            f"WITH replication = {{'class': 'SimpleStrategy', 'replication_factor': {replication_factor}}}"
        )

    def create_table(self) -> str:
        return f'CREATE TABLE IF NOT EXISTS {self.corpus} ({Column.SHORTCODE} text PRIMARY KEY, {Column.URL} text, {Column.OWNER} text)'
