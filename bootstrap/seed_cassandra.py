#!/usr/bin/env python3
"""
Create the Cassandra keyspace and table used by the short URL store.

This CLI runs, in order:
    CREATE KEYSPACE IF NOT EXISTS <keyspace> WITH replication = {...}
    CREATE TABLE IF NOT EXISTS <keyspace>.<corpus> (shortcode text PRIMARY KEY, url text, owner text)

CLI usage:
    $ python -m bootstrap.seed_cassandra \
        --hosts cassandra-1,cassandra-2 --port 9042 \
        --keyspace shortn --corpus links \
        --replication-factor 3

    # Preview the statements without connecting
    $ python -m bootstrap.seed_cassandra --keyspace shortn --corpus links --dry-run

Behavior:
    - Statements are idempotent, re-running the script is safe.
    - Uses SimpleStrategy replication; multi-datacenter layouts are out of scope.
    - Prints concise action logs; never prints the password.

Args:
    --hosts (str): Comma-separated contact points (default: localhost).
    --port (int): CQL native protocol port (default: 9042).
    --keyspace (str): Keyspace name (default: shortn).
    --corpus (str): Table holding the short links (default: links).
    --replication-factor (int): SimpleStrategy replication factor (>= 1, default: 1).
    --username (str): Optional PasswordAuthenticator username.
    --password (str): Optional PasswordAuthenticator password.
    --dry-run (flag): If set, print the statements without executing them.

Raises:
    ValueError: For invalid or missing inputs.
    cassandra.cluster.NoHostAvailable / cassandra.DriverException: On cluster failures.
"""

from __future__ import annotations

import argparse

from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import Cluster

from shortn.constants import CassandraDefaults
from shortn.dao.cassandra.cql_schema import CQLSchema


def _positive_int(name: str, value: str) -> int:
    try:
        iv = int(value)
    except ValueError:
        raise ValueError(f'--{name} must be an integer') from None
    if iv < 1:
        raise ValueError(f'--{name} must be >= 1')
    return iv


def schema_statements(keyspace: str, corpus: str, replication_factor: int) -> list[str]:
    schema = CQLSchema(corpus)
    return [
        schema.create_keyspace(keyspace, replication_factor),
        f'USE {keyspace}',
        schema.create_table(),
    ]


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Steps:
        - Parse CLI arguments
        - Build the keyspace and table statements
        - Execute (or preview) them against the cluster

    Raises:
        ValueError: when inputs are invalid or missing.
        cassandra exceptions: on cluster failures.
    """
    parser = argparse.ArgumentParser(
        prog='seed_cassandra.py',
        description='Create the Cassandra keyspace and table for short URLs',
    )
    parser.add_argument('--hosts', default=','.join(CassandraDefaults.HOSTS), help='Comma-separated contact points')
    parser.add_argument('--port', default=str(CassandraDefaults.PORT), help='CQL native protocol port (default: 9042)')
    parser.add_argument('--keyspace', default=CassandraDefaults.KEYSPACE, help='Keyspace name (default: shortn)')
    parser.add_argument('--corpus', default=CassandraDefaults.CORPUS, help='Table holding the short links (default: links)')
    parser.add_argument('--replication-factor', default='1', help='SimpleStrategy replication factor (default: 1)')
    parser.add_argument('--username', default=None, help='PasswordAuthenticator username')
    parser.add_argument('--password', default=None, help='PasswordAuthenticator password')
    parser.add_argument('--dry-run', action='store_true', help='Print statements without executing them')

    args = parser.parse_args(argv)

    hosts = [host.strip() for host in args.hosts.split(',') if host.strip()]
    port = _positive_int('port', args.port)
    replication_factor = _positive_int('replication-factor', args.replication_factor)

    if not hosts:
        raise ValueError('Missing --hosts')
    if args.username and args.password is None:
        raise ValueError('--password is required when using --username')

    statements = schema_statements(args.keyspace.strip(), args.corpus.strip(), replication_factor)

    if args.dry_run:
        for statement in statements:
            print(f'[DRY-RUN] {statement}')
        return

    auth_provider = None
    if args.username:
        auth_provider = PlainTextAuthProvider(username=args.username, password=args.password)

    cluster = Cluster(contact_points=hosts, port=port, auth_provider=auth_provider)
    try:
        session = cluster.connect()
        for statement in statements:
            print(f'[EXEC] {statement}')
            session.execute(statement)
    finally:
        cluster.shutdown()

    print(f'[OK] {args.keyspace}.{args.corpus} ready on {",".join(hosts)}:{port}')


if __name__ == '__main__':  # pragma: no cover
    main()
