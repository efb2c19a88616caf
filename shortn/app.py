"""Process-level wiring of the short URL store.

The store is built once when the process starts and handed to whatever serves
requests (HTTP handlers, workers), instead of living in a module-level global.

Example:
    >>> from shortn.app import build_store
    >>> from shortn.utils import initialize_logging
    >>> initialize_logging()
    >>> store = build_store('shortn')
    >>> store.add_url('https://example.com/x', 'alice')
    '/VM749C8'
"""

import inspect
import logging
from typing import Optional

from shortn.dao.cassandra import CassandraClientMixin, ShortURLCassandraDAO
from shortn.exceptions import BadConfigurationError
from shortn.types import AppConfig, CassandraConfiguration
from shortn.utils.config import load_config
from shortn.utils.metrics import StoreMetrics


logger = logging.getLogger(__name__)

STORE_OPTIONS = frozenset({'atomic_writes', 'reject_collisions'})

# Keys of the 'cassandra' section, i.e. the mixin's cassandra_* parameters without prefix
CASSANDRA_OPTIONS = frozenset(
    name.removeprefix('cassandra_')
    for name in inspect.signature(CassandraClientMixin.__init__).parameters
    if name.startswith('cassandra_')
)


def build_store(
    service_name: str = 'shortn',
    metrics: Optional[StoreMetrics] = None,
    app_config: Optional[AppConfig] = None,
) -> ShortURLCassandraDAO:
    """Build the Cassandra-backed store from the service configuration

    Args:
        service_name (str):
            Section of the AppConfig document to read. Defaults to 'shortn'.
        metrics (Optional[StoreMetrics]):
            Counter sink shared with the rest of the process. A new one is created if None.
        app_config (Optional[dict]):
            Already loaded configuration. Loaded with load_config() if None.

    Returns:
        ShortURLCassandraDAO: a store with an open connection.

    Raises:
        BadConfigurationError:
            If the configuration doesn't select the Cassandra backend or has unknown options.
        ConnectionRetriesExhaustedError:
            If Cassandra can't be reached within the reconnect budget.
    """
    if app_config is None:
        app_config = load_config(service_name)

    if 'cassandra' not in app_config:
        raise BadConfigurationError(f"Service '{service_name}' is not configured with the 'cassandra' backend.")

    store_config = dict(app_config.get('store') or {})
    unknown = set(store_config) - STORE_OPTIONS
    if unknown:
        raise BadConfigurationError(f'Unknown store options: {", ".join(sorted(unknown))}')

    cassandra_section = app_config['cassandra'] or {}
    unknown = set(cassandra_section) - CASSANDRA_OPTIONS
    if unknown:
        raise BadConfigurationError(f'Unknown cassandra options: {", ".join(sorted(unknown))}')

    logger.debug('Assuming Cassandra as the backend database for short URLs')
    cassandra_config: CassandraConfiguration = {f'cassandra_{k}': v for k, v in cassandra_section.items()}
    return ShortURLCassandraDAO(**store_config, **cassandra_config, metrics=metrics)
