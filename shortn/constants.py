from enum import StrEnum


# Length of generated shortcodes (~42 bits of a SHA-256 digest)
SHORTCODE_LENGTH = 7


class Column:
    """Fixed CQL column names of a short URL record."""

    SHORTCODE = 'shortcode'
    URL = 'url'
    OWNER = 'owner'


class CassandraDefaults:
    """Connection defaults for the column store."""

    HOSTS = ('localhost',)
    PORT = 9042
    KEYSPACE = 'shortn'
    CORPUS = 'links'  # table holding the short links
    CONSISTENCY = 'ONE'  # weakest single-replica level
    CONNECT_TIMEOUT = 5.0
    REQUEST_TIMEOUT = 10.0


class ReconnectPolicy:
    """Defaults for the blocking reconnect loop."""

    MAX_ATTEMPTS = 10
    BACKOFF = 0.1  # seconds, base of the exponential backoff
    MAX_BACKOFF = 5.0


class Metric:
    """Counter names emitted by the store."""

    NOT_FOUND = 'cassandra-not-found'
    FOUND = 'cassandra-found'
    ERRORS = 'cassandra-errors'

    class Prometheus:
        """Series names in the Prometheus exposition format."""

        NOT_FOUND = 'shortn_cassandra_not_found_total'
        FOUND = 'shortn_cassandra_found_total'
        ERRORS = 'shortn_cassandra_errors_total'
        REASON_LABEL = 'reason'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'
