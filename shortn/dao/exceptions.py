"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, timeouts, etc.).

    ConnectError:
        Raised when a single attempt to (re)establish the backend connection fails.

    ConnectionRetriesExhaustedError:
        Raised when the reconnect budget is spent without an open connection.

    InvalidRequestError, BackendUnavailableError, BackendTimeoutError, TransportError:
        Per-request backend failures, one for each error outcome of the store.

    ShortURLCollisionError:
        Raised when a different URL already occupies the generated shortcode.

Example:
    >>> from shortn.dao.exceptions import BackendTimeoutError
    >>> raise BackendTimeoutError('Operation timed out')
    Traceback (most recent call last):
        ...
    shortn.dao.exceptions.BackendTimeoutError: Operation timed out
"""

from shortn.models import Outcome


class DAOError(Exception):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, unavailable replicas, etc.
    """

    error_code = 'dao:data_store_error'
    reason: Outcome | None = None


class ConnectError(DataStoreError):
    """Exception raised when the connection to the data store can't be opened."""

    error_code = 'dao:connect_error'


class ConnectionRetriesExhaustedError(ConnectError):
    """Exception raised when every reconnect attempt within the budget failed."""

    error_code = 'dao:connection_retries_exhausted_error'


class InvalidRequestError(DataStoreError):
    """Exception raised when the backend rejects a malformed request."""

    error_code = 'dao:invalid_request_error'
    reason = Outcome.INVALID_REQUEST


class BackendUnavailableError(DataStoreError):
    """Exception raised when not enough replicas are alive to serve a request."""

    error_code = 'dao:backend_unavailable_error'
    reason = Outcome.UNAVAILABLE


class BackendTimeoutError(DataStoreError):
    """Exception raised when a backend request exceeds its deadline."""

    error_code = 'dao:backend_timeout_error'
    reason = Outcome.TIMEOUT


class TransportError(DataStoreError):
    """Exception raised on any other transport or protocol failure."""

    error_code = 'dao:transport_error'
    reason = Outcome.OS_ERROR


class ShortURLCollisionError(DAOError):
    """Exception raised when a shortcode is already taken by a different URL."""

    error_code = 'dao:short_url_collision_error'


ERRORS_BY_OUTCOME: dict[Outcome, type[DataStoreError]] = {
    Outcome.INVALID_REQUEST: InvalidRequestError,
    Outcome.UNAVAILABLE: BackendUnavailableError,
    Outcome.TIMEOUT: BackendTimeoutError,
    Outcome.OS_ERROR: TransportError,
}

# Per-request failures, as opposed to failures to connect at all
REQUEST_ERRORS = tuple(ERRORS_BY_OUTCOME.values())
