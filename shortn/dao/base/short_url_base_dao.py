"""Abstract base class for short URL data access objects (DAOs).

This class establishes a consistent contract for all short URL store
implementations, regardless of the underlying storage mechanism.

Responsibilities:
    - Provide an interface for adding URLs and resolving shortcodes.
    - Standardize outcome classification across data store implementations.
    - Enforce a consistent API for use by the HTTP layer.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from shortn.dao.cassandra import ShortURLCassandraDAO

        >>> dao = ShortURLCassandraDAO(...)

        >>> dao.add_url('https://example.com/x', 'alice')
        '/VM749C8'

        >>> dao.lookup_url('VM749C8')
        'https://example.com/x'

        >>> dao.lookup_url('missing')
        ''
"""

from abc import ABC, abstractmethod

from shortn.models import LookupResult


class ShortURLBaseDAO(ABC):
    """Interface for short URL data access objects (DAOs).

    Methods:
        fetch(shortcode: str, **kwargs) -> LookupResult:
            Resolve a shortcode into a tagged result.
            Backend request failures are reported as error outcomes, not raised.

        lookup_url(shortcode: str, **kwargs) -> str:
            Resolve a shortcode into its destination URL, '' if unknown or on error.

        add_url(url: str, owner: str, **kwargs) -> str:
            Store a URL with its owner and return the short link ('/' + shortcode).
            Raises DataStoreError on write failure.

    NOTE:
        - Records are create-once, read-many. The DAO does not provide an
          interface to delete entries.
    """

    @abstractmethod
    def fetch(self, shortcode: str, **kwargs) -> LookupResult:
        """Resolve a shortcode into a tagged lookup result.

        Args:
            shortcode (str):
                The shortcode to resolve.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            LookupResult: exactly one of found / not-found / an error outcome.
        """
        pass

    def lookup_url(self, shortcode: str, **kwargs) -> str:
        """Resolve a shortcode into its destination URL.

        Returns:
            str: The destination URL, or '' if the record is absent or the backend failed.
        """
        result = self.fetch(shortcode, **kwargs)
        return result.value if result.value is not None else ''

    @abstractmethod
    def add_url(self, url: str, owner: str, **kwargs) -> str:
        """Store a URL and its owner under a deterministic shortcode.

        Args:
            url (str):
                Destination URL.

            owner (str):
                Identity of the principal creating the record.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            str: The short link, i.e. '/' followed by the shortcode.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
