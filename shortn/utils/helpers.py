"""Helper utilities shared by the store and its callers.

Functions:
    get_short_link(shortcode) -> str
        Get the public path of a shortcode
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
"""

import os
import functools
from collections.abc import Callable

from shortn.exceptions import MissingEnvironmentVariableError


def get_short_link(shortcode: str) -> str:
    """Get the public-facing short link for a shortcode

    Args:
        shortcode (str): shortcode

    Returns:
        str: short link, the shortcode prefixed with '/'

    Example:
        >>> get_short_link('VM749C8')
        '/VM749C8'
    """
    return f'/{shortcode}'


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator
