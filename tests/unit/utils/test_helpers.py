"""Unit tests for helper functions in helpers.py.

Test coverage includes:

1. get_short_link() returns the public path of a shortcode

2. require_environment() decorator behavior
   - 2.1. Ensures decorated functions execute when all env vars are present.
   - 2.2. Ensures missing or empty env vars raise a descriptive MissingEnvironmentVariableError.
"""

import pytest

from shortn.exceptions import ConfigurationError, MissingEnvironmentVariableError
from shortn.utils.helpers import get_short_link, require_environment


# -------------------------------
# 1. get_short_link()
# -------------------------------


@pytest.mark.parametrize('shortcode', ['VM749C8', 'abc-_12', 'x'])
def test_get_short_link(shortcode):
    assert get_short_link(shortcode) == f'/{shortcode}'


# -------------------------------
# 2.1. require_environment() success
# -------------------------------


def test_require_environment_all_present(monkeypatch):
    """Ensure the decorated function runs and keeps its arguments when env vars are set."""
    monkeypatch.setenv('SHORTN_A', '1')
    monkeypatch.setenv('SHORTN_B', '2')

    @require_environment('SHORTN_A', 'SHORTN_B')
    def add(x, y=0):
        return x + y

    assert add(1, y=2) == 3
    assert add.__name__ == 'add'


# -------------------------------
# 2.2. require_environment() failure
# -------------------------------


def test_require_environment_missing(monkeypatch):
    monkeypatch.delenv('SHORTN_A', raising=False)
    monkeypatch.setenv('SHORTN_B', '')
    monkeypatch.setenv('SHORTN_C', 'set')

    @require_environment('SHORTN_A', 'SHORTN_B', 'SHORTN_C')
    def noop():
        return 'ran'

    with pytest.raises(MissingEnvironmentVariableError) as exc_info:
        noop()

    assert str(exc_info.value) == "Missing required environment variables: 'SHORTN_A', 'SHORTN_B'"
    assert isinstance(exc_info.value, ConfigurationError)
