"""Unit tests for the dataclasses in models.py

Test coverage includes:

1. ShortURLModel
   - Ensures instances can be created with and without owner.
   - Verifies that fields are frozen and the short link is derived from the shortcode.

2. LookupResult
   - Ensures the factory methods produce consistent results.
   - Ensures inconsistent combinations of outcome, value and message are rejected.
"""

from dataclasses import FrozenInstanceError

import pytest

from shortn.models import LookupResult, Outcome, ShortURLModel


# -------------------------------------------------
# 1. ShortURLModel
# -------------------------------------------------


def test_short_url_model_creation():
    model = ShortURLModel(shortcode='VM749C8', target='https://example.com/x', owner='alice')

    assert model.shortcode == 'VM749C8'
    assert model.target == 'https://example.com/x'
    assert model.owner == 'alice'
    assert model.link == '/VM749C8'


def test_short_url_model_owner_defaults_to_none():
    assert ShortURLModel(shortcode='VM749C8', target='https://example.com/x').owner is None


def test_short_url_model_equality():
    assert ShortURLModel('VM749C8', 'https://example.com/x', 'alice') == ShortURLModel('VM749C8', 'https://example.com/x', 'alice')
    assert ShortURLModel('VM749C8', 'https://example.com/x', 'alice') != ShortURLModel('VM749C8', 'https://example.com/x', 'bob')


@pytest.mark.parametrize('field, value', [('shortcode', 'abc'), ('target', 'https://other.com'), ('owner', 'bob')])
def test_short_url_model_is_frozen(field, value):
    model = ShortURLModel(shortcode='VM749C8', target='https://example.com/x', owner='alice')
    with pytest.raises(FrozenInstanceError):
        setattr(model, field, value)


# -------------------------------------------------
# 2. LookupResult
# -------------------------------------------------


def test_lookup_result_found():
    result = LookupResult.found('https://example.com/x')

    assert result.outcome is Outcome.FOUND
    assert result.value == 'https://example.com/x'
    assert result.message is None
    assert result.ok


def test_lookup_result_not_found():
    result = LookupResult.not_found()

    assert result.outcome is Outcome.NOT_FOUND
    assert result.value is None
    assert result.ok


@pytest.mark.parametrize('outcome', [Outcome.INVALID_REQUEST, Outcome.UNAVAILABLE, Outcome.TIMEOUT, Outcome.OS_ERROR])
def test_lookup_result_error(outcome):
    result = LookupResult.error(outcome, 'boom')

    assert result.outcome is outcome
    assert result.value is None
    assert result.message == 'boom'
    assert not result.ok
    assert outcome.is_error


@pytest.mark.parametrize('outcome', [Outcome.FOUND, Outcome.NOT_FOUND])
def test_lookup_result_error_with_non_error_outcome(outcome):
    with pytest.raises(ValueError, match='is not an error outcome'):
        LookupResult.error(outcome, 'boom')


@pytest.mark.parametrize(
    'kwargs',
    [
        {'outcome': Outcome.FOUND},
        {'outcome': Outcome.NOT_FOUND, 'value': 'https://example.com/x'},
        {'outcome': Outcome.TIMEOUT, 'value': 'https://example.com/x'},
        {'outcome': Outcome.FOUND, 'value': 'https://example.com/x', 'message': 'boom'},
        {'outcome': Outcome.NOT_FOUND, 'message': 'boom'},
    ],
)
def test_lookup_result_rejects_inconsistent_fields(kwargs):
    with pytest.raises(ValueError):
        LookupResult(**kwargs)


def test_outcome_values_are_counter_labels():
    assert [str(o) for o in Outcome] == ['found', 'not-found', 'invalid-request', 'unavailable', 'timeout', 'os-error']
