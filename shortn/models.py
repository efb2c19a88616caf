from dataclasses import dataclass
from enum import StrEnum
from typing import Optional


@dataclass(frozen=True)
class ShortURLModel:
    """Represent a shortened URL record.

    Attributes:
        shortcode (str):
            The 7-character identifier, also the storage key.
        target (str):
            The original long URL that the short code redirects to.
        owner (Optional[str]):
            Identity of the principal who created the record.

    Example:
        >>> url = ShortURLModel(shortcode='VM749C8', target='https://example.com/x', owner='alice')
        >>> url.link
        '/VM749C8'
    """

    shortcode: str
    target: str
    owner: Optional[str] = None

    @property
    def link(self) -> str:
        return f'/{self.shortcode}'


class Outcome(StrEnum):
    """Classification of a single backend operation.

    The values double as the reason labels of the `cassandra-errors` counter.
    """

    FOUND = 'found'
    NOT_FOUND = 'not-found'
    INVALID_REQUEST = 'invalid-request'
    UNAVAILABLE = 'unavailable'
    TIMEOUT = 'timeout'
    OS_ERROR = 'os-error'

    @property
    def is_error(self) -> bool:
        return self not in (Outcome.FOUND, Outcome.NOT_FOUND)


@dataclass(frozen=True)
class LookupResult:
    """Tagged result of a short code lookup.

    Exactly one outcome is carried. `value` is only set for FOUND,
    `message` only for the error outcomes.

    Example:
        >>> LookupResult.found('https://example.com').value
        'https://example.com'
        >>> LookupResult.not_found().value is None
        True
    """

    outcome: Outcome
    value: Optional[str] = None
    message: Optional[str] = None

    def __post_init__(self):
        if (self.value is not None) != (self.outcome is Outcome.FOUND):
            raise ValueError(f'Only a {Outcome.FOUND} result carries a value (given outcome: {self.outcome}).')
        if self.message is not None and not self.outcome.is_error:
            raise ValueError(f'Only error results carry a message (given outcome: {self.outcome}).')

    @classmethod
    def found(cls, value: str) -> 'LookupResult':
        return cls(Outcome.FOUND, value=value)

    @classmethod
    def not_found(cls) -> 'LookupResult':
        return cls(Outcome.NOT_FOUND)

    @classmethod
    def error(cls, outcome: Outcome, message: str) -> 'LookupResult':
        if not outcome.is_error:
            raise ValueError(f'{outcome} is not an error outcome.')
        return cls(outcome, message=message)

    @property
    def ok(self) -> bool:
        return not self.outcome.is_error
