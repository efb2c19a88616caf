"""Prometheus counters emitted by the store.

Counters:
    cassandra-found       successful lookups
                          (shortn_cassandra_found_total)
    cassandra-not-found   lookups of codes that were never written
                          (shortn_cassandra_not_found_total)
    cassandra-errors      backend failures labelled by reason
                          (shortn_cassandra_errors_total{reason="timeout"}, ...)

Counters live on the registry handed to StoreMetrics. Pass
`prometheus_client.REGISTRY` to expose them with the rest of the process
metrics; by default every StoreMetrics gets a private registry.

Example:
    >>> metrics = StoreMetrics()
    >>> metrics.found()
    >>> metrics.error('timeout')
    >>> metrics.snapshot()
    {'cassandra-found': 1, 'cassandra-not-found': 0, 'cassandra-errors': {'timeout': 1}}
    >>> metrics.registry.get_sample_value('shortn_cassandra_errors_total', {'reason': 'timeout'})
    1.0
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter

from shortn.constants import Metric


class StoreMetrics:
    """Counter sink shared by the store's operations.

    Attributes:
        registry (CollectorRegistry):
            Registry holding the three counters.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()

        self._found = Counter(Metric.Prometheus.FOUND, 'Short URL lookups that found a URL', registry=self.registry)
        self._not_found = Counter(
            Metric.Prometheus.NOT_FOUND,
            'Short URL lookups of codes that were never written',
            registry=self.registry,
        )
        self._errors = Counter(
            Metric.Prometheus.ERRORS,
            'Cassandra request failures',
            labelnames=[Metric.Prometheus.REASON_LABEL],
            registry=self.registry,
        )

    def found(self) -> None:
        self._found.inc()

    def not_found(self) -> None:
        self._not_found.inc()

    def error(self, reason: str) -> None:
        self._errors.labels(str(reason)).inc()

    def snapshot(self) -> dict:
        """Return the current values keyed by the store's counter names"""
        errors = {}
        for metric in self._errors.collect():
            for sample in metric.samples:
                if sample.name == Metric.Prometheus.ERRORS:
                    errors[sample.labels[Metric.Prometheus.REASON_LABEL]] = int(sample.value)

        return {
            Metric.FOUND: int(self.registry.get_sample_value(Metric.Prometheus.FOUND) or 0),
            Metric.NOT_FOUND: int(self.registry.get_sample_value(Metric.Prometheus.NOT_FOUND) or 0),
            Metric.ERRORS: errors,
        }
