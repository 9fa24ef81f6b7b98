"""Prometheus adapter for the ECS collection pipeline.

``ECSCollector`` is registered on a ``CollectorRegistry``. Every call to
``collect()`` runs one full orchestration; workers push samples onto a
thread-safe queue and the queue is turned into gauge families once every
worker has returned.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Dict, Iterator, List, Mapping, Optional

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from core.metrics import ExporterMetrics, MetricDescriptor, MetricSample
from ecs_collectors.common import _logger
from ecs_collectors.orchestrator import collect_all, tenants_from_roles
from ecs_collectors.worker import ClientFactory


def _family(desc: MetricDescriptor) -> GaugeMetricFamily:
    return GaugeMetricFamily(desc.name, desc.documentation, labels=list(desc.label_names))


def _drain(sink: "queue.SimpleQueue[MetricSample]") -> List[MetricSample]:
    out: List[MetricSample] = []
    while True:
        try:
            out.append(sink.get_nowait())
        except queue.Empty:
            return out


class ECSCollector(Collector):
    """Custom collector exposing the ECS inventory of one region."""

    def __init__(
        self,
        region: str,
        metrics: ExporterMetrics,
        roles: Optional[Mapping[str, str]] = None,
        *,
        page_size: int = 10,
        max_workers: Optional[int] = None,
        client_factory: Optional[ClientFactory] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.region = region
        self.metrics = metrics
        self.roles = dict(roles or {})
        self.page_size = page_size
        self.max_workers = max_workers
        self._client_factory = client_factory
        self._log = _logger(logger)
        self._lock = threading.Lock()

    def describe(self) -> Iterator[Metric]:
        for desc in self.metrics:
            yield _family(desc)

    def scrape(self) -> List[MetricSample]:
        """Run one orchestration and return the samples it produced."""
        sink: "queue.SimpleQueue[MetricSample]" = queue.SimpleQueue()
        with self._lock:
            collect_all(
                tenants_from_roles(self.roles),
                self.region,
                self.metrics,
                sink.put,
                self.page_size,
                max_workers=self.max_workers,
                client_factory=self._client_factory,
                logger=self._log,
            )
        return _drain(sink)

    def collect(self) -> Iterator[Metric]:
        families: Dict[str, GaugeMetricFamily] = {d.name: _family(d) for d in self.metrics}
        for sample in self.scrape():
            family = families.get(sample.name)
            if family is None:
                self._log.warning("[collector] dropping sample for unknown metric %s", sample.name)
                continue
            family.add_metric(list(sample.label_values), sample.value)
        yield from families.values()
