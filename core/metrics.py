"""Metric descriptors and samples produced by the ECS collection pipeline.

Descriptors are built once at start-up by :func:`build_metrics` and handed to
the collector and workers as an immutable :class:`ExporterMetrics` value.
Workers turn them into :class:`MetricSample` objects; the Prometheus adapter
groups samples back into metric families at the end of a scrape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

BASE_LABELS: Tuple[str, ...] = ("region", "island")
CLUSTER_LABELS: Tuple[str, ...] = BASE_LABELS + ("ecsCluster",)
SERVICE_LABELS: Tuple[str, ...] = CLUSTER_LABELS + ("service",)


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join non-empty name parts with underscores (namespace_subsystem_name)."""
    return "_".join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True)
class MetricSample:
    """One labeled gauge observation emitted during a scrape."""

    name: str
    labels: Tuple[Tuple[str, str], ...]
    value: float

    @property
    def label_values(self) -> Tuple[str, ...]:
        return tuple(v for _, v in self.labels)


@dataclass(frozen=True)
class MetricDescriptor:
    name: str
    documentation: str
    label_names: Tuple[str, ...]

    def sample(self, value: float, *label_values: str) -> MetricSample:
        """Build a sample; the label values must match ``label_names`` one to one."""
        if len(label_values) != len(self.label_names):
            raise ValueError(
                f"{self.name}: expected {len(self.label_names)} label values "
                f"{self.label_names}, got {len(label_values)}"
            )
        labels = tuple(zip(self.label_names, (str(v) for v in label_values)))
        return MetricSample(self.name, labels, float(value))


@dataclass(frozen=True)
class ExporterMetrics:
    """The fixed set of descriptors the exporter publishes."""

    up: MetricDescriptor
    cluster_count: MetricDescriptor
    service_count: MetricDescriptor
    service_desired: MetricDescriptor
    service_pending: MetricDescriptor
    service_running: MetricDescriptor
    service_deployments: MetricDescriptor

    def __iter__(self) -> Iterator[MetricDescriptor]:
        yield self.up
        yield self.cluster_count
        yield self.service_count
        yield self.service_desired
        yield self.service_pending
        yield self.service_running
        yield self.service_deployments


def build_metrics(namespace: str = "ecs") -> ExporterMetrics:
    def desc(name: str, doc: str, labels: Tuple[str, ...]) -> MetricDescriptor:
        return MetricDescriptor(build_fq_name(namespace, "", name), doc, labels)

    return ExporterMetrics(
        up=desc("up", "Was the last query of ecs successful.", BASE_LABELS),
        cluster_count=desc("clusters_total", "The total number of ecs clusters.", BASE_LABELS),
        service_count=desc("services_total", "The total number of services.", CLUSTER_LABELS),
        service_desired=desc(
            "service_desired_tasks_total", "The number of tasks to have running.", SERVICE_LABELS
        ),
        service_pending=desc(
            "service_pending_tasks_total",
            "The number of tasks that are in the PENDING state.",
            SERVICE_LABELS,
        ),
        service_running=desc(
            "service_running_tasks_total",
            "The number of tasks that are in the RUNNING state.",
            SERVICE_LABELS,
        ),
        service_deployments=desc(
            "service_deployments_total", "The number of deployments a service has.", SERVICE_LABELS
        ),
    )
