"""Tenant worker: everything collected for one island during one scrape."""

from __future__ import annotations

import concurrent.futures as cf
import logging
from typing import Callable, Optional

from botocore.client import BaseClient

from core.metrics import ExporterMetrics, MetricSample
from ecs_collectors.clients import TenantIdentity, ecs_client_for
from ecs_collectors.clusters import Cluster, get_clusters
from ecs_collectors.common import _logger, _pool_workers
from ecs_collectors.errors import AuthError, UpstreamError
from ecs_collectors.services import get_services

Emit = Callable[[MetricSample], None]
ClientFactory = Callable[[TenantIdentity, str], BaseClient]


def _collect_cluster(
    client: BaseClient,
    cluster: Cluster,
    tenant: TenantIdentity,
    region: str,
    metrics: ExporterMetrics,
    emit: Emit,
    page_size: int,
    max_workers: Optional[int],
    log: logging.Logger,
) -> bool:
    """Emit the service samples of one cluster; False (and nothing emitted) on failure."""
    try:
        services = get_services(client, cluster, page_size, max_workers=max_workers, logger=log)
    except UpstreamError as exc:
        log.error("[worker] error getting services for %s/%s: %s", tenant.island, cluster.name, exc)
        return False

    labels = (region, tenant.island, cluster.name)
    emit(metrics.service_count.sample(len(services), *labels))
    for svc in services:
        emit(metrics.service_desired.sample(svc.desired_tasks, *labels, svc.name))
        emit(metrics.service_pending.sample(svc.pending_tasks, *labels, svc.name))
        emit(metrics.service_running.sample(svc.running_tasks, *labels, svc.name))
        emit(metrics.service_deployments.sample(svc.deployments, *labels, svc.name))
    return True


def collect_tenant(
    tenant: TenantIdentity,
    region: str,
    metrics: ExporterMetrics,
    emit: Emit,
    page_size: int = 10,
    *,
    max_workers: Optional[int] = None,
    client_factory: Optional[ClientFactory] = None,
    logger: Optional[logging.Logger] = None,
) -> bool:
    """Collect one tenant and push its samples through ``emit``.

    - No client: log, emit nothing (not even ``up``), return False.
    - Cluster enumeration fails: emit ``up=0``, return False.
    - Otherwise emit ``up=1``, ``clusters_total`` and, per cluster that could
      be fully described, ``services_total`` and the per-service gauges.
    """
    log = _logger(logger)
    factory = client_factory or ecs_client_for
    try:
        client = factory(tenant, region)
    except AuthError as exc:
        log.error("[worker] error creating aws session for island '%s': %s", tenant.island, exc)
        return False

    try:
        clusters = get_clusters(client, page_size, logger=log)
    except UpstreamError as exc:
        emit(metrics.up.sample(0, region, tenant.island))
        log.error("[worker] error getting ecs clusters for island '%s': %s", tenant.island, exc)
        return False

    emit(metrics.up.sample(1, region, tenant.island))
    emit(metrics.cluster_count.sample(len(clusters), region, tenant.island))
    if not clusters:
        return True

    with cf.ThreadPoolExecutor(max_workers=_pool_workers(len(clusters), max_workers)) as pool:
        futs = {
            pool.submit(
                _collect_cluster, client, c, tenant, region, metrics, emit, page_size, max_workers, log
            ): c
            for c in clusters
        }
        for fut in cf.as_completed(futs):
            cluster = futs[fut]
            try:
                fut.result()
            except Exception as exc:  # pylint: disable=broad-except
                log.exception("[worker] cluster %s/%s crashed: %s", tenant.island, cluster.name, exc)
    return True
