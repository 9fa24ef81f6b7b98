"""Service enumeration for one cluster.

Service ARNs are listed page by page, split into batches of ``page_size`` and
described concurrently, one thread per batch. Every batch task returns exactly
one BatchResult, failed or not, so the join always expects a known number of
results. The first failed batch turns the whole call into a
PartialBatchError; in-flight batches are still drained before it is raised.
"""

from __future__ import annotations

import concurrent.futures as cf
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from botocore.client import BaseClient

from ecs_collectors.clusters import Cluster
from ecs_collectors.common import _logger, _pool_workers, iter_chunks, list_all_ids
from ecs_collectors.errors import PartialBatchError


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    desired_tasks: int = 0
    running_tasks: int = 0
    pending_tasks: int = 0
    deployments: int = 0


@dataclass
class BatchResult:
    services: List[Service] = field(default_factory=list)
    error: Optional[Exception] = None


def _to_service(raw: Dict[str, Any]) -> Service:
    return Service(
        id=str(raw.get("serviceArn") or ""),
        name=str(raw.get("serviceName") or ""),
        desired_tasks=int(raw.get("desiredCount") or 0),
        running_tasks=int(raw.get("runningCount") or 0),
        pending_tasks=int(raw.get("pendingCount") or 0),
        deployments=len(raw.get("deployments") or []),
    )


def _describe_batch(
    client: BaseClient,
    cluster_id: str,
    batch: List[str],
    log: Optional[logging.Logger] = None,
) -> BatchResult:
    """Describe one batch; never raises, failures travel in the result."""
    try:
        resp = client.describe_services(cluster=cluster_id, services=batch)
    except Exception as exc:  # pylint: disable=broad-except
        return BatchResult(error=exc)
    for failure in resp.get("failures", []) or []:
        _logger(log).debug("[services] describe skipped %s: %s", failure.get("arn"), failure.get("reason"))
    return BatchResult(services=[_to_service(s) for s in resp.get("services", []) or []])


def get_services(
    client: BaseClient,
    cluster: Cluster,
    page_size: int = 10,
    *,
    max_workers: Optional[int] = None,
    logger: Optional[logging.Logger] = None,
) -> List[Service]:
    """Return every service of ``cluster``.

    Raises UpstreamListError when listing fails and PartialBatchError when at
    least one describe batch fails.
    """
    log = _logger(logger)
    arns = list_all_ids(client.list_services, "serviceArns", page_size, cluster=cluster.id)
    log.debug("[services] got %d services on the %s cluster", len(arns), cluster.name)

    batches = list(iter_chunks(arns, page_size))
    if not batches:
        return []

    services: List[Service] = []
    first_error: Optional[Exception] = None
    with cf.ThreadPoolExecutor(max_workers=_pool_workers(len(batches), max_workers)) as pool:
        futs = [pool.submit(_describe_batch, client, cluster.id, b, log) for b in batches]
        for fut in cf.as_completed(futs):
            res = fut.result()
            if res.error is not None:
                first_error = res.error
                break
            services.extend(res.services)
    # Leaving the executor waits for every batch, so all results are available.

    if first_error is not None:
        failed = sum(1 for f in futs if f.result().error is not None)
        raise PartialBatchError(
            "describe_services",
            f"{failed}/{len(batches)} batches failed on cluster {cluster.name}: {first_error}",
            services=services,
            failed_batches=failed,
            details={"cluster": cluster.id},
        ) from first_error
    return services
