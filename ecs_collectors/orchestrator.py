"""Collection orchestrator: one tenant worker per island, run concurrently.

Samples are emitted by the workers while they run; this module only fans out
and joins. Scrapes must not overlap on the same sink; the Prometheus adapter
serializes them.
"""

from __future__ import annotations

import concurrent.futures as cf
import logging
from typing import List, Mapping, Optional

from core.metrics import ExporterMetrics
from ecs_collectors.clients import TenantIdentity
from ecs_collectors.common import _logger, _pool_workers
from ecs_collectors.worker import ClientFactory, Emit, collect_tenant


def tenants_from_roles(roles: Optional[Mapping[str, str]]) -> List[TenantIdentity]:
    """Expand the island -> role mapping; no mapping means one anonymous tenant."""
    if not roles:
        return [TenantIdentity("", "")]
    return [TenantIdentity(island, role or "") for island, role in sorted(roles.items())]


def collect_all(
    tenants: List[TenantIdentity],
    region: str,
    metrics: ExporterMetrics,
    emit: Emit,
    page_size: int = 10,
    *,
    max_workers: Optional[int] = None,
    client_factory: Optional[ClientFactory] = None,
    logger: Optional[logging.Logger] = None,
) -> int:
    """Run every tenant worker and block until all return.

    Returns the number of tenants whose clusters could be enumerated.
    """
    log = _logger(logger)
    if not tenants:
        return 0
    reached = 0
    with cf.ThreadPoolExecutor(max_workers=_pool_workers(len(tenants), max_workers)) as pool:
        futs = {
            pool.submit(
                collect_tenant,
                t,
                region,
                metrics,
                emit,
                page_size,
                max_workers=max_workers,
                client_factory=client_factory,
                logger=log,
            ): t
            for t in tenants
        }
        for fut in cf.as_completed(futs):
            tenant = futs[fut]
            try:
                if fut.result():
                    reached += 1
            except Exception as exc:  # pylint: disable=broad-except
                log.exception("[orchestrator] worker for island '%s' crashed: %s", tenant.island, exc)
    log.debug("[orchestrator] %d/%d tenants collected", reached, len(tenants))
    return reached
