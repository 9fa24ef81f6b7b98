"""Cluster enumeration: list every cluster ARN, then describe them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from botocore.client import BaseClient

from ecs_collectors.common import (
    AWS_ERRORS,
    _cluster_name_from_arn,
    _logger,
    iter_chunks,
    list_all_ids,
)
from ecs_collectors.errors import UpstreamDescribeError
from ecs_toolset import config as const


@dataclass(frozen=True)
class Cluster:
    id: str
    name: str


def _describe_batches(ids: List[str], page_size: int) -> List[List[str]]:
    # One request when the API accepts the full list, page-sized chunks otherwise.
    if len(ids) <= const.DESCRIBE_CLUSTERS_LIMIT:
        return [ids]
    return list(iter_chunks(ids, page_size))


def get_clusters(
    client: BaseClient,
    page_size: int = 10,
    *,
    logger: Optional[logging.Logger] = None,
) -> List[Cluster]:
    """Return every cluster the client can see.

    Raises UpstreamListError / UpstreamDescribeError on any call failure; no
    partial list is ever returned. Clusters the describe call does not return
    (deleted between list and describe) are left out silently.
    """
    log = _logger(logger)
    arns = list_all_ids(client.list_clusters, "clusterArns", page_size)
    log.debug("[clusters] got %d clusters", len(arns))
    if not arns:
        return []

    clusters: List[Cluster] = []
    for batch in _describe_batches(arns, page_size):
        try:
            resp = client.describe_clusters(clusters=batch)
        except AWS_ERRORS as exc:
            raise UpstreamDescribeError("describe_clusters", str(exc), {"count": len(batch)}) from exc
        for failure in resp.get("failures", []) or []:
            log.debug("[clusters] describe skipped %s: %s", failure.get("arn"), failure.get("reason"))
        for c in resp.get("clusters", []) or []:
            arn = str(c.get("clusterArn") or "")
            clusters.append(Cluster(id=arn, name=str(c.get("clusterName") or _cluster_name_from_arn(arn))))
    return clusters
