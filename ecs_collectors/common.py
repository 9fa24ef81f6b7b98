"""Common helpers shared by the ECS enumerators.

- _logger: consistent logger selection.
- list_all_ids: cursor-following accumulator for ECS list_* APIs.
- iter_chunks: fixed-size batching for describe_* calls.
- _pool_workers: thread count for a fan-out level.
- _cluster_name_from_arn: readable cluster name when describe omits it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from ecs_collectors.errors import UpstreamListError

AWS_ERRORS = (ClientError, BotoCoreError)


def _logger(fallback: Optional[logging.Logger]) -> logging.Logger:
    """Return the given logger or a sensible default."""
    return fallback or logging.getLogger("ecs_collectors")


def list_all_ids(
    call: Callable[..., Dict[str, Any]],
    page_key: str,
    page_size: int,
    **params: Any,
) -> List[str]:
    """Follow ``nextToken`` until exhausted and return every id in ``page_key``.

    An empty or missing token ends the walk. Any call failure raises
    UpstreamListError and the pages gathered so far are dropped.
    """
    ids: List[str] = []
    token: Optional[str] = None
    op = getattr(call, "__name__", "list")
    while True:
        kwargs = dict(params)
        kwargs["maxResults"] = page_size
        if token:
            kwargs["nextToken"] = token
        try:
            page = call(**kwargs)
        except AWS_ERRORS as exc:
            raise UpstreamListError(op, str(exc), {"params": params}) from exc
        ids.extend(page.get(page_key, []) or [])
        token = page.get("nextToken")
        if not token:
            break
    return ids


def iter_chunks(items: Sequence[Any], n: int) -> Iterator[List[Any]]:
    """Yield size-n chunks from items; never yields empty or zero-sized chunks."""
    size = max(1, n)
    for i in range(0, len(items), size):
        yield list(items[i : i + size])


def _pool_workers(tasks: int, cap: Optional[int]) -> int:
    """One thread per task, limited by ``cap`` when set; never below 1."""
    if cap is not None and cap > 0:
        return max(1, min(tasks, cap))
    return max(1, tasks)


def _cluster_name_from_arn(arn: str) -> str:
    """Extract the ECS cluster name from ARN suffix 'cluster/NAME'."""
    if not arn:
        return ""
    parts = arn.split("/", 1)
    return parts[1] if len(parts) > 1 else arn
