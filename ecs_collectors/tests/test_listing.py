"""Tests for the cursor-following lister and batching helpers."""

from __future__ import annotations

import math

import pytest

from ecs_collectors.common import _cluster_name_from_arn, _pool_workers, iter_chunks, list_all_ids
from ecs_collectors.errors import UpstreamListError
from ecs_fakes import FakeECS, client_error, services_named


@pytest.mark.parametrize("count,page_size", [(1, 10), (10, 10), (11, 10), (25, 10), (7, 3), (100, 1)])
def test_list_all_ids_issues_ceil_k_over_n_calls(count: int, page_size: int) -> None:
    ecs = FakeECS({f"c{i}": [] for i in range(count)})
    ids = list_all_ids(ecs.list_clusters, "clusterArns", page_size)

    assert len(ids) == count
    assert len(set(ids)) == count
    assert len(ecs.calls["list_clusters"]) == math.ceil(count / page_size)
    assert all(c["maxResults"] == page_size for c in ecs.calls["list_clusters"])


def test_list_all_ids_empty_inventory_needs_one_call() -> None:
    ecs = FakeECS({})
    assert list_all_ids(ecs.list_clusters, "clusterArns", 10) == []
    assert len(ecs.calls["list_clusters"]) == 1


def test_list_all_ids_passes_cursor_and_scope() -> None:
    ecs = FakeECS({"prod": services_named("svc", 12)})
    ids = list_all_ids(ecs.list_services, "serviceArns", 5, cluster="arn:aws:ecs:x:1:cluster/prod")

    assert len(ids) == 12
    tokens = [c.get("nextToken") for c in ecs.calls["list_services"]]
    assert tokens == [None, "5", "10"]
    assert {c["cluster"] for c in ecs.calls["list_services"]} == {"arn:aws:ecs:x:1:cluster/prod"}


def test_list_all_ids_empty_string_token_ends_walk() -> None:
    pages = iter([{"ids": ["a", "b"], "nextToken": "t1"}, {"ids": ["c"], "nextToken": ""}])
    calls = []

    def list_things(**kwargs):
        calls.append(kwargs)
        return next(pages)

    assert list_all_ids(list_things, "ids", 2) == ["a", "b", "c"]
    assert len(calls) == 2


def test_list_all_ids_failure_discards_partial_pages() -> None:
    state = {"n": 0}

    def list_things(**kwargs):
        state["n"] += 1
        if state["n"] == 2:
            raise client_error("ListThings")
        return {"ids": ["a"], "nextToken": "more"}

    with pytest.raises(UpstreamListError) as excinfo:
        list_all_ids(list_things, "ids", 1)
    assert excinfo.value.operation == "list_things"
    assert state["n"] == 2


def test_iter_chunks_sizes() -> None:
    assert [len(c) for c in iter_chunks(list(range(25)), 10)] == [10, 10, 5]
    assert list(iter_chunks([], 10)) == []
    assert [len(c) for c in iter_chunks(list(range(3)), 0)] == [1, 1, 1]


def test_pool_workers_cap() -> None:
    assert _pool_workers(7, None) == 7
    assert _pool_workers(7, 3) == 3
    assert _pool_workers(0, None) == 1
    assert _pool_workers(2, 0) == 2


def test_cluster_name_from_arn() -> None:
    assert _cluster_name_from_arn("arn:aws:ecs:eu-west-1:1:cluster/prod") == "prod"
    assert _cluster_name_from_arn("prod") == "prod"
    assert _cluster_name_from_arn("") == ""
