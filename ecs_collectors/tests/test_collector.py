"""Prometheus adapter: describe/collect contract and scrape idempotence."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, generate_latest

from core.metrics import build_metrics
from ecs_collectors.collector import ECSCollector
from ecs_fakes import FakeECS, services_named

REGION = "eu-west-1"
EXPECTED_NAMES = [
    "ecs_up",
    "ecs_clusters_total",
    "ecs_services_total",
    "ecs_service_desired_tasks_total",
    "ecs_service_pending_tasks_total",
    "ecs_service_running_tasks_total",
    "ecs_service_deployments_total",
]


class CountingFactory:
    def __init__(self, ecs: FakeECS) -> None:
        self.ecs = ecs
        self.calls = 0

    def __call__(self, tenant, region):
        self.calls += 1
        return self.ecs


def make_collector(factory, roles=None) -> ECSCollector:
    return ECSCollector(REGION, build_metrics("ecs"), roles, page_size=10, client_factory=factory)


def test_describe_lists_fixed_descriptors_without_collecting() -> None:
    factory = CountingFactory(FakeECS({"prod": []}))
    collector = make_collector(factory)

    families = list(collector.describe())
    assert [f.name for f in families] == EXPECTED_NAMES
    assert all(f.samples == [] for f in families)

    CollectorRegistry().register(collector)
    assert factory.calls == 0


def test_collect_runs_one_orchestration_per_scrape() -> None:
    factory = CountingFactory(FakeECS({"prod": services_named("svc", 12)}))
    registry = CollectorRegistry()
    registry.register(make_collector(factory))

    assert registry.get_sample_value("ecs_up", {"region": REGION, "island": ""}) == 1.0
    assert registry.get_sample_value(
        "ecs_services_total", {"region": REGION, "island": "", "ecsCluster": "prod"}
    ) == 12.0
    assert registry.get_sample_value(
        "ecs_service_desired_tasks_total",
        {"region": REGION, "island": "", "ecsCluster": "prod", "service": "svc-7"},
    ) == 9.0
    # get_sample_value scrapes the registry each call
    assert factory.calls == 3


def test_collect_uses_configured_roles() -> None:
    seen = []

    def factory(tenant, region):
        seen.append(tenant)
        return FakeECS({"prod": []})

    collector = make_collector(factory, roles={"blue": "roleA", "green": "roleB"})
    samples = collector.scrape()

    assert sorted(t.island for t in seen) == ["blue", "green"]
    assert sorted(s.label_values for s in samples if s.name == "ecs_up") == [
        (REGION, "blue"),
        (REGION, "green"),
    ]


def test_two_scrapes_produce_identical_output() -> None:
    registry = CollectorRegistry()
    registry.register(make_collector(CountingFactory(FakeECS({
        "prod": services_named("svc", 25),
        "dev": services_named("job", 3),
    }))))

    def sorted_lines() -> list:
        return sorted(generate_latest(registry).decode("utf-8").splitlines())

    assert sorted_lines() == sorted_lines()


def test_failed_tenant_still_renders() -> None:
    broken = FakeECS({"prod": []})
    broken.fail_list_clusters = True
    registry = CollectorRegistry()
    registry.register(make_collector(CountingFactory(broken)))

    assert registry.get_sample_value("ecs_up", {"region": REGION, "island": ""}) == 0.0
    assert registry.get_sample_value("ecs_clusters_total", {"region": REGION, "island": ""}) is None
    assert "# TYPE ecs_services_total gauge" in generate_latest(registry).decode("utf-8")
