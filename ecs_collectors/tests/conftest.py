"""Fixtures shared by the ECS collector tests."""

from __future__ import annotations

import pytest

from core.metrics import ExporterMetrics, build_metrics
from ecs_fakes import SampleSink


@pytest.fixture(name="metrics")
def fixture_metrics() -> ExporterMetrics:
    return build_metrics("ecs")


@pytest.fixture(name="sink")
def fixture_sink() -> SampleSink:
    return SampleSink()
