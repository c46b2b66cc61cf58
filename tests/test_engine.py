"""Integration tests for the dispatch engine.

These tests run full optimization passes over JSON-shaped inputs:
inputs validated → drivers/orders loaded → planner run → routes summarized.

Run with: pytest tests/test_engine.py -v
"""

import copy
import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from src.dispatch.config import (
    DispatchConfig,
    PlannerConfig,
    RoutingConfig,
    load_config,
)
from src.dispatch.engine import DeliveryPlan, DispatchEngine, optimize_delivery
from src.dispatch.loader import InputValidationError
from src.dispatch.models import Assignment, Driver, Order
from src.dispatch.summarizer import eta_minutes, summarize_route
from src.roadnet.shortest_path import PathCache

ROOT = Path(__file__).resolve().parents[1]
NOW = datetime(2024, 12, 31, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_inputs() -> dict:
    with open(ROOT / "data" / "sample_inputs.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def cached_config() -> DispatchConfig:
    return DispatchConfig(routing=RoutingConfig(use_cache=True))


class TestDispatchEngine:
    """End-to-end runs on the sample batch."""

    def test_sample_run(self, sample_inputs):
        plan = DispatchEngine().run(sample_inputs, now=NOW)
        assert isinstance(plan, DeliveryPlan)
        assert [(a.driver.id, a.order.id) for a in plan.assignments] == [
            ("d1", "o1"),
            ("d2", "o2"),
        ]
        assert plan.unassigned_order_ids == []

    def test_route_summaries(self, sample_inputs):
        plan = DispatchEngine().run(sample_inputs, now=NOW)
        first, second = (d.summary for d in plan.deliveries)
        assert first.route == ("depot", "locA")
        assert first.distance == 10
        assert first.eta_minutes == 20
        assert first.estimated_arrival == NOW + timedelta(minutes=20)
        assert second.route == ("locB", "locC")
        assert second.eta_minutes == 40
        assert not second.unreachable

    def test_run_summary(self, sample_inputs):
        summary = DispatchEngine().run(sample_inputs).summary
        assert summary.total_drivers == 2
        assert summary.total_orders == 2
        assert summary.assigned_orders == 2
        assert summary.unassigned_orders == 0
        assert summary.average_eta_minutes == pytest.approx(30.0)
        assert summary.total_distance == pytest.approx(30.0)
        assert summary.path_queries == 3

    def test_no_cache_reports_zero_cached_routes(self, sample_inputs):
        summary = DispatchEngine().run(sample_inputs).summary
        assert summary.cached_routes == 0
        assert summary.cache_hits == 0

    def test_cache_counts_distinct_pairs(self, sample_inputs, cached_config):
        summary = DispatchEngine(cached_config).run(sample_inputs).summary
        # Planner resolves three pairs; the summarizer re-uses two of them.
        assert summary.cached_routes == 3
        assert summary.cache_hits == 2

    def test_cache_does_not_change_plan(self, sample_inputs, cached_config):
        plain = DispatchEngine().run(sample_inputs, now=NOW).to_dict()
        cached = DispatchEngine(cached_config).run(sample_inputs, now=NOW).to_dict()
        assert plain["assignments"] == cached["assignments"]

    def test_inputs_not_mutated(self, sample_inputs):
        before = copy.deepcopy(sample_inputs)
        DispatchEngine().run(sample_inputs)
        assert sample_inputs == before

    def test_invalid_inputs_raise(self, sample_inputs):
        sample_inputs["drivers"] = []
        with pytest.raises(InputValidationError) as excinfo:
            DispatchEngine().run(sample_inputs)
        assert excinfo.value.errors == ["Drivers must be a non-empty list"]

    def test_unreachable_order_reported(self, sample_inputs):
        sample_inputs["orders"].append({"id": "o3", "destination": "island", "size": 5})
        plan = DispatchEngine().run(sample_inputs)
        assert plan.unassigned_order_ids == ["o3"]
        assert plan.summary.unassigned_orders == 1
        assert plan.summary.assigned_orders == 2

    def test_referenced_only_node_is_unreachable(self, sample_inputs):
        """A node that appears only as a neighbor is not a valid target."""
        sample_inputs["graph"]["locC"]["locD"] = 5
        sample_inputs["orders"] = [{"id": "o", "destination": "locD", "size": 1}]
        plan = DispatchEngine().run(sample_inputs)
        assert plan.unassigned_order_ids == ["o"]

    def test_multi_leg_policy(self, sample_inputs):
        sample_inputs["drivers"] = sample_inputs["drivers"][:1]
        config = DispatchConfig(planner=PlannerConfig(policy="multi_leg"))
        plan = DispatchEngine(config).run(sample_inputs)
        assert [a.order.id for a in plan.assignments] == ["o1", "o2"]
        assert [d.summary.distance for d in plan.deliveries] == [10, 40]

    def test_single_leg_policy(self, sample_inputs):
        sample_inputs["drivers"] = sample_inputs["drivers"][:1]
        plan = DispatchEngine().run(sample_inputs)
        assert [a.order.id for a in plan.assignments] == ["o1"]
        assert plan.unassigned_order_ids == ["o2"]

    def test_disconnected_graph_logs_warning(self, sample_inputs, caplog):
        sample_inputs["graph"]["island"] = {"reef": 3}
        with caplog.at_level(logging.WARNING, logger="src.dispatch.engine"):
            DispatchEngine().run(sample_inputs)
        assert any("not connected" in r.getMessage() for r in caplog.records)

    def test_speed_override(self, sample_inputs):
        plan = optimize_delivery(sample_inputs, DispatchConfig().with_overrides(speed_kmh=60))
        assert [d.summary.eta_minutes for d in plan.deliveries] == [10, 20]

    def test_optimize_delivery_use_cache(self, sample_inputs):
        assert optimize_delivery(sample_inputs).summary.cached_routes == 0
        assert optimize_delivery(sample_inputs, use_cache=True).summary.cached_routes == 3

    def test_configured_default_location(self):
        """Drivers without a location start from the configured default node."""
        inputs = {
            "drivers": [{"id": "d", "capacity": 10}],
            "orders": [{"id": "o", "destination": "locB", "size": 1}],
            "graph": {"hub": {"locB": 3}, "depot": {"locB": 90}, "locB": {}},
        }
        config = DispatchConfig(routing=RoutingConfig(default_location="hub"))
        plan = DispatchEngine(config).run(inputs, now=NOW)
        [delivery] = plan.deliveries
        assert delivery.summary.route == ("hub", "locB")
        assert delivery.summary.distance == 3
        assert delivery.assignment.driver.current_location is None

    def test_configured_default_location_added_to_graph(self, caplog):
        inputs = {
            "drivers": [{"id": "d", "capacity": 10}],
            "orders": [{"id": "o", "destination": "locB", "size": 1}],
            "graph": {"depot": {"locB": 5}, "locB": {}},
        }
        config = DispatchConfig(routing=RoutingConfig(default_location="hub"))
        with caplog.at_level(logging.WARNING, logger="src.dispatch.engine"):
            plan = DispatchEngine(config).run(inputs)
        assert plan.unassigned_order_ids == ["o"]
        messages = [r.getMessage() for r in caplog.records]
        assert not any("No 'hub' node" in m for m in messages)
        assert any("not connected" in m for m in messages)

    def test_planner_stats_accumulate_across_runs(self, sample_inputs):
        engine = DispatchEngine()
        engine.run(sample_inputs)
        engine.run(sample_inputs)
        assert engine.planner.total_runs == 2


class TestPlanSerialization:
    def test_to_dict(self, sample_inputs):
        data = DispatchEngine().run(sample_inputs, now=NOW).to_dict()
        assert set(data) == {"assignments", "unassigned_orders", "summary"}
        first = data["assignments"][0]
        assert first["driver_id"] == "d1"
        assert first["driver_name"] == "Alice"
        assert first["order_id"] == "o1"
        assert first["route"] == ["depot", "locA"]
        assert first["score"] == pytest.approx(20.0)
        assert first["estimated_arrival"] == "2024-12-31T09:20:00+00:00"
        assert first["unreachable"] is False
        assert data["summary"]["average_eta_minutes"] == pytest.approx(30.0)

    def test_to_dict_is_json_serializable(self, sample_inputs):
        data = DispatchEngine().run(sample_inputs).to_dict()
        assert json.loads(json.dumps(data)) == data


class TestRouteSummary:
    """Route re-derivation and ETA conversion."""

    @pytest.fixture
    def graph(self, sample_inputs) -> dict:
        return sample_inputs["graph"]

    def _assignment(self, location, destination) -> Assignment:
        driver = Driver(id="d", name="D", capacity=10, current_location=location)
        order = Order(id="o", destination=destination)
        return Assignment(driver=driver, order=order, score=0.0, distance=0.0, route=())

    def test_eta_minutes(self):
        assert eta_minutes(10) == 20
        assert eta_minutes(45, speed_kmh=60) == 45
        assert eta_minutes(0) == 0

    def test_eta_half_minute_rounds_up(self):
        assert eta_minutes(12.25) == 25
        assert eta_minutes(11.75) == 24
        assert eta_minutes(0.25) == 1
        assert eta_minutes(22.5, speed_kmh=60) == 23

    def test_reachable_summary(self, graph):
        summary = summarize_route(self._assignment("locA", "locC"), graph, now=NOW)
        assert summary.distance == 30
        assert summary.eta_minutes == 60
        assert summary.estimated_arrival == NOW + timedelta(hours=1)
        assert summary.unreachable is False

    def test_unreachable_summary(self, graph):
        summary = summarize_route(self._assignment("nowhere", "locA"), graph, now=NOW)
        assert summary.unreachable is True
        assert summary.route == ()
        assert summary.distance == 0.0
        assert summary.eta_minutes == 0
        assert summary.estimated_arrival == NOW

    def test_already_at_destination(self, graph):
        summary = summarize_route(self._assignment("locB", "locB"), graph, now=NOW)
        assert summary.route == ("locB",)
        assert summary.eta_minutes == 0
        assert summary.unreachable is False

    def test_uses_cache(self, graph):
        cache = PathCache()
        summarize_route(self._assignment("depot", "locB"), graph, cache, now=NOW)
        summarize_route(self._assignment("depot", "locB"), graph, cache, now=NOW)
        assert cache.hits == 1

    def test_default_now_is_utc(self, graph):
        summary = summarize_route(self._assignment("depot", "locA"), graph)
        assert summary.estimated_arrival.tzinfo is not None


class TestConfig:
    def test_load_default_config(self):
        config = load_config(ROOT / "config" / "default_dispatch.yaml")
        assert config.routing.use_cache is True
        assert config.routing.speed_kmh == 30.0
        assert config.planner.policy == "single_leg"
        assert config.loader.default_order_size == 10.0

    def test_partial_config(self, tmp_path):
        path = tmp_path / "partial.yaml"
        path.write_text("planner:\n  policy: multi_leg\n  priority_weight: 4\n")
        config = load_config(path)
        assert config.planner.policy == "multi_leg"
        assert config.planner.priority_weight == 4
        assert config.routing == RoutingConfig()

    def test_empty_config_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == DispatchConfig()

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_with_overrides(self):
        base = DispatchConfig()
        updated = base.with_overrides(use_cache=True, speed_kmh=45.0)
        assert updated.routing.use_cache is True
        assert updated.routing.speed_kmh == 45.0
        assert base.routing.use_cache is False
        assert base.with_overrides() == base
