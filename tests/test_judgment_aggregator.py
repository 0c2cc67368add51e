"""
Test suite for judgment memory aggregation.
"""

from datetime import datetime

import pytest

from matchcore.crud import judgment as judgment_crud
from matchcore.models import DecisionType, JudgmentAggregate
from matchcore.services import judgment_aggregator
from matchcore.services.judgment_aggregator import (
    build_aggregates,
    get_supported_judgment_metrics,
    resolve_window,
    run_judgment_memory_aggregation,
)
from matchcore.services.judgment_insights import get_latest_judgment_insights

WINDOW_START = datetime(2024, 10, 1)
WINDOW_END = datetime(2024, 12, 31, 23, 59, 59)


def find(rows, dimension, value, metric):
    return next(
        row for row in rows
        if row["dimension"].value == dimension and row["dimension_value"] == value and row["metric"] == metric
    )


@pytest.fixture
def scenario_receipts(receipt_factory):
    """Three firm-1 receipts (two hires, one override, one reject) and one firm-2 non-hire."""
    return [
        receipt_factory(
            decision_type=DecisionType.SUBMIT,
            signals={"confidenceBand": "high"},
            outcome={"hired": True, "tenureDays": 120, "performanceRating": 4.2},
            persist=False,
        ),
        receipt_factory(
            decision_type=DecisionType.OVERRIDE,
            human_override={"reason": "HM preference"},
            signals={"confidenceBand": "medium"},
            outcome={"hired": True, "tenureDays": 200, "performanceRating": 4.8},
            persist=False,
        ),
        receipt_factory(
            decision_type=DecisionType.REJECT,
            signals={"confidenceBand": "low"},
            outcome={"hired": False},
            persist=False,
        ),
        receipt_factory(
            firm_id="firm-2",
            client_id="client-2",
            role_type="ml-engineer",
            decision_type=DecisionType.SUBMIT,
            signals={"confidenceBand": "high"},
            outcome={"hired": False},
            persist=False,
        ),
    ]


class TestBuildAggregates:
    """Tests for the pure aggregation"""

    def test_scenario_rates(self, scenario_receipts):
        rows = build_aggregates(scenario_receipts, "tenant-1", WINDOW_START, WINDOW_END)

        hire = find(rows, "firm", "firm-1", "hire_rate")["value"]
        assert hire["hires"] == 2
        assert hire["decisions"] == 2
        assert hire["rate"] == pytest.approx(1.0)

        override = find(rows, "firm", "firm-1", "override_rate")["value"]
        assert override["overrides"] == 1
        assert override["total"] == 3
        assert override["rate"] == pytest.approx(1 / 3)

        bands = find(rows, "firm", "firm-1", "confidence_band_success")["value"]["bands"]
        assert bands["high"]["total"] == 1
        assert bands["medium"]["hires"] == 1

        lift = find(rows, "role_type", "data-engineer", "override_success_delta")["value"]
        assert lift["overrideHireRate"] == pytest.approx(1.0)
        assert lift["baselineHireRate"] == pytest.approx(2 / 3)
        assert lift["delta"] == pytest.approx(1 / 3)

    def test_seven_metrics_per_value(self, scenario_receipts):
        rows = build_aggregates(scenario_receipts, "tenant-1", WINDOW_START, WINDOW_END)

        # firm-1, firm-2, client-1, client-2, data-engineer, ml-engineer
        assert len(rows) == 6 * 7
        firm_one = {row["metric"] for row in rows if row["dimension_value"] == "firm-1"}
        assert firm_one == set(get_supported_judgment_metrics())

    def test_decision_mix_consistency(self, scenario_receipts):
        """Mix counts add up to the total and to the receipts per value"""
        rows = build_aggregates(scenario_receipts, "tenant-1", WINDOW_START, WINDOW_END)

        for row in rows:
            if row["metric"] != "decision_mix":
                continue
            value = row["value"]
            assert sum(value["mix"].values()) == value["total"] == row["sample_size"]

        assert find(rows, "firm", "firm-1", "decision_mix")["value"]["total"] == 3
        assert find(rows, "firm", "firm-2", "decision_mix")["value"]["total"] == 1

    def test_averages(self, scenario_receipts):
        rows = build_aggregates(scenario_receipts, "tenant-1", WINDOW_START, WINDOW_END)

        tenure = find(rows, "firm", "firm-1", "tenure_average")["value"]
        assert tenure == {"averageDays": pytest.approx(160.0), "observations": 2}
        assert find(rows, "firm", "firm-2", "performance_average")["value"] == {
            "averageRating": None,
            "observations": 0,
        }

    def test_dimension_fallbacks(self, receipt_factory):
        receipt = receipt_factory(client_id=None, role_type=None, persist=False)
        rows = build_aggregates([receipt], "tenant-1", WINDOW_START, WINDOW_END)

        values = {(row["dimension"].value, row["dimension_value"]) for row in rows}
        assert ("client", "unassigned") in values
        assert ("role_type", "unspecified") in values

    def test_malformed_payloads_are_ignored(self, receipt_factory):
        """Bad outcome fields count as missing instead of raising"""
        receipt = receipt_factory(
            signals={"confidenceBand": "   "},
            outcome={"hired": "yes", "tenureDays": float("inf"), "performanceRating": True},
            persist=False,
        )
        rows = build_aggregates([receipt], "tenant-1", WINDOW_START, WINDOW_END)

        assert find(rows, "firm", "firm-1", "hire_rate")["value"]["hires"] == 0
        assert find(rows, "firm", "firm-1", "tenure_average")["value"]["observations"] == 0
        assert find(rows, "firm", "firm-1", "confidence_band_success")["value"]["bands"] == {}

    def test_no_receipts(self):
        assert build_aggregates([], "tenant-1", WINDOW_START, WINDOW_END) == []


class TestResolveWindow:
    def test_window_bounds(self):
        start, end = resolve_window(datetime(2025, 3, 31, 14, 30), 90)

        assert start == datetime(2025, 1, 1)
        assert end == datetime(2025, 3, 31, 23, 59, 59, 999999)


class TestAggregationRun:
    """Tests for the persisted batch run"""

    def test_run_is_idempotent(self, db_session, tenant_factory, scenario_receipts):
        tenant_factory()
        db_session.add_all(scenario_receipts)
        db_session.commit()
        now = datetime(2024, 12, 31, 12, 0)

        first = run_judgment_memory_aggregation(db_session, now=now, window_days=90)
        first_values = sorted(
            (a.dimension_value, a.metric, a.sample_size) for a in db_session.query(JudgmentAggregate).all()
        )
        second = run_judgment_memory_aggregation(db_session, now=now, window_days=90)
        second_values = sorted(
            (a.dimension_value, a.metric, a.sample_size) for a in db_session.query(JudgmentAggregate).all()
        )

        assert first.aggregates_written == second.aggregates_written == 42
        assert db_session.query(JudgmentAggregate).count() == 42
        assert first_values == second_values

    def test_receipts_outside_window_ignored(self, db_session, tenant_factory, receipt_factory):
        tenant_factory()
        receipt_factory(created_at=datetime(2024, 12, 1))
        receipt_factory(created_at=datetime(2023, 1, 1))

        run_judgment_memory_aggregation(db_session, now=datetime(2024, 12, 31), window_days=90)

        mix = db_session.query(JudgmentAggregate).filter(
            JudgmentAggregate.metric == "decision_mix",
            JudgmentAggregate.dimension_value == "firm-1",
        ).one()
        assert mix.value["total"] == 1

    def test_tenant_isolation(self, db_session, tenant_factory, receipt_factory):
        tenant_factory("tenant-1")
        tenant_factory("tenant-2")
        receipt_factory(tenant_id="tenant-1")
        receipt_factory(tenant_id="tenant-2", firm_id="firm-9")

        run_judgment_memory_aggregation(db_session, now=datetime(2024, 12, 31), window_days=90)

        tenant_two = {a.dimension_value for a in db_session.query(JudgmentAggregate).filter_by(tenant_id="tenant-2")}
        assert "firm-9" in tenant_two
        assert "firm-1" not in tenant_two

    def test_failing_tenant_does_not_stop_others(self, db_session, tenant_factory, receipt_factory, monkeypatch):
        tenant_factory("tenant-1")
        tenant_factory("tenant-2")
        receipt_factory(tenant_id="tenant-1")
        receipt_factory(tenant_id="tenant-2")

        original = judgment_crud.replace_window_aggregates

        def flaky_replace(db, tenant_id, *args, **kwargs):
            if tenant_id == "tenant-1":
                raise RuntimeError("deadlock detected")
            return original(db, tenant_id, *args, **kwargs)

        monkeypatch.setattr(judgment_aggregator.judgment_crud, "replace_window_aggregates", flaky_replace)

        result = run_judgment_memory_aggregation(db_session, now=datetime(2024, 12, 31), window_days=90)

        assert result.tenants_processed == 2
        assert result.failed_tenants == ["tenant-1"]
        assert result.aggregates_written == 21
        assert db_session.query(JudgmentAggregate).filter_by(tenant_id="tenant-2").count() == 21


class TestLatestInsights:
    """Tests for picking one window per dimension value"""

    @pytest.mark.parametrize("order", [(90, 30), (30, 90)])
    def test_same_day_windows_are_not_merged(self, db_session, tenant_factory, receipt_factory, order):
        """A 30-day run ending on the nightly window's day leaves the 90-day bundle intact"""
        tenant_factory()
        receipt_factory(outcome={"hired": True}, created_at=datetime(2024, 10, 15))
        receipt_factory(created_at=datetime(2024, 12, 20))
        now = datetime(2024, 12, 31, 12, 0)

        for window_days in order:
            run_judgment_memory_aggregation(db_session, now=now, window_days=window_days)

        insight = next(
            i for i in get_latest_judgment_insights(db_session, "tenant-1")
            if i.dimension == "firm" and i.dimension_value == "firm-1"
        )

        assert insight.window_start == datetime(2024, 10, 3)
        assert insight.metrics["decision_mix"].value["total"] == 2
        assert insight.metrics["hire_rate"].value["hires"] == 1
        assert len(insight.metrics) == 7
