"""
Test suite for client-relative benchmarking.
"""

from datetime import datetime

import pytest

from matchcore.crud import learning as learning_crud
from matchcore.models import LearningAggregate, TenantLearningSignal
from matchcore.services.benchmarks import (
    determine_size_cohort,
    get_client_relative_benchmarks,
    median,
    pick_latest_signals,
)


@pytest.fixture
def learning_pool(db_session):
    """Tenant signal plus one generation of anonymized aggregates and an older stale one."""
    db_session.add(TenantLearningSignal(
        tenant_id="tenant-1",
        role_family="Data",
        industry="Software",
        region="US",
        signal_type="time_to_fill",
        value=35,
        sample_size=120,
        window_days=90,
        captured_at=datetime(2025, 2, 1),
    ))
    latest = datetime(2025, 2, 3)
    db_session.add_all([
        LearningAggregate(role_family="Data", industry="Software", region="US", signal_type="time_to_fill",
                          value=40, sample_size=80, window_days=90, created_at=latest),
        LearningAggregate(role_family="Data", industry="Software", region="US", signal_type="time_to_fill",
                          value=44, sample_size=220, window_days=90, created_at=latest),
        LearningAggregate(role_family="Data", industry="Finance", region="EMEA", signal_type="time_to_fill",
                          value=50, sample_size=30, window_days=90, created_at=latest),
        LearningAggregate(role_family="Data", industry="Software", region="US", signal_type="time_to_fill",
                          value=99, sample_size=80, window_days=90, created_at=datetime(2024, 12, 1)),
    ])
    db_session.commit()


class TestOptIn:
    """Tests for the opt-in gate"""

    def test_opted_out_returns_notes_only(self, db_session, tenant_factory, learning_pool, monkeypatch):
        tenant_factory(opt_in=False)

        def fail(*args, **kwargs):
            raise AssertionError("signal tables must not be queried")

        monkeypatch.setattr(learning_crud, "list_recent_signals", fail)
        monkeypatch.setattr(learning_crud, "list_latest_aggregates", fail)

        result = get_client_relative_benchmarks(db_session, "tenant-1")

        assert result.opted_in is False
        assert result.comparisons == []
        assert any("opted into" in note for note in result.notes)

    def test_missing_config_is_opted_out(self, db_session, tenant_factory):
        tenant_factory(with_config=False)
        assert get_client_relative_benchmarks(db_session, "tenant-1").opted_in is False

    def test_legacy_json_opt_in(self, db_session, tenant_factory, learning_pool):
        tenant_factory(network_learning={"enabled": True})
        assert get_client_relative_benchmarks(db_session, "tenant-1").opted_in is True


class TestComparisons:
    """Tests for median comparisons"""

    def test_industry_region_and_size(self, db_session, tenant_factory, learning_pool):
        tenant_factory(opt_in=True)

        result = get_client_relative_benchmarks(db_session, "tenant-1", window_days=90)
        by_basis = {c.basis: c for c in result.comparisons}

        assert result.opted_in is True
        assert by_basis["industry"].benchmark_value == 42
        assert by_basis["industry"].delta == -7
        assert by_basis["industry"].metric == "Median time-to-fill (days) (Software median)"
        assert by_basis["region"].benchmark_value == 42
        assert by_basis["size"].benchmark_value == 40
        assert by_basis["size"].metric == "Median time-to-fill (days) (growth cohort)"
        assert result.scope.size_cohort == "growth"

    def test_interpretation_stays_anonymous(self, db_session, tenant_factory, learning_pool):
        tenant_factory(opt_in=True)

        result = get_client_relative_benchmarks(db_session, "tenant-1")

        for comparison in result.comparisons:
            assert "anonymized medians" in comparison.interpretation
            assert "Peer identities stay hidden" in comparison.interpretation
        assert "below the Software benchmark by 7.00" in result.comparisons[0].interpretation

    def test_role_filter_without_signals(self, db_session, tenant_factory, learning_pool):
        tenant_factory(opt_in=True)

        result = get_client_relative_benchmarks(db_session, "tenant-1", role_family="Sales")

        assert result.opted_in is True
        assert result.comparisons == []


class TestHelpers:
    def test_median(self):
        assert median([]) == 0
        assert median([3, 1, 2]) == 2
        assert median([40, 44]) == 42
        assert median([1, 2]) == 1.5

    def test_size_cohorts(self):
        assert determine_size_cohort(74) == "emerging"
        assert determine_size_cohort(75) == "growth"
        assert determine_size_cohort(199) == "growth"
        assert determine_size_cohort(200) == "enterprise"

    def test_pick_latest_signals(self):
        old = TenantLearningSignal(role_family="Data", signal_type="time_to_fill", value=1,
                                   captured_at=datetime(2025, 1, 1))
        new = TenantLearningSignal(role_family="Data", signal_type="time_to_fill", value=2,
                                   captured_at=datetime(2025, 2, 1))
        other = TenantLearningSignal(role_family="Sales", signal_type="skill_scarcity", value=3,
                                     captured_at=datetime(2025, 2, 1))

        assert pick_latest_signals([old, new, other], "Data") == [new]
        assert len(pick_latest_signals([old, new, other])) == 2
