"""
Test suite for the Match Quality Index.
"""

from datetime import datetime

import pytest

from matchcore.models import JobCandidateStatus, MatchFeedback, MatchQualitySnapshot, OperatingMode
from matchcore.services.match_quality import (
    calculate_match_quality_index,
    capture_weekly_match_quality_snapshots,
    score_match_quality,
    start_of_week,
    time_to_fill_score,
)


@pytest.fixture
def mqi_scenario(db_session, tenant_factory, job_factory, candidate_factory, job_candidate_factory):
    """
    One job with a shortlisted, an interviewing and a hired candidate, plus two
    earlier hires from the previous autumn and one up / one down feedback on
    hired matches.
    """
    tenant_factory()
    job = job_factory(title="Data Engineer", created_at=datetime(2025, 1, 25))
    candidate = candidate_factory()

    job_candidate_factory(job, candidate, JobCandidateStatus.SHORTLISTED,
                          created_at=datetime(2025, 2, 1), updated_at=datetime(2025, 2, 5))
    job_candidate_factory(job, candidate, JobCandidateStatus.INTERVIEWING,
                          created_at=datetime(2025, 2, 2), updated_at=datetime(2025, 2, 7))
    job_candidate_factory(job, candidate, JobCandidateStatus.HIRED,
                          created_at=datetime(2025, 2, 3), updated_at=datetime(2025, 2, 12))

    baseline_one = job_factory(title="Baseline 1", created_at=datetime(2024, 8, 15))
    baseline_two = job_factory(title="Baseline 2", created_at=datetime(2024, 8, 20))
    job_candidate_factory(baseline_one, candidate, JobCandidateStatus.HIRED,
                          created_at=datetime(2024, 9, 1), updated_at=datetime(2024, 9, 25))
    job_candidate_factory(baseline_two, candidate, JobCandidateStatus.HIRED,
                          created_at=datetime(2024, 9, 10), updated_at=datetime(2024, 9, 28))

    db_session.add_all([
        MatchFeedback(tenant_id="tenant-1", job_id=job.id, direction="UP", outcome="HIRED",
                      created_at=datetime(2025, 2, 6)),
        MatchFeedback(tenant_id="tenant-1", job_id=job.id, direction="DOWN", outcome="HIRED",
                      created_at=datetime(2025, 2, 8)),
    ])
    db_session.commit()
    return job


class TestMatchQualityIndex:
    """Tests for MQI computation"""

    def test_scenario(self, db_session, mqi_scenario):
        result = calculate_match_quality_index(
            db_session, "tenant-1", window_days=30, reference_date=datetime(2025, 2, 15)
        )

        assert result.components.shortlist_to_interview_rate == pytest.approx(2 / 3)
        assert result.components.interview_to_hire_rate == pytest.approx(0.5)
        assert result.components.average_candidate_feedback == pytest.approx(0.5)
        assert result.components.average_time_to_fill_days == pytest.approx(18.0)
        # baseline covers the in-window hire too: (41 + 39 + 18) / 3
        assert result.components.baseline_time_to_fill_days == pytest.approx(32.7)
        assert result.components.time_to_fill_score == pytest.approx(0.7245, abs=1e-4)
        assert result.mqi == pytest.approx(59.5)
        assert result.samples.baseline_samples == 3

    def test_only_in_window_hires_form_the_baseline(self, db_session, tenant_factory, job_factory,
                                                    candidate_factory, job_candidate_factory):
        """A first hire is measured against itself, not the 45-day default"""
        tenant_factory()
        job = job_factory(created_at=datetime(2025, 2, 1))
        job_candidate_factory(job, candidate_factory(), JobCandidateStatus.HIRED,
                              created_at=datetime(2025, 2, 5), updated_at=datetime(2025, 2, 11))

        result = calculate_match_quality_index(db_session, "tenant-1", reference_date=datetime(2025, 2, 15))

        assert result.samples.baseline_samples == 1
        assert result.components.baseline_time_to_fill_days == pytest.approx(10.0)
        assert result.components.time_to_fill_score == pytest.approx(0.5)

    def test_feedback_on_unhired_matches_ignored(self, db_session, tenant_factory, job_factory):
        tenant_factory()
        job = job_factory(created_at=datetime(2025, 2, 1))
        db_session.add_all([
            MatchFeedback(tenant_id="tenant-1", job_id=job.id, direction="UP", outcome="HIRED",
                          created_at=datetime(2025, 2, 10)),
            MatchFeedback(tenant_id="tenant-1", job_id=job.id, direction="DOWN", outcome="REJECTED",
                          created_at=datetime(2025, 2, 10)),
            MatchFeedback(tenant_id="tenant-1", job_id=job.id, direction="DOWN",
                          created_at=datetime(2025, 2, 11)),
        ])
        db_session.commit()

        result = calculate_match_quality_index(db_session, "tenant-1", reference_date=datetime(2025, 2, 15))

        assert result.samples.feedback_entries == 1
        assert result.components.average_candidate_feedback == pytest.approx(1.0)

    def test_job_scope(self, db_session, mqi_scenario):
        """Scoping to another job leaves only neutral components"""
        result = calculate_match_quality_index(
            db_session, "tenant-1", job_id=mqi_scenario.id + 999, reference_date=datetime(2025, 2, 15)
        )

        assert result.samples.shortlisted == 0
        assert result.components.average_candidate_feedback == 0.5
        assert result.components.time_to_fill_score == 0.5

    def test_other_tenant_is_empty(self, db_session, mqi_scenario, tenant_factory):
        tenant_factory("tenant-2")
        result = calculate_match_quality_index(db_session, "tenant-2", reference_date=datetime(2025, 2, 15))

        assert result.samples.shortlisted == 0
        assert result.mqi == pytest.approx(20.0)


class TestComponents:
    """Tests for the pure component helpers"""

    def test_neutral_without_hires(self):
        assert time_to_fill_score([], [30.0])["score"] == 0.5

    def test_default_baseline(self):
        fill = time_to_fill_score([45.0], [])
        assert fill["average_baseline"] == 45.0
        assert fill["score"] == pytest.approx(0.5)

    def test_score_clamped(self):
        assert time_to_fill_score([200.0], [10.0])["score"] == 0.0

    def test_empty_inputs_never_divide_by_zero(self):
        result = score_match_quality(0, 0, 0, [], [], [])
        assert result.components.shortlist_to_interview_rate == 0
        assert result.components.interview_to_hire_rate == 0
        assert result.mqi == pytest.approx(20.0)

    def test_unknown_feedback_is_neutral(self):
        result = score_match_quality(1, 1, 1, ["up", "meh", None], [], [])
        assert result.components.average_candidate_feedback == pytest.approx(2 / 3)

    def test_start_of_week(self):
        assert start_of_week(datetime(2025, 2, 17, 10, 0)) == datetime(2025, 2, 17)
        assert start_of_week(datetime(2025, 2, 23, 23, 0)) == datetime(2025, 2, 17)


class TestWeeklySnapshots:
    """Tests for weekly snapshot capture"""

    def test_capture_writes_one_row_per_window(self, db_session, mqi_scenario):
        snapshots = capture_weekly_match_quality_snapshots(
            db_session, "tenant-1", OperatingMode.PRODUCTION, reference_date=datetime(2025, 2, 17, 10, 0)
        )

        assert [s.window_days for s in snapshots] == [30, 60, 90]
        assert all(s.captured_at == datetime(2025, 2, 17) for s in snapshots)
        assert snapshots[0].components["context"] == {"system_mode": "production"}
        assert db_session.query(MatchQualitySnapshot).count() == 3

    def test_rerun_same_week_replaces(self, db_session, mqi_scenario):
        for day in (17, 19):
            capture_weekly_match_quality_snapshots(
                db_session, "tenant-1", OperatingMode.PILOT, windows=[30], reference_date=datetime(2025, 2, day)
            )

        assert db_session.query(MatchQualitySnapshot).count() == 1

    @pytest.mark.parametrize("mode", [OperatingMode.FIRE_DRILL, OperatingMode.DEMO])
    def test_restricted_mode_skips(self, db_session, mqi_scenario, mode):
        snapshots = capture_weekly_match_quality_snapshots(
            db_session, "tenant-1", mode, reference_date=datetime(2025, 2, 17)
        )

        assert snapshots == []
        assert db_session.query(MatchQualitySnapshot).count() == 0
