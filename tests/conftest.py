"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- FastAPI test client
- Factories for tenants, jobs, candidates, pipeline rows and decision receipts
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from matchcore.core.database import Base, get_db
from matchcore.models import (
    Candidate,
    CandidateSkill,
    DecisionReceipt,
    DecisionType,
    Job,
    JobCandidate,
    JobCandidateStatus,
    JobSkill,
    OperatingMode,
    Tenant,
    TenantConfig,
)
from main import app


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """
    Create a fresh database for each test.
    Tables are dropped after the test completes.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """
    FastAPI test client with overridden database dependency.

    The client is not entered as a context manager, so the startup hook that
    creates tables on the configured Postgres database never runs.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def tenant_factory(db_session):
    """Create a tenant, optionally with a config row."""
    def create(
        tenant_id: str = "tenant-1",
        mode: OperatingMode = OperatingMode.PRODUCTION,
        opt_in=None,
        network_learning=None,
        guardrails=None,
        with_config: bool = True,
    ) -> Tenant:
        tenant = Tenant(id=tenant_id, name=f"Tenant {tenant_id}", operating_mode=mode)
        db_session.add(tenant)
        if with_config:
            db_session.add(TenantConfig(
                tenant_id=tenant_id,
                network_learning_opt_in=opt_in,
                network_learning=network_learning,
                guardrails=guardrails,
            ))
        db_session.commit()
        return tenant

    return create


@pytest.fixture
def job_factory(db_session):
    def create(
        tenant_id: str = "tenant-1",
        title: str = "Data Engineer",
        created_at: datetime = datetime(2025, 1, 1),
        skills=None,
        seniority_level: str = "mid",
        location: str = "Remote",
    ) -> Job:
        job = Job(
            tenant_id=tenant_id,
            title=title,
            location=location,
            seniority_level=seniority_level,
            created_at=created_at,
        )
        for name, required in (skills or []):
            job.skills.append(JobSkill(name=name, normalized_name=name.lower(), required=required))
        db_session.add(job)
        db_session.commit()
        return job

    return create


@pytest.fixture
def candidate_factory(db_session):
    def create(tenant_id: str = "tenant-1", skills=None, **fields) -> Candidate:
        defaults = {
            "full_name": "Ada Lovelace",
            "email": "ada@example.com",
            "location": "Remote",
            "current_title": "Data Engineer",
            "seniority_level": "Mid",
            "summary": "Builds reliable data pipelines.",
        }
        defaults.update(fields)
        candidate = Candidate(tenant_id=tenant_id, **defaults)
        for name in (skills or []):
            candidate.skills.append(CandidateSkill(name=name, normalized_name=name.lower()))
        db_session.add(candidate)
        db_session.commit()
        return candidate

    return create


@pytest.fixture
def job_candidate_factory(db_session):
    def create(
        job: Job,
        candidate: Candidate,
        status: JobCandidateStatus = JobCandidateStatus.POTENTIAL,
        created_at: datetime = datetime(2025, 1, 1),
        updated_at: datetime = None,
        recruiter_id: str = None,
    ) -> JobCandidate:
        row = JobCandidate(
            tenant_id=job.tenant_id,
            job_id=job.id,
            candidate_id=candidate.id,
            status=status,
            created_at=created_at,
            updated_at=updated_at,
            recruiter_id=recruiter_id,
        )
        db_session.add(row)
        db_session.commit()
        return row

    return create


@pytest.fixture
def receipt_factory(db_session):
    """Create a decision receipt; persist=False returns an unsaved instance."""
    def create(
        tenant_id: str = "tenant-1",
        firm_id: str = "firm-1",
        client_id: str = "client-1",
        role_type: str = "data-engineer",
        decision_type: DecisionType = DecisionType.SUBMIT,
        signals=None,
        human_override=None,
        outcome=None,
        created_at: datetime = datetime(2024, 12, 1),
        persist: bool = True,
    ) -> DecisionReceipt:
        receipt = DecisionReceipt(
            tenant_id=tenant_id,
            firm_id=firm_id,
            client_id=client_id,
            role_type=role_type,
            agent="MATCH",
            decision_type=decision_type,
            signals=signals if signals is not None else {},
            human_override=human_override,
            outcome=outcome if outcome is not None else {},
            created_at=created_at,
        )
        if persist:
            db_session.add(receipt)
            db_session.commit()
        return receipt

    return create
