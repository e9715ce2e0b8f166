"""
jobs/catalog.py -- Job catalog: the collaborator that owns job records.

The users/ package consults the catalog only to ask whether a job exists
before recording an application. JobCatalog is a small SQLAlchemy Core
repository so the service runs standalone; anything exposing
job_exists(job_id) -> bool can stand in for it.

Security: all queries use bound parameters. No f-strings in SQL.
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import Column, Integer, MetaData, String, Table, select
from sqlalchemy.engine import Engine

from core.database import build_engine
from jobs.models import Job

logger = logging.getLogger("jobly.jobs")

_metadata = MetaData()

_jobs = Table(
    "jobs",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("salary", Integer),
    Column("equity", String(10)),
    Column("company_handle", String(25), nullable=False),
)


class JobLookup(Protocol):
    """What the application tracker needs from a job catalog."""

    def job_exists(self, job_id: int) -> bool: ...


class JobCatalog:
    """Repository for Job records.

    Usage:
        catalog = JobCatalog("sqlite:///jobly.db")
        job_id = catalog.create_job(Job(title="Engineer", company_handle="acme"))
        catalog.job_exists(job_id)  # True
        catalog.close()
    """

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = build_engine(db_url)
        _metadata.create_all(self.engine)

    def create_job(self, job: Job) -> int:
        """Insert a job and return its assigned id."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _jobs.insert().values(
                    title=job.title,
                    salary=job.salary,
                    equity=job.equity,
                    company_handle=job.company_handle,
                )
            )
            conn.commit()
        job_id = result.inserted_primary_key[0]
        logger.info("Added job %d (%s at %s)", job_id, job.title, job.company_handle)
        return job_id

    def get_job(self, job_id: int) -> Job | None:
        with self.engine.connect() as conn:
            row = conn.execute(_jobs.select().where(_jobs.c.id == job_id)).fetchone()
        if row is None:
            return None
        return Job(
            id=row.id,
            title=row.title,
            salary=row.salary,
            equity=row.equity,
            company_handle=row.company_handle,
        )

    def job_exists(self, job_id: int) -> bool:
        with self.engine.connect() as conn:
            row = conn.execute(select(_jobs.c.id).where(_jobs.c.id == job_id)).fetchone()
        return row is not None

    def close(self) -> None:
        self.engine.dispose()
