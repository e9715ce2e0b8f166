"""
jobs/models.py -- Domain dataclass for job postings held by the job catalog.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Job:
    """A job posting. id is None before the record is written to the database."""

    title: str
    company_handle: str
    salary: Optional[int] = None
    equity: Optional[str] = None  # decimal fraction as text, e.g. "0.05"
    id: Optional[int] = None
