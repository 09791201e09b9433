"""
app/models/job.py

Purpose: Job board documents (postings and applications)
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, validator

from app.models.base import DocumentSchema, ObjectIdField


class JobPosting(DocumentSchema):
    user_id: Optional[ObjectIdField] = None
    title: str
    company: str
    location: str
    overview: str
    responsibilities: str
    qualifications: str
    skills: List[str]
    salary: str
    contact_email: str = Field(..., max_length=255)
    job_type: Literal["Full-time", "Part-time"]
    category: str


class JobApplication(DocumentSchema):
    job_id: Optional[ObjectIdField] = None
    name: str
    email: str
    phone: str
    dob: datetime
    address: str
    position: str
    qualification: str
    experience: str
    skills: str
    start_date: datetime
    expected_salary: float
    cover_letter: Optional[str] = None
    resume_file_path: Optional[str] = None

    @validator("email")
    def normalize_email(cls, v):
        return v.strip().lower()
