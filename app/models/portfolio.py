"""
app/models/portfolio.py

Purpose: Artist portfolio and its child records

A Portfolio belongs to exactly one user. Projects, achievements, contacts
and photos point back at it through portfolio_id.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, validator

from app.models.base import DocumentSchema, ObjectIdField


class DateRange(BaseModel):
    # "from" is a keyword, hence the alias
    start: Optional[int] = Field(default=None, alias="from")
    to: Optional[int] = None

    model_config = {"populate_by_name": True}


class ExperienceEntry(BaseModel):
    title: Optional[str] = None
    date_range: DateRange = Field(default_factory=DateRange)
    description: Optional[str] = None


class EducationEntry(BaseModel):
    degree: Optional[str] = None
    institute_name: Optional[str] = None
    year: Optional[int] = None
    location: Optional[str] = None


class SocialLinks(BaseModel):
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None
    youtube: Optional[str] = None
    website: Optional[str] = None


class Portfolio(DocumentSchema):
    user_id: ObjectIdField
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    tagline: Optional[str] = Field(default=None, max_length=50)
    about: Optional[str] = None
    cover_photo: Optional[str] = None
    profile_image: Optional[str] = None
    experience_overview: Optional[str] = None
    artist_category: Optional[str] = None
    experience: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    social_links: SocialLinks = Field(default_factory=SocialLinks)


class PortfolioProject(DocumentSchema):
    portfolio_id: ObjectIdField
    title: Optional[str] = None
    description: Optional[str] = None
    role: Optional[str] = None
    date: Optional[str] = None
    collaborators: Optional[str] = None
    location: Optional[str] = None
    awards: Optional[str] = None
    image_file: Optional[str] = None


class Achievement(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None


class Testimony(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    company: Optional[str] = None
    message: Optional[str] = None
    rating: Optional[float] = None


class PortfolioAchievement(DocumentSchema):
    portfolio_id: ObjectIdField
    achievements: List[Achievement] = Field(default_factory=list)
    testimonies: List[Testimony] = Field(default_factory=list)


class PortfolioContact(DocumentSchema):
    portfolio_id: ObjectIdField
    email: str
    phone_number: str

    @validator("email")
    def normalize_email(cls, v):
        return v.strip().lower()


class PortfolioPhoto(DocumentSchema):
    portfolio_id: ObjectIdField
    url: Optional[str] = Field(default=None, max_length=255)
