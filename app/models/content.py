"""
app/models/content.py

Purpose: Editorial content (news and blogs, movies) and contact-form messages
"""

from typing import Literal, Optional

from pydantic import validator

from app.models.base import DocumentSchema, ObjectIdField

NewsType = Literal[
    "Hero Section",
    "Trending News",
    "comic",
    "series",
    "movie",
    "podcast",
    "game",
    "Culture & Lifestyle",
    "Trending News Video",
]


class NewsAndBlogs(DocumentSchema):
    user_id: ObjectIdField
    thumbnail: Optional[str] = None
    title: str
    author: str
    type: Literal["photo", "video"]
    news_type: NewsType
    video_url: Optional[str] = None
    description: str
    photo_url: Optional[str] = None


class Movie(DocumentSchema):
    user_id: ObjectIdField
    poster: Optional[str] = None
    title: str
    year: Optional[int] = None
    duration: Optional[str] = None
    rating: Optional[str] = None
    age: Optional[str] = None
    overview: Optional[str] = None
    plot: Optional[str] = None
    starring: Optional[str] = None
    creators: Optional[str] = None
    directors: Optional[str] = None
    writers: Optional[str] = None
    producers: Optional[str] = None
    dop: Optional[str] = None
    music: Optional[str] = None
    genre: Optional[str] = None
    trailer: Optional[str] = None
    images: Optional[str] = None


class ContactUs(DocumentSchema):
    name: str
    email: str
    message: str

    @validator("email")
    def normalize_email(cls, v):
        return v.strip().lower()
