"""
app/models/registry.py

Purpose: Closed registry of every table the generic CRUD API can reach

- TableSpec: collection, schema, id-like fields, relations, aliases
- normalize_table_name(): route string -> canonical table name
- get_table(): canonical TableSpec lookup
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Type

from app.core.exceptions import ResourceNotFoundError
from app.models.base import DocumentSchema
from app.models.commerce import Cart, Order, Payment, Transaction
from app.models.content import ContactUs, Movie, NewsAndBlogs
from app.models.course import Audio, Comment, Course, Pdf, TelegramFile, Video
from app.models.job import JobApplication, JobPosting
from app.models.portfolio import (
    Portfolio,
    PortfolioAchievement,
    PortfolioContact,
    PortfolioPhoto,
    PortfolioProject,
)
from app.models.user import User


@dataclass(frozen=True)
class Relation:
    """
    A populate path.

    Forward (reverse=False): `local_field` holds an id (or list of ids) of `target`.
    Reverse (reverse=True): documents of `target` whose `foreign_field`
    equals this document's _id.
    """
    target: str
    local_field: str = "_id"
    foreign_field: str = "_id"
    reverse: bool = False


@dataclass(frozen=True)
class TableSpec:
    name: str
    collection: str
    schema: Type[DocumentSchema]
    object_id_fields: Tuple[str, ...] = ()
    relations: Dict[str, Relation] = field(default_factory=dict)
    aliases: Tuple[str, ...] = ()
    unique_indexes: Tuple[Tuple[str, ...], ...] = ()
    sparse_unique_indexes: Tuple[str, ...] = ()
    # Stripped from every record the generic API returns
    hidden_fields: Tuple[str, ...] = ()

    def get_relation(self, name: str) -> Optional[Relation]:
        return self.relations.get(name)


def _owner(target: str = "User", local_field: str = "user_id") -> Relation:
    return Relation(target=target, local_field=local_field)


def _children(target: str, foreign_field: str) -> Relation:
    return Relation(target=target, foreign_field=foreign_field, reverse=True)


_SPECS = (
    TableSpec(
        name="User",
        collection="users",
        schema=User,
        unique_indexes=(("email",),),
        hidden_fields=("password",),
        relations={
            "courses": _children("Course", "user_id"),
            "portfolio": _children("Portfolio", "user_id"),
        },
    ),
    TableSpec(
        name="Course",
        collection="courses",
        schema=Course,
        object_id_fields=("user_id", "instructor", "files", "approved_by"),
        sparse_unique_indexes=("course_code", "access_code"),
        relations={
            "user_id": _owner(),
            "instructor": _owner(local_field="instructor"),
            "files": _owner("TelegramFile", "files"),
            "videos": _children("Video", "course_id"),
            "audios": _children("Audio", "course_id"),
            "pdfs": _children("Pdf", "course_id"),
            "comments": _children("Comment", "course_id"),
        },
    ),
    TableSpec(
        name="Payment",
        collection="payments",
        schema=Payment,
        object_id_fields=("course_id", "user_id"),
        unique_indexes=(("transaction_id",),),
        relations={
            "user_id": _owner(),
            "course_id": _owner("Course", "course_id"),
        },
    ),
    TableSpec(
        name="NewsAndBlogs",
        collection="newsandblogs",
        schema=NewsAndBlogs,
        object_id_fields=("user_id",),
        aliases=("news", "blogs", "newsandblog"),
        relations={"user_id": _owner()},
    ),
    TableSpec(
        name="Portfolio",
        collection="portfolios",
        schema=Portfolio,
        object_id_fields=("user_id",),
        unique_indexes=(("user_id",),),
        relations={
            "user_id": _owner(),
            "projects": _children("PortfolioProject", "portfolio_id"),
            "achievements": _children("PortfolioAchievement", "portfolio_id"),
            "contacts": _children("PortfolioContact", "portfolio_id"),
            "photos": _children("PortfolioPhoto", "portfolio_id"),
        },
    ),
    TableSpec(
        name="PortfolioProject",
        collection="portfolio_projects",
        schema=PortfolioProject,
        object_id_fields=("portfolio_id",),
        relations={"portfolio_id": _owner("Portfolio", "portfolio_id")},
    ),
    TableSpec(
        name="PortfolioAchievement",
        collection="portfolio_achievements",
        schema=PortfolioAchievement,
        object_id_fields=("portfolio_id",),
        aliases=("portfolioachivements", "portfolioachivement"),
        relations={"portfolio_id": _owner("Portfolio", "portfolio_id")},
    ),
    TableSpec(
        name="PortfolioContact",
        collection="portfolio_contacts",
        schema=PortfolioContact,
        object_id_fields=("portfolio_id",),
        relations={"portfolio_id": _owner("Portfolio", "portfolio_id")},
    ),
    TableSpec(
        name="PortfolioPhoto",
        collection="portfolio_photos",
        schema=PortfolioPhoto,
        object_id_fields=("portfolio_id",),
        relations={"portfolio_id": _owner("Portfolio", "portfolio_id")},
    ),
    TableSpec(
        name="JobPosting",
        collection="jobpostings",
        schema=JobPosting,
        object_id_fields=("user_id",),
        aliases=("job", "jobs"),
        relations={
            "user_id": _owner(),
            "applications": _children("JobApplication", "job_id"),
        },
    ),
    TableSpec(
        name="JobApplication",
        collection="job_applications",
        schema=JobApplication,
        object_id_fields=("job_id",),
        relations={"job_id": _owner("JobPosting", "job_id")},
    ),
    TableSpec(
        name="ContactUs",
        collection="contactus",
        schema=ContactUs,
        aliases=("contact",),
    ),
    TableSpec(
        name="Movie",
        collection="movies",
        schema=Movie,
        object_id_fields=("user_id",),
        relations={"user_id": _owner()},
    ),
    TableSpec(
        name="Cart",
        collection="carts",
        schema=Cart,
        object_id_fields=("user_id", "course_id"),
        unique_indexes=(("user_id", "course_id"),),
        relations={
            "user_id": _owner(),
            "course_id": _owner("Course", "course_id"),
        },
    ),
    TableSpec(
        name="Order",
        collection="orders",
        schema=Order,
        object_id_fields=("user_id", "product_id"),
        unique_indexes=(("order_number",),),
        relations={
            "user_id": _owner(),
            "product_id": _owner("Course", "product_id"),
            "transactions": _children("Transaction", "order_id"),
        },
    ),
    TableSpec(
        name="Transaction",
        collection="transactions",
        schema=Transaction,
        object_id_fields=("order_id", "user_id"),
        relations={
            "user_id": _owner(),
            "order_id": _owner("Order", "order_id"),
        },
    ),
    TableSpec(
        name="Comment",
        collection="comments",
        schema=Comment,
        object_id_fields=("course_id",),
        relations={"course_id": _owner("Course", "course_id")},
    ),
    TableSpec(
        name="TelegramFile",
        collection="telegram_files",
        schema=TelegramFile,
        object_id_fields=("uploaded_by", "course"),
        unique_indexes=(("telegram_file_id",),),
        relations={
            "uploaded_by": _owner(local_field="uploaded_by"),
            "course": _owner("Course", "course"),
        },
    ),
    TableSpec(
        name="Video",
        collection="videos",
        schema=Video,
        object_id_fields=("course_id",),
        relations={"course_id": _owner("Course", "course_id")},
    ),
    TableSpec(
        name="Audio",
        collection="audios",
        schema=Audio,
        object_id_fields=("course_id",),
        relations={"course_id": _owner("Course", "course_id")},
    ),
    TableSpec(
        name="Pdf",
        collection="pdfs",
        schema=Pdf,
        object_id_fields=("course_id",),
        relations={"course_id": _owner("Course", "course_id")},
    ),
)

TABLES: Dict[str, TableSpec] = {spec.name: spec for spec in _SPECS}

_CASEFOLDED: Dict[str, str] = {name.lower(): name for name in TABLES}
_ALIASES: Dict[str, str] = {
    alias.lower(): spec.name for spec in _SPECS for alias in spec.aliases
}


def _lookup(candidate: str) -> Optional[str]:
    key = candidate.lower()
    return _CASEFOLDED.get(key) or _ALIASES.get(key)


def normalize_table_name(name: str) -> str:
    """
    Resolves a route-supplied table name to its canonical key.

    Order: exact, case-insensitive, alias, then with a trailing
    plural "es"/"s" removed.

    Raises:
        ResourceNotFoundError: listing the available tables
    """
    candidate = (name or "").strip()
    if candidate in TABLES:
        return candidate

    resolved = _lookup(candidate)
    if resolved:
        return resolved

    for suffix in ("es", "s"):
        if len(candidate) > len(suffix) and candidate.lower().endswith(suffix):
            resolved = _lookup(candidate[: -len(suffix)])
            if resolved:
                return resolved

    raise ResourceNotFoundError(
        f"Table '{name}' not found",
        details={"available_tables": sorted(TABLES)},
    )


def get_table(name: str) -> TableSpec:
    return TABLES[normalize_table_name(name)]
