"""
Data model of the scraping engine.

A Problem is built once per scrape call, never modified afterwards, and handed
to the caller. Construction checks the record invariants so a malformed record
cannot leave the engine.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

MAX_CONSTRAINT_LENGTH = 500
PROBLEM_DATE_TIMEZONE = timezone.utc


class ProviderType(Enum):
    """Supported problem providers"""
    LEETCODE = "LEETCODE"
    GFG = "GFG"


@dataclass(frozen=True)
class Credentials:
    """Login credentials for providers that need an authenticated session."""
    identifier: str
    secret: str = field(repr=False)


@dataclass(frozen=True)
class ProblemExample:
    example_number: int
    input: str
    output: str
    explanation: Optional[str] = None
    image_url: Optional[str] = None

    def __post_init__(self):
        if self.example_number < 1:
            raise ValueError(f"Example number must be >= 1, got {self.example_number}")
        if not self.input or not self.output:
            raise ValueError("Example input and output must both be non-empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "example_number": self.example_number,
            "input": self.input,
            "output": self.output,
            "explanation": self.explanation,
            "image_url": self.image_url,
        }


@dataclass(frozen=True)
class ProblemConstraint:
    constraint: str

    def __post_init__(self):
        if not self.constraint or not self.constraint.strip():
            raise ValueError("Constraint text must be non-empty")
        if len(self.constraint) >= MAX_CONSTRAINT_LENGTH:
            raise ValueError(f"Constraint text exceeds {MAX_CONSTRAINT_LENGTH} characters")


def normalize_topics(topics: Iterable[str]) -> Tuple[str, ...]:
    """Trim topic names, drop empty ones and duplicates, keep page order."""
    seen = []
    for topic in topics:
        topic = (topic or "").strip()
        if topic and topic not in seen:
            seen.append(topic)
    return tuple(seen)


def problem_date_for(moment: Optional[datetime] = None) -> datetime:
    """
    Midnight of the day containing ``moment`` in the problem date time zone.

    Naive datetimes are taken to be in that zone already. Without ``moment``
    the current time is used.
    """
    if moment is None:
        moment = datetime.now(PROBLEM_DATE_TIMEZONE)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=PROBLEM_DATE_TIMEZONE)
    else:
        moment = moment.astimezone(PROBLEM_DATE_TIMEZONE)
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


@dataclass(frozen=True)
class Problem:
    """
    Normalized problem record, the only output of a scrape.

    Attributes:
        id (str): Provider problem id, derived from the URL
        slug (str): URL slug, derived from the URL
        problem_url (str): Canonical absolute problem URL
        title (str): Problem title
        difficulty (str): Normalized difficulty label
        topics (Tuple[str, ...]): Distinct, non-empty topic tags
        provider (ProviderType): Provider the problem was scraped from
        problem_date (datetime): Day of the problem, midnight UTC
        description (Optional[str]): Prose description without examples/constraints
        examples (Optional[Tuple[ProblemExample, ...]]): Parsed examples
        constraints (Optional[Tuple[ProblemConstraint, ...]]): Parsed constraints
        is_premium (bool): Problem is behind a paywall
    """
    id: str
    slug: str
    problem_url: str
    title: str
    difficulty: str
    topics: Tuple[str, ...]
    provider: ProviderType
    problem_date: datetime
    description: Optional[str] = None
    examples: Optional[Tuple[ProblemExample, ...]] = None
    constraints: Optional[Tuple[ProblemConstraint, ...]] = None
    is_premium: bool = False

    def __post_init__(self):
        if not self.id or not self.slug:
            raise ValueError("Problem id and slug must be non-empty")
        if self.problem_date.tzinfo is None:
            raise ValueError("Problem date must be timezone aware")
        if self.problem_date != self.problem_date.replace(hour=0, minute=0, second=0, microsecond=0):
            raise ValueError(f"Problem date must be at midnight, got {self.problem_date.isoformat()}")
        if any(not topic for topic in self.topics):
            raise ValueError("Problem topics must not contain empty strings")

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation handed to downstream collaborators."""
        return {
            "id": self.id,
            "slug": self.slug,
            "problem_url": self.problem_url,
            "title": self.title,
            "difficulty": self.difficulty,
            "topics": list(self.topics),
            "description": self.description,
            "examples": [e.to_dict() for e in self.examples] if self.examples else None,
            "constraints": [c.constraint for c in self.constraints] if self.constraints else None,
            "is_premium": self.is_premium,
            "provider": self.provider.value,
            "problem_date": self.problem_date.isoformat(),
        }
