"""In-memory feedback records consumed by the dashboard pipeline."""

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

UNCATEGORIZED = "uncategorized"


class FeedbackCategory(str, enum.Enum):
    """Categories offered on the submission form."""
    SUGGESTION = "suggestion"
    BUG_REPORT = "bug_report"
    FEATURE_REQUEST = "feature_request"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    FeedbackCategory.BUG_REPORT: "Bug Reports",
    FeedbackCategory.FEATURE_REQUEST: "Feature Requests",
    FeedbackCategory.SUGGESTION: "Suggestions",
}


@dataclass(frozen=True)
class OtherCategory:
    """A category value the application does not recognize.

    ``value`` is what the dashboard shows; ``raw`` is what was stored, which
    is ``None`` when the row had no category at all.
    """
    value: str = UNCATEGORIZED
    raw: Optional[str] = None

    @property
    def label(self) -> str:
        return self.value


Category = Union[FeedbackCategory, OtherCategory]


def parse_category(value: Any) -> Category:
    """Map a raw stored value onto a known category or an ``OtherCategory``."""
    if isinstance(value, (FeedbackCategory, OtherCategory)):
        return value
    if value is None:
        return OtherCategory()
    if isinstance(value, str) and not value.strip():
        return OtherCategory(raw=value)
    try:
        return FeedbackCategory(value)
    except ValueError:
        return OtherCategory(str(value), raw=str(value))


def ensure_aware(value: datetime) -> datetime:
    """Treat naive timestamps (SQLite hands these back) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return ensure_aware(datetime.fromisoformat(text))
    raise TypeError(f"Cannot interpret {value!r} as a timestamp")


@dataclass(frozen=True)
class FeedbackRecord:
    """Immutable snapshot of one feedback submission."""
    id: str
    user_name: str
    email: str
    feedback_text: str
    category: Category
    created_at: datetime

    @property
    def category_value(self) -> str:
        """Category string for display (``uncategorized`` when missing)."""
        return self.category.value

    @property
    def category_raw(self) -> Optional[str]:
        """The category exactly as stored, ``None`` when missing."""
        if isinstance(self.category, FeedbackCategory):
            return self.category.value
        return self.category.raw

    @property
    def category_key(self) -> str:
        """Aggregation key: the known category value or ``uncategorized``."""
        if isinstance(self.category, FeedbackCategory):
            return self.category.value
        return UNCATEGORIZED

    @classmethod
    def from_model(cls, model: Any) -> "FeedbackRecord":
        """Build a record from a ``Feedback`` ORM row."""
        return cls(
            id=str(model.id),
            user_name=model.user_name,
            email=model.email,
            feedback_text=model.feedback_text,
            category=parse_category(model.category),
            created_at=ensure_aware(model.created_at),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FeedbackRecord":
        return cls(
            id=str(data["id"]),
            user_name=data.get("user_name") or "",
            email=data.get("email") or "",
            feedback_text=data.get("feedback_text") or "",
            category=parse_category(data.get("category")),
            created_at=parse_timestamp(data["created_at"]),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_name": self.user_name,
            "email": self.email,
            "feedback_text": self.feedback_text,
            "category": self.category_value,
            "created_at": self.created_at.isoformat(),
        }
