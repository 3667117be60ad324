"""Feedback model for user feedback submissions."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class Feedback(Base):
    """User feedback submission."""
    
    __tablename__ = "feedback"
    
    user_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    feedback_text: Mapped[str] = mapped_column(Text, nullable=False)
    # Plain string rather than an Enum column: rows inserted outside the
    # submission form may carry values the application does not know about.
    category: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="suggestion",
        server_default="suggestion",
    )
    
    def __repr__(self) -> str:
        return f"<Feedback {self.email} [{self.category}] ({self.created_at})>"
