"""Feedback API endpoints."""

import logging

from litestar import Controller, post
from litestar.exceptions import HTTPException
from litestar.status_codes import HTTP_500_INTERNAL_SERVER_ERROR, HTTP_503_SERVICE_UNAVAILABLE
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from app.dashboard.records import FeedbackCategory
from app.dashboard.source import RecordSourceError, SessionRecordSource

logger = logging.getLogger("Echo.feedback")


# --- Request/Response Schemas ---

class FeedbackRequest(BaseModel):
    """Request to submit feedback."""
    user_name: str = Field(..., min_length=2, max_length=200, description="User's name")
    email: EmailStr = Field(..., description="User's email address")
    feedback_text: str = Field(..., min_length=10, max_length=5000, description="Feedback message")
    category: FeedbackCategory = Field(FeedbackCategory.SUGGESTION, description="Feedback category")

    @field_validator("user_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters")
        return value

    @field_validator("feedback_text")
    @classmethod
    def require_text(cls, value: str) -> str:
        # Length is checked on the raw text; newlines are kept as submitted
        if not value.strip():
            raise ValueError("Feedback is required")
        return value


class FeedbackResponse(BaseModel):
    """Response after submitting feedback."""
    success: bool
    message: str
    id: str


# --- Controller ---

class FeedbackController(Controller):
    """API endpoints for feedback submission."""

    path = "/api/feedback"
    tags = ["feedback"]

    @post("/")
    async def submit_feedback(
        self,
        data: FeedbackRequest,
        session: AsyncSession,
    ) -> FeedbackResponse:
        """Submit user feedback."""
        logger.info(f"Feedback submitted from {data.email} ({data.user_name}) [{data.category.value}]")

        source = SessionRecordSource(session)
        try:
            record = await source.create(
                user_name=data.user_name,
                email=str(data.email),  # EmailStr to string
                feedback_text=data.feedback_text,
                category=data.category,
            )
        except RecordSourceError as e:
            await session.rollback()
            if e.missing_table:
                raise HTTPException(
                    detail="Feedback table does not exist. Please run database migrations.",
                    status_code=HTTP_500_INTERNAL_SERVER_ERROR
                )
            raise HTTPException(
                detail="Could not save feedback. Please try again later.",
                status_code=HTTP_503_SERVICE_UNAVAILABLE
            )

        logger.info(f"Feedback {record.id} saved to database from {data.email}")

        return FeedbackResponse(
            success=True,
            message="Thank you for your feedback! We'll review it and get back to you if needed.",
            id=record.id,
        )
