"""Feedback page routes."""

from litestar import get
from litestar.response import Template

from app.dashboard.records import CATEGORY_LABELS, FeedbackCategory


@get("/feedback", sync_to_thread=False)
def feedback_page() -> Template:
    """Feedback form page."""
    return Template(
        template_name="feedback/feedback.html",
        context={"categories": CATEGORY_LABELS, "default_category": FeedbackCategory.SUGGESTION.value},
    )


routes = [feedback_page]
