"""Echo API routes."""

from app.api.admin import AdminController
from app.api.feedback import FeedbackController
from app.api.websocket import websocket_handler

__all__ = ["AdminController", "FeedbackController", "websocket_handler"]
