from app.home.routes import routes as routes_home
from app.feedback.routes import routes as routes_feedback
from app.admin.routes import routes as routes_admin
from app.api import AdminController, FeedbackController, websocket_handler

ROUTES = [
    *routes_home,
    *routes_feedback,
    *routes_admin,
    FeedbackController,
    AdminController,
    websocket_handler,
]
