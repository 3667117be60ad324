from litestar import get
from litestar.response import Template


@get("/", sync_to_thread=False)
def home() -> Template:
    """Landing page with links to the form and the dashboard."""
    return Template(template_name="home.html")

routes = [home]
