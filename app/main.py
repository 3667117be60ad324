import logging
import os
from pathlib import Path

# Load .env before anything reads configuration from the environment
ENV_FILE_PATHS = [
    Path("/opt/echo/.env"),
    Path(__file__).parent.parent / ".env",
]


def load_env_file_fallback() -> bool:
    """Load KEY=VALUE pairs from the first .env file found, without overriding the environment."""
    for env_file in ENV_FILE_PATHS:
        if not (env_file.exists() and env_file.is_file()):
            continue
        try:
            loaded_count = 0
            with open(env_file, "r") as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith("#") or "=" not in line:
                        continue
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()
                    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
                        value = value[1:-1]
                    if key and value and key not in os.environ:
                        os.environ[key] = value
                        loaded_count += 1
            if loaded_count > 0:
                print(f"[Echo] Loaded {loaded_count} environment variables from {env_file}")
            return True
        except OSError as e:
            print(f"[Echo] Warning: Could not load .env file from {env_file}: {e}")
    return False


if not os.getenv("DATABASE_URL") or not os.getenv("GOOGLE_CLIENT_ID"):
    load_env_file_fallback()

from typing import Any

from litestar import Litestar, Request
from litestar.contrib.jinja import JinjaTemplateEngine
from litestar.exceptions import HTTPException, NotAuthorizedException
from litestar.response import Redirect, Response
from litestar.status_codes import HTTP_401_UNAUTHORIZED, HTTP_500_INTERNAL_SERVER_ERROR
from litestar.template.config import TemplateConfig

from app.config import DATABASE_URL, DEBUG, settings
from app.db import plugin
from app.routes import ROUTES
from app.utils import get_base_path
from app.utils.logging import log_request_error

logging.basicConfig(
    level=logging.DEBUG if DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger("Echo")

logger.info(f"Starting app in {'DEBUG' if DEBUG else 'PRODUCTION'} mode")
logger.info(f"Database URL: {DATABASE_URL.split('@')[-1]}")
logger.info(
    f"Dashboard: page_size={settings.page_size}, trend_days={settings.trend_days}, "
    f"top_contributors={settings.top_contributors}, recency_hours={settings.recency_hours}, "
    f"timezone={settings.timezone.key}, incremental_merge={settings.incremental_merge}"
)

if not os.getenv("GOOGLE_CLIENT_ID") or not os.getenv("GOOGLE_CLIENT_SECRET"):
    logger.warning("⚠ OAuth environment variables NOT found; admin login is disabled")

# --- Template config (auto-discovery)
template_dirs = [
    str(p) for p in Path(__file__).parent.glob("**/templates") if p.is_dir()
]


def register_template_globals(engine: JinjaTemplateEngine) -> None:
    """Register template globals and callables."""

    def base_path_helper(ctx: dict[str, Any]) -> str:
        request = ctx.get("request")
        return get_base_path(request) if request else ""

    engine.register_template_callable("get_base_path", base_path_helper)


template_config = TemplateConfig(
    directory=template_dirs,
    engine=JinjaTemplateEngine,
    engine_callback=register_template_globals,
)


# --- Exception handler
def log_exceptions(request: Request, exc: Exception) -> Response:
    # HTTP errors raised on purpose (validation, 503 from the store) keep their status
    if isinstance(exc, HTTPException):
        content = {"status_code": exc.status_code, "detail": exc.detail}
        if exc.extra:
            content["extra"] = exc.extra
        return Response(
            content=content,
            status_code=exc.status_code,
            headers=exc.headers,
            media_type="application/json"
        )

    log_request_error(request, exc, message="Unhandled exception occurred")
    return Response(
        content={"detail": "Internal Server Error"},
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        media_type="application/json"
    )


# --- Auth exception handler
def handle_auth_exception(request: Request, exc: NotAuthorizedException) -> Response:
    """Handle authentication failures by redirecting to login for pages, JSON for API."""
    path = request.url.path

    # API routes should return JSON, not redirect
    if "/api/" in path:
        return Response(
            content={"detail": "Not authorized", "error": str(exc.detail)},
            status_code=HTTP_401_UNAUTHORIZED,
            media_type="application/json"
        )

    if "/admin" in path:
        return Redirect(f"{get_base_path(request)}/admin/login-page")

    return Response(
        content={"detail": "Not authorized"},
        status_code=HTTP_401_UNAUTHORIZED,
        media_type="application/json"
    )


# --- App init
app = Litestar(
    route_handlers=ROUTES,
    debug=DEBUG,
    plugins=[plugin],
    template_config=template_config,
    exception_handlers={
        Exception: log_exceptions,
        NotAuthorizedException: handle_auth_exception,
    }
)
