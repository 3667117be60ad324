"""Utility functions for the Echo application."""

from litestar import Request


def get_base_path(request: Request) -> str:
    """
    Extract the base path from the request (e.g., '/echo' if app is served at /echo).
    
    Uses the request's root_path if available (set by uvicorn --root-path option),
    otherwise extracts it from the URL path by finding common route prefixes.
    """
    try:
        scope = getattr(request, "scope", None)
        if scope:
            root_path = scope.get("root_path", "")
            if root_path:
                return root_path
    except (AttributeError, KeyError, TypeError):
        pass
    
    # Fallback: Extract from URL path by looking for known route prefixes
    path = request.url.path
    for prefix in ("/admin", "/api", "/feedback"):
        if prefix in path:
            return path[:path.index(prefix)]
    
    return ""
