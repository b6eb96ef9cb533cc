"""
Access gate: static bearer token check for every non-public route
"""
from fastapi import Request, Response, status
from fastapi.responses import PlainTextResponse

ANY_METHOD = None

# (methods, path) pairs reachable without credentials. A path ending in
# "*" matches any path with that prefix.
PUBLIC_ROUTES = (
    (ANY_METHOD, "/health"),
    (ANY_METHOD, "/"),
    (frozenset({"GET", "HEAD"}), "/*"),
)


def is_public(method: str, path: str) -> bool:
    """True if the request matches an entry of PUBLIC_ROUTES"""
    for methods, template in PUBLIC_ROUTES:
        if methods is not ANY_METHOD and method not in methods:
            continue
        if template.endswith("*"):
            if path.startswith(template[:-1]):
                return True
        elif path == template:
            return True
    return False


def is_authorized(authorization: str | None, token: str) -> bool:
    """Exact match against 'Bearer <token>', nothing else is accepted"""
    return authorization is not None and authorization == f"Bearer {token}"


async def require_bearer_token(request: Request, call_next) -> Response:
    """
    Interceptor rejecting protected requests that lack the bearer token.

    Protected handlers are never invoked for a rejected request.
    """
    if is_public(request.method, request.url.path):
        return await call_next(request)

    token = request.app.state.settings.USER_TOKEN
    if not is_authorized(request.headers.get("authorization"), token):
        return PlainTextResponse(
            "Unauthorized",
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )

    return await call_next(request)
