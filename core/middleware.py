"""
Request interceptors and the pipeline that installs them

An interceptor is an async callable (request, call_next) -> response.
"""
from collections.abc import Awaitable, Callable, Sequence

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from core.logger import logger

SERVER_NAME = "Egami"

Interceptor = Callable[
    [Request, Callable[[Request], Awaitable[Response]]], Awaitable[Response]
]


async def stamp_server_header(request: Request, call_next) -> Response:
    response = await call_next(request)
    response.headers["Server"] = SERVER_NAME
    return response


async def log_request(request: Request, call_next) -> Response:
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


def install_interceptors(app: FastAPI, interceptors: Sequence[Interceptor]) -> None:
    """
    Wrap the app in the given interceptors.

    The first interceptor is the outermost, so requests pass through them
    in list order before reaching the router.
    """
    # add_middleware pushes onto the front of the stack
    for interceptor in reversed(interceptors):
        app.add_middleware(BaseHTTPMiddleware, dispatch=interceptor)
