"""Header middleware applied to every request before routing."""

from fastapi import FastAPI, Request, Response

from core.headers import CORS_HEADERS, SECURITY_HEADERS


def register_middleware(app: FastAPI) -> None:
    """Install CORS and security header middleware.

    Middleware added last runs first, so security headers wrap CORS handling
    and are also present on short-circuited preflight responses. Headers
    already set by a backend response are kept as relayed.
    """

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)
        for key, value in CORS_HEADERS.items():
            response.headers.setdefault(key, value)
        return response

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        response = await call_next(request)
        for key, value in SECURITY_HEADERS.items():
            response.headers.setdefault(key, value)
        return response
