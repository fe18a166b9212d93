"""
SPA Images Backend: CORS Middleware
====================================

What:  Adds the same three CORS headers to every response and answers
       every OPTIONS request itself with 204 and no body.
How:   Starlette BaseHTTPMiddleware. OPTIONS never reaches the routes, for
       any path, with or without preflight headers.
Who:   Outermost application concern for the SPA, which is served from a
       different origin (often file://).

Headers:
    Access-Control-Allow-Origin:  *
    Access-Control-Allow-Methods: GET, POST, PUT, DELETE, OPTIONS
    Access-Control-Allow-Headers: Content-Type

Starlette's CORSMiddleware is not used: it answers only real preflight
requests (those with Access-Control-Request-Method) and replies 200 with a
text body.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def add_cors_headers(response: Response) -> Response:
    """Set the CORS headers on a response and return it."""
    response.headers.update(CORS_HEADERS)
    return response


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Sets CORS headers on all responses; short-circuits OPTIONS with 204."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            return add_cors_headers(Response(status_code=204))

        response = await call_next(request)
        return add_cors_headers(response)
