"""
SPA Images Backend: Path Template Router
=========================================

What:  Matches an incoming method + path against an ordered table of route
       templates such as "/images/:id" and extracts named path parameters.
How:   Templates and paths are split on "/" and compared segment by segment.
       Segments starting with ":" bind the incoming segment verbatim (no
       decoding, no type coercion); every other segment must be equal.
Who:   routes/images.py registers its handlers on a Router; the catch-all
       dispatch endpoint calls Router.resolve() for every request.

Matching rules:
    - Different HTTP method                → no match
    - Different number of segments         → no match (never an exception)
    - First route in table order that matches wins
    - No route matches                     → caller answers 404

Example:
    >>> match("GET", "/images/:id", "GET", "/images/42")
    RouteMatch(matched=True, params={'id': '42'})
    >>> match("GET", "/images", "GET", "/images/42").matched
    False
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

Handler = Callable[..., Awaitable[Any]]


class RouteMatch(NamedTuple):
    """Outcome of matching one template: the flag and the bound parameters."""
    matched: bool
    params: Dict[str, str]


def _match_segments(
    method: str,
    template_segments: Sequence[str],
    incoming_method: str,
    incoming_path: str,
) -> RouteMatch:
    if incoming_method != method:
        return RouteMatch(False, {})

    path_segments = incoming_path.split("/")
    params: Dict[str, str] = {}

    if len(template_segments) != len(path_segments):
        return RouteMatch(False, params)

    for expected, actual in zip(template_segments, path_segments):
        if expected.startswith(":"):
            # Bound even when a later literal segment ends up not matching
            params[expected[1:]] = actual
        elif expected != actual:
            return RouteMatch(False, params)

    return RouteMatch(True, params)


def match(
    method: str,
    path_template: str,
    incoming_method: str,
    incoming_path: str,
) -> RouteMatch:
    """
    Match a single route template against an incoming request line.

    Args:
        method: HTTP method the template answers to (e.g. "GET")
        path_template: Slash-delimited template, ":name" segments are parameters
        incoming_method: Method of the request
        incoming_path: Path of the request (query string excluded)

    Returns:
        RouteMatch(matched, params). params holds every ":name" segment bound
        before matching stopped, so it can be non-empty on a failed match.
    """
    return _match_segments(method, path_template.split("/"), incoming_method, incoming_path)


@dataclass(frozen=True)
class Route:
    """One entry of the routing table. The template is split once, up front."""
    method: str
    template: str
    handler: Handler
    segments: Tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "segments", tuple(self.template.split("/")))

    def match(self, method: str, path: str) -> RouteMatch:
        return _match_segments(self.method, self.segments, method, path)


class Router:
    """
    Ordered table of routes.

    Usage:
        images = Router()

        @images.route("GET", "/images/:id")
        async def get_image(request, params, db):
            ...

        resolved = images.resolve("GET", "/images/42")
        if resolved is not None:
            handler, params = resolved
    """

    def __init__(self) -> None:
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)

    def add(self, method: str, template: str, handler: Handler) -> Route:
        """Append a route to the end of the table and return it."""
        route = Route(method=method.upper(), template=template, handler=handler)
        self._routes.append(route)
        return route

    def route(self, method: str, template: str) -> Callable[[Handler], Handler]:
        """Decorator form of add()."""

        def decorator(handler: Handler) -> Handler:
            self.add(method, template, handler)
            return handler

        return decorator

    def resolve(self, method: str, path: str) -> Optional[Tuple[Handler, Dict[str, str]]]:
        """
        Find the first route matching method + path.

        Returns:
            (handler, params) for the first match in table order, or None.
        """
        for route in self._routes:
            result = route.match(method, path)
            if result.matched:
                return route.handler, result.params
        return None
