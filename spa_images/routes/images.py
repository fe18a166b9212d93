"""
SPA Images Backend: Image Route Handlers
=========================================

What:  The /images CRUD surface used by the SPA.
How:   A single catch-all FastAPI endpoint hands every request to the
       ordered `image_routes` table (see router.py). The matched handler
       reads and validates the body where needed, calls ImageService and
       turns the outcome into a status code and JSON body.

Route Inventory (table order, first match wins):
    GET     /images        → 200 JSON array
    POST    /images        → 201 {"ok": true} | 400 {"errori": [...]}
    GET     /images/:id    → 200 image | 404 empty
    PUT     /images/:id    → 204 empty | 400 {"errori": [...]} | 404 empty
    DELETE  /images/:id    → 204 empty | 404 empty
    anything else          → 404 empty

Error responses are produced by the global exception handlers in main.py
(ValidationError, StorageFailureError, NotFoundError, DatabaseError).
OPTIONS never gets here; the CORS middleware answers it.
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from spa_images.database import get_db_session
from spa_images.exceptions import NotFoundError, StorageFailureError, ValidationError
from spa_images.router import Router
from spa_images.schemas.image import CreatedResponse, ImageResponse
from spa_images.services.image_service import image_service
from spa_images.services.validation import parse_int, validate_image

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"

# Methods forwarded to the route table. Other methods raise 405 in routing,
# which main.py answers with the same empty 404.
DISPATCH_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD"]

router = APIRouter(tags=["Images"])

image_routes = Router()


def empty_response(status_code: int) -> Response:
    """Response with no body that still declares a JSON content type."""
    return Response(status_code=status_code, media_type=JSON_MEDIA_TYPE)


async def read_json_body(request: Request) -> Any:
    """
    Read the whole request body and decode it as JSON.

    The body is collected as raw bytes first and decoded once, so UTF-8
    sequences split across network chunks stay intact. A body that is not
    valid UTF-8 or not valid JSON (an empty body included) decodes to {}.
    """
    raw = await request.body()
    try:
        return json.loads(raw.decode("utf-8"))
    except ValueError:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        logger.debug("Malformed JSON body on %s %s, using {}", request.method, request.url.path)
        return {}


def raw_request_path(request: Request) -> str:
    """
    Path as it arrived on the wire, percent-escapes intact, query excluded.

    Starlette's request.url.path is already decoded, which would turn
    "/images%2F1" into two segments.
    """
    raw_path = request.scope.get("raw_path")
    if raw_path is None:
        return request.url.path
    return raw_path.decode("latin-1").split("?", 1)[0]


def _ensure_valid(payload: Any, request: Request) -> None:
    errors = validate_image(payload)
    if errors:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, errors)
        raise ValidationError(errors)


# ══════════════════════════════════════════════════════════════════════════
# Route table
# ══════════════════════════════════════════════════════════════════════════

@image_routes.route("GET", "/images")
async def list_images(request: Request, params: Dict[str, str], db: AsyncSession) -> Response:
    images = await image_service.list_images(db)
    return JSONResponse(
        content=[ImageResponse.model_validate(image).model_dump() for image in images]
    )


@image_routes.route("POST", "/images")
async def create_image(request: Request, params: Dict[str, str], db: AsyncSession) -> Response:
    """Validate the body, then insert it. Storage failure is reported as a 400."""
    payload = await read_json_body(request)
    _ensure_valid(payload, request)

    if not await image_service.create_image(db, payload):
        raise StorageFailureError()

    return JSONResponse(status_code=201, content=CreatedResponse().model_dump())


@image_routes.route("GET", "/images/:id")
async def get_image(request: Request, params: Dict[str, str], db: AsyncSession) -> Response:
    image = await image_service.get_image(db, parse_int(params["id"]))
    if image is None:
        raise NotFoundError(resource="image", resource_id=params["id"])
    return JSONResponse(content=ImageResponse.model_validate(image).model_dump())


@image_routes.route("PUT", "/images/:id")
async def update_image(request: Request, params: Dict[str, str], db: AsyncSession) -> Response:
    """
    Full replace of an image.

    A missing id and a failed update both answer 404; the store does not
    tell them apart.
    """
    image_id = parse_int(params["id"])
    payload = await read_json_body(request)
    _ensure_valid(payload, request)

    if not await image_service.update_image(db, image_id, payload):
        raise NotFoundError(resource="image", resource_id=params["id"])

    return empty_response(204)


@image_routes.route("DELETE", "/images/:id")
async def delete_image(request: Request, params: Dict[str, str], db: AsyncSession) -> Response:
    if not await image_service.delete_image(db, parse_int(params["id"])):
        raise NotFoundError(resource="image", resource_id=params["id"])
    return empty_response(204)


# ══════════════════════════════════════════════════════════════════════════
# Dispatch endpoint
# ══════════════════════════════════════════════════════════════════════════

@router.api_route(
    "/{full_path:path}",
    methods=DISPATCH_METHODS,
    include_in_schema=False,
)
async def dispatch(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """
    Resolve the request against `image_routes` and run the matching handler.

    The session comes from get_db_session, so it is closed on every exit
    path, exceptions included.
    """
    resolved = image_routes.resolve(request.method, raw_request_path(request))
    if resolved is None:
        return empty_response(404)

    handler, params = resolved
    return await handler(request, params, db)
