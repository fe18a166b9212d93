"""
SPA Images Backend: Image Payload Validation
=============================================

What:  Checks a candidate image payload and lists every rule it breaks.
How:   Pure functions, no I/O. validate_image() returns a list of
       human-readable messages; an empty list means the payload is valid.
Who:   Called by the POST /images and PUT /images/{id} handlers before any
       write reaches the store.

Rules (checked in this order, all violations reported):
    1. image_url   required string, http://..., https://... or data:image/...
    2. rating      required, must be an integer between 1 and 5
    3. description optional, at most 200 characters (UTF-16 code units)

The payload comes straight from client JSON, so rating may arrive as a
number, a numeric string or a bool. It is coerced the way the SPA's own
JavaScript would coerce it (Number(value)) before the range check.
"""

import math
import re
from typing import Any, List, Mapping, Optional

MAX_DESCRIPTION_LENGTH = 200
MIN_RATING = 1
MAX_RATING = 5

# ── User-facing messages ──────────────────────────────────────────────────
IMAGE_URL_REQUIRED = "L'URL dell'immagine è obbligatorio."
IMAGE_URL_INVALID = (
    "L'URL dell'immagine deve essere valido (http/https) o un'immagine in base64."
)
RATING_REQUIRED = "Il voto è obbligatorio."
RATING_INVALID = "Il voto deve essere un numero intero compreso tra 1 e 5."
DESCRIPTION_TOO_LONG = "La descrizione non può superare i 200 caratteri."

_HTTP_URL = re.compile(r"^https?://.+")
_DATA_IMAGE = re.compile(r"^data:image/.+")
_DECIMAL = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_PREFIXED_INT = re.compile(r"^0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _int_to_float(value: int) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a JSON value to a number the way JavaScript's Number() does.

    Returns:
        The numeric value, or None where JavaScript would produce NaN.

    Examples:
        to_number(4) -> 4.0          to_number("4") -> 4.0
        to_number(" 2.5 ") -> 2.5    to_number("") -> 0.0
        to_number(True) -> 1.0       to_number("abc") -> None
        to_number(None) -> 0.0       to_number([4]) -> None
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, int):
        return _int_to_float(value)
    if isinstance(value, float):
        return None if math.isnan(value) else value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if text in ("Infinity", "+Infinity"):
            return math.inf
        if text == "-Infinity":
            return -math.inf
        if _DECIMAL.match(text):
            return float(text)
        if _PREFIXED_INT.match(text):
            return _int_to_float(int(text, 0))
        return None
    # Arrays and objects never make a usable rating
    return None


def parse_int(value: Optional[str]) -> Optional[int]:
    """
    Parse a path parameter the way JavaScript's parseInt(value) does.

    Leading whitespace and an optional sign are accepted, then as many
    decimal digits as are present; trailing characters are ignored.

    Returns:
        The integer, or None when no digits lead the string ("not a number").

    Examples:
        parse_int("42") -> 42     parse_int("42abc") -> 42
        parse_int(" -3") -> -3    parse_int("abc") -> None
    """
    if value is None:
        return None
    found = _LEADING_INT.match(value)
    if found is None:
        return None
    return int(found.group(1))


def utf16_length(text: str) -> int:
    """Length in UTF-16 code units, as the browser counts it. Astral characters count twice."""
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


def is_valid_image_url(value: str) -> bool:
    """True for http://, https:// and data:image/ URLs with something after the prefix."""
    return bool(_HTTP_URL.match(value) or _DATA_IMAGE.match(value))


def validate_image(payload: Any) -> List[str]:
    """
    Validate an image payload.

    Args:
        payload: Decoded JSON body. Anything other than a JSON object is
                 validated as an empty object.

    Returns:
        List of error messages in the order url, rating, description.
        Empty when the payload is valid.
    """
    data: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
    errors: List[str] = []

    # ── image_url ─────────────────────────────────────────────────────────
    image_url = data.get("image_url")
    if not image_url or not isinstance(image_url, str):
        errors.append(IMAGE_URL_REQUIRED)
    elif not is_valid_image_url(image_url):
        errors.append(IMAGE_URL_INVALID)

    # ── rating ────────────────────────────────────────────────────────────
    if data.get("rating") is None:
        errors.append(RATING_REQUIRED)
    else:
        rating = to_number(data["rating"])
        if (
            rating is None
            or not math.isfinite(rating)
            or not rating.is_integer()
            or rating < MIN_RATING
            or rating > MAX_RATING
        ):
            errors.append(RATING_INVALID)

    # ── description ───────────────────────────────────────────────────────
    description = data.get("description")
    if description and isinstance(description, str):
        if utf16_length(description) > MAX_DESCRIPTION_LENGTH:
            errors.append(DESCRIPTION_TOO_LONG)

    return errors
