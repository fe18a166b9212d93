"""
SPA Images Backend: Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the error outcomes of the API.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return JSON responses with the matching HTTP status code.
Who:   Raised by the image route handlers and the storage service.

Exception Hierarchy:
    SpaImagesError (base)
    ├── ValidationError       → 400 {"errori": [...]}
    ├── StorageFailureError   → 400 {"errori": [<generic message>]}
    ├── NotFoundError         → 404, empty body
    └── DatabaseError         → 500 generic message
"""

from typing import Any, Dict, List, Optional


class SpaImagesError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SpaImagesError):
    """
    Raised when an image payload breaks one or more field rules.

    What:    Carries every rule violation, not only the first one.
    HTTP:    400 Bad Request, body {"errori": [...messages]}

    Example response:
        {
            "errori": [
                "L'URL dell'immagine è obbligatorio.",
                "Il voto è obbligatorio."
            ]
        }
    """

    def __init__(
        self,
        errors: List[str],
        context: Optional[Dict[str, Any]] = None,
    ):
        self.errors = list(errors)
        super().__init__(message="; ".join(self.errors) or "Validation failed", context=context)


class StorageFailureError(SpaImagesError):
    """
    Raised when the store could not save a new image.

    HTTP:    400 Bad Request with a single generic message in "errori".
             The underlying driver error is logged by the storage service,
             never returned.
    """

    def __init__(
        self,
        message: str = "Errore nel salvataggio del database (verificare log backend)",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SpaImagesError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE /images/{id} that matches no record (for PUT and
             DELETE also when the store failed), or no route matches.
    HTTP:    404 Not Found with an empty body.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(SpaImagesError):
    """
    Raised when a read the API cannot do without fails (listing images).

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Driver details are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
