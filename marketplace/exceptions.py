from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


class MarketplaceError(Exception):
    """Base class for errors raised by the catalog and image stores."""

    status_code: int = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidRequest(MarketplaceError):
    """Malformed or missing input, traversal attempt, disallowed suffix."""

    status_code = 400


class NotFound(MarketplaceError):
    status_code = 404


class PersistenceError(MarketplaceError):
    """The relational store failed underneath an operation."""


class StorageError(MarketplaceError):
    """The blob directory could not be written."""


class SchemaError(MarketplaceError):
    """The catalog tables could not be provisioned."""


def create_error_response(error_message: str, status_code: int = 400) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )


async def marketplace_exception_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    """Map the store error taxonomy onto HTTP status codes"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )
