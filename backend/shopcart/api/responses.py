import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException

from shopcart.services.exceptions import ServiceException

log = logging.getLogger("shopcart.api")


def success(message: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"message": message, "data": data or {}}


def failure(exc: Exception, fallback: str) -> HTTPException:
    """
    Map an exception raised below the route into the HTTP error to raise.
    Unexpected errors are logged and reported with the generic `fallback` text.
    """
    if isinstance(exc, ServiceException):
        return HTTPException(status_code=exc.status_code, detail=str(exc))
    log.error("%s: %s: %s", fallback, type(exc).__name__, exc, exc_info=exc)
    return HTTPException(status_code=500, detail=fallback)
