"""
Store call wrapper - Translate unexpected store failures into InternalError.
"""

import logging
from typing import Awaitable, TypeVar
from venue_auth.errors import AuthError, InternalError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def store_call(awaitable: Awaitable[T], action: str) -> T:
    """
    Await a credential store call once.

    AuthErrors raised by the store (e.g. ConflictError) pass through.
    Anything else is logged with its traceback and re-raised as a generic
    InternalError. No retry: a repeated write may duplicate side effects.
    """
    try:
        return await awaitable
    except AuthError:
        raise
    except Exception as exc:
        logger.exception("Credential store failure during %s", action)
        raise InternalError() from exc
