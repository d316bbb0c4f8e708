"""Translation of driver-level failures into application errors."""
import functools
import logging
from typing import Callable
from sqlalchemy.exc import OperationalError, InterfaceError, SQLAlchemyError
from app.core.exceptions import UnavailableError

logger = logging.getLogger(__name__)


def translate_db_errors(method: Callable):
    """
    Decorator for async store methods.

    Connection-level failures (database down, pool exhausted, dropped socket)
    surface as UnavailableError. The store's session is rolled back first so
    it stays usable for the rest of the request. Nothing is retried here;
    retry policy belongs to the caller.
    """
    @functools.wraps(method)
    async def wrapper(*args, **kwargs):
        try:
            return await method(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            logger.error(f"Storage unavailable in {method.__qualname__}: {e}")
            session = getattr(args[0], "session", None) if args else None
            if session is not None:
                try:
                    await session.rollback()
                except SQLAlchemyError as rollback_error:
                    logger.warning(f"Rollback after storage failure failed: {rollback_error}")
            raise UnavailableError("Storage is temporarily unavailable") from e

    return wrapper
