# shopapi/repositories/base.py
import functools
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from shopapi.errors import ConflictError, StoreError

logger = logging.getLogger(__name__)


def translate_db_errors(operation: str):
    """Re-raise driver/ORM failures as shop errors carrying the store operation name.

    Integrity violations (unique keys, CHECK constraints, restricted deletes)
    become ConflictError; anything else from SQLAlchemy becomes StoreError.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except IntegrityError as exc:
                logger.info("%s: integrity violation: %s", operation, exc.orig)
                raise ConflictError(f"{operation}: {exc.orig}") from exc
            except SQLAlchemyError as exc:
                logger.error("%s: database failure: %s", operation, exc)
                raise StoreError(f"{operation}: {exc}") from exc
        return wrapper
    return decorator
