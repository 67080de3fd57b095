"""
Blog API — Storage Error Translation
======================================

What:  Converts SQLAlchemy failures into application exceptions.

    IntegrityError  → AlreadyExistsError (400): a unique constraint settled a
                      race the service-level pre-check could not see
    SQLAlchemyError → StorageError (500): anything else from the driver/ORM

The original exception is logged with its context; the client only sees the
application exception's message.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.exceptions import AlreadyExistsError, StorageError

logger = logging.getLogger(__name__)


@contextmanager
def translate_storage_errors(
    operation: str,
    resource: str = "resource",
    field: Optional[str] = None,
) -> Iterator[None]:
    try:
        yield
    except IntegrityError as e:
        logger.warning("Integrity violation during %s: %s", operation, e.orig)
        raise AlreadyExistsError(
            resource=resource,
            field=field,
            context={"operation": operation},
        ) from e
    except SQLAlchemyError as e:
        logger.error("Database error during %s: %s", operation, e, exc_info=True)
        raise StorageError(
            context={"operation": operation, "error_type": type(e).__name__},
        ) from e
