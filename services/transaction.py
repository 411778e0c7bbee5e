from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from services.errors import EngineError, StorageError
from utils.logger import setup_logger

logger = setup_logger(__name__)

T = TypeVar("T")


def run_atomic(db_session: Session, operation: Callable[[], T], action: str, **context: Any) -> T:
    """
    Run ``operation`` and commit it as one unit.

    A unique-constraint violation means another request inserted the same
    row between our read and our write; the transaction is rolled back and
    the operation re-applied once against the committed state. Any other
    database failure rolls back and surfaces as ``StorageError``.
    """
    for attempt in (1, 2):
        try:
            result = operation()
            db_session.commit()
            return result
        except IntegrityError as exc:
            db_session.rollback()
            if attempt == 1:
                logger.warning(
                    f"Concurrent write during {action}, re-applying",
                    extra={"action": action, **context}
                )
                continue
            logger.error(f"{action} failed after retry", extra={"action": action, **context})
            raise StorageError(f"{action} could not be applied: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            db_session.rollback()
            logger.error(f"{action} failed", exc_info=True, extra={"action": action, **context})
            raise StorageError(f"{action} failed: {exc}") from exc
        except EngineError:
            db_session.rollback()
            raise
    raise StorageError(f"{action} could not be applied")


@contextmanager
def storage_guard(action: str, **context: Any) -> Iterator[None]:
    """Surface database failures on read paths as ``StorageError``."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(f"{action} failed", exc_info=True, extra={"action": action, **context})
        raise StorageError(f"{action} failed: {exc}") from exc
