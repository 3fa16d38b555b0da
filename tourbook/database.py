"""
Transaction helpers shared by the service layer.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tourbook.errors import ConflictError, DatabaseError, TourbookError
from tourbook.extensions import db

logger = logging.getLogger(__name__)

# SQLSTATE for unique_violation (PostgreSQL)
UNIQUE_VIOLATION = '23505'


def _is_unique_violation(exc):
    if getattr(exc.orig, 'pgcode', None) == UNIQUE_VIOLATION:
        return True
    return 'unique' in str(exc.orig).lower()


@contextmanager
def transaction(duplicate_message='Record already exists'):
    """
    Run a unit of work against the session.

    Commits when the block exits normally. Any exception rolls the whole
    unit back; domain errors propagate unchanged, a unique constraint
    violation becomes ConflictError (code DUPLICATE) carrying
    ``duplicate_message``, and other SQLAlchemy errors are re-raised as
    DatabaseError.

    Yields:
        Session: the scoped Flask-SQLAlchemy session
    """
    session = db.session
    try:
        yield session
        session.commit()
    except TourbookError as exc:
        session.rollback()
        logger.debug("Transaction rolled back: %s", exc.message)
        raise
    except IntegrityError as exc:
        session.rollback()
        logger.warning("Transaction rolled back on constraint violation: %s", exc.orig)
        if _is_unique_violation(exc):
            raise ConflictError(duplicate_message, code='DUPLICATE') from exc
        raise DatabaseError('Database error') from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning("Transaction rolled back: %s", exc)
        raise DatabaseError('Database error') from exc
    except Exception:
        session.rollback()
        raise


def get_for_update(model, pk):
    """
    Load a row by primary key and lock it until the transaction ends.

    Databases without row locks (SQLite) ignore the FOR UPDATE clause.
    """
    return (
        db.session.query(model)
        .filter(model.__mapper__.primary_key[0] == pk)
        .with_for_update()
        .populate_existing()
        .first()
    )
