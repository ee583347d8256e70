from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Type

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import SantaError, StoreFailure
from .extensions import db


@contextmanager
def transaction(on_conflict: Optional[Type[SantaError]] = None) -> Iterator[Session]:
    """
    All-or-nothing unit of work on the request's session.

    Commits on success. On any error the session is rolled back and the error
    re-raised; database errors surface as StoreFailure, or as `on_conflict`
    when the database reports a uniqueness violation.
    """
    session = db.session
    try:
        yield session
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if on_conflict is not None:
            raise on_conflict() from e
        logger.exception("integrity error, transaction rolled back")
        raise StoreFailure() from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("store error, transaction rolled back")
        raise StoreFailure() from e
    except Exception:
        session.rollback()
        raise
