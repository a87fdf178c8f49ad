"""Best-effort side effects that run after a primary write has committed."""
from contextlib import contextmanager
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chirp.logging.setup import get_logger

logger = get_logger(__name__)


@contextmanager
def best_effort(db: Session, warnings: List[str], action: str, **context):
    """
    Run one side-effect unit in its own transaction.

    On success the unit is committed. A store or filesystem failure rolls
    back only this unit, is logged, and is appended to ``warnings``; it is
    never raised to the caller.

    Args:
        db: Database session (the primary write must already be committed)
        warnings: List collecting human-readable warnings for the caller
        action: Short description, e.g. "link hashtags"
        context: Extra structured fields for the log line
    """
    try:
        yield
        db.commit()
    except (SQLAlchemyError, OSError) as exc:
        db.rollback()
        warnings.append(f"failed to {action}: {exc}")
        logger.warning("side_effect_failed", action=action, error=str(exc), **context)
