"""Transaction helpers shared by the service layer."""

from sqlalchemy.exc import SQLAlchemyError

from gatehunt import db
from gatehunt.errors import Internal
from gatehunt.logging_utils import get_logger

log = get_logger("tx")


def commit(event: str, **fields):
    """Commit the session; on database failure roll back and raise ``Internal``.

    ``event``/``fields`` identify the operation in the error log. The raw
    driver message is logged but never returned to callers.
    """
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        log.error(event=f"{event}_failed", error=str(e), **fields)
        raise Internal() from e
