"""Server-side clock helpers.

All "today" and window decisions are taken from the database clock so that
the app server, the scheduler and the stored defaults agree on the date.
"""

from datetime import date, datetime

import sqlalchemy as sa
from sqlalchemy.orm import Session


def server_now(db: Session) -> datetime:
    """Current timestamp according to the database."""
    return db.execute(sa.select(sa.func.now())).scalar_one()


def server_today(db: Session) -> date:
    """Current calendar date according to the database (CURRENT_DATE)."""
    return db.execute(sa.select(sa.func.current_date())).scalar_one()
