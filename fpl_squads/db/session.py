# fpl_squads/db/session.py
from typing import Iterator

from fastapi import Request
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from fpl_squads.db.engine import Database


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request) -> Iterator[Session]:
    database = get_database(request)
    db = database.session()
    try:
        yield db
        # read-only routes make this a no-op
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
    finally:
        try:
            db.close()
        except OperationalError:
            # underlying socket already dead; dispose pool to force fresh conns next time
            database.engine.dispose()
