from fastapi import APIRouter, Depends

from fpl_squads.db.engine import Database
from fpl_squads.db.session import get_database

router = APIRouter(tags=["setup"])


@router.post("/setup")
def setup_database(database: Database = Depends(get_database)):
    """Creates any missing tables. Safe to call repeatedly."""
    database.ping()
    tables = database.create_tables()
    return {"message": "Database setup completed successfully", "tables": tables}
