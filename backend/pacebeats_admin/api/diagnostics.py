import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pacebeats_admin.api.sessions import SESSION_CHILD_MODELS
from pacebeats_admin.db import get_db
from pacebeats_admin.models.running_session import RunningSession
from pacebeats_admin.models.user import User
from pacebeats_admin.schemas.analytics import DiagnosticsResponse, TableCheck

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/diagnostics", tags=["diagnostics"])

CHECKED_MODELS = (User, RunningSession, *SESSION_CHILD_MODELS)


@router.get("", response_model=DiagnosticsResponse)
def check_database_structure(db: Session = Depends(get_db)):
    """Report which tables the admin connection can read.

    Each failing table is reported in the response instead of failing the
    request, so one call shows the whole picture.
    """
    checks: list[TableCheck] = []
    for model in CHECKED_MODELS:
        table = model.__tablename__
        try:
            rows = db.query(func.count()).select_from(model).scalar()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Cannot read %s: %s", table, exc)
            checks.append(TableCheck(table=table, accessible=False, error=str(getattr(exc, "orig", None) or exc)))
            continue
        checks.append(TableCheck(table=table, accessible=True, rows=rows))

    ok = all(c.accessible for c in checks)
    logger.info("Database check finished: %s", "all tables readable" if ok else "some tables unreadable")
    return DiagnosticsResponse(ok=ok, tables=checks)
