import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from ...dependencies import get_db

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger(__name__)

@router.get("/live")
def live():
    return {"status": "ok"}

@router.get("/ready")
def ready(db: Session = Depends(get_db)):
    """Listo solo si la base de datos responde."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Base de datos no disponible: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail="Base de datos no disponible") from e
    return {"status": "ok", "database": "ok"}
