from typing import Iterator
from sqlalchemy.orm import Session
from .db import SessionLocal


def get_db() -> Iterator[Session]:
    """Sesión por request; se cierra siempre al terminar."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
