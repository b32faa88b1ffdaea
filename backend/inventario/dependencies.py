from typing import Iterator
from sqlalchemy.orm import Session, sessionmaker

from .db import SessionLocal


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> sessionmaker:
    """Fábrica de sesiones para trabajo que no vive en la sesión del request (consultas paralelas, tareas en segundo plano)."""
    return SessionLocal
