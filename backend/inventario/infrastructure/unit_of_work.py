from contextlib import contextmanager
from sqlalchemy.orm import Session
from ..db import SessionLocal
from .repositories import ProductoRepository, MovimientoRepository, HistorialRepository

class UnitOfWork:
    def __init__(self, db: Session = None):
        # Si la sesión viene de fuera (request), su dueño la cierra
        self._owns_session = db is None
        self.db: Session = db if db is not None else SessionLocal()
        self.productos = ProductoRepository(self.db)
        self.movimientos = MovimientoRepository(self.db)
        self.historial = HistorialRepository(self.db)

    def commit(self): self.db.commit()
    def rollback(self): self.db.rollback()
    def close(self): self.db.close()

    @contextmanager
    def transaction(self):
        try:
            yield self
            self.commit()
        except Exception:
            self.rollback()
            raise
        finally:
            if self._owns_session:
                self.close()
