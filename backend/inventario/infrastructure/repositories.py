from datetime import date, datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import select, update, delete
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, joinedload
from ..domain.enums import TipoMovimiento
from ..domain.models import Producto, Movimiento, Historial

class ProductoRepository:
    def __init__(self, db: Session): self.db = db
    def get(self, id: int) -> Optional[Producto]: return self.db.get(Producto, id)
    def by_codigo(self, codigo: str) -> Optional[Producto]:
        return self.db.query(Producto).filter(Producto.codigo == codigo).first()

    def get_for_update(self, id: int) -> Optional[Producto]:
        """Lee el producto bloqueando la fila hasta el fin de la transacción (no-op en SQLite)."""
        stmt = select(Producto).where(Producto.id == id).with_for_update().execution_options(populate_existing=True)
        return self.db.execute(stmt).scalars().first()

    def aplicar_movimiento(self, id: int, tipo: TipoMovimiento, cantidad: int) -> bool:
        """
        Actualiza el stock con un único UPDATE condicional.
        SALIDA solo afecta la fila si stock >= cantidad. Devuelve False si no se tocó ninguna fila.
        """
        stmt = update(Producto).where(Producto.id == id)
        if tipo == TipoMovimiento.ENTRADA:
            stmt = stmt.values(stock=Producto.stock + cantidad)
        elif tipo == TipoMovimiento.SALIDA:
            stmt = stmt.where(Producto.stock >= cantidad).values(stock=Producto.stock - cantidad)
        else:
            stmt = stmt.values(stock=cantidad)
        stmt = stmt.values(updated_at=datetime.now()).execution_options(synchronize_session=False)
        return self.db.execute(stmt).rowcount == 1

class MovimientoRepository:
    def __init__(self, db: Session): self.db = db
    def add(self, m: Movimiento): self.db.add(m); return m

    def list(
        self,
        producto_id: Optional[int] = None,
        tipo: Optional[TipoMovimiento] = None,
        desde: Optional[datetime] = None,
        hasta: Optional[datetime] = None,
        limit: Optional[int] = 100,
    ) -> List[Movimiento]:
        q = self.db.query(Movimiento).options(joinedload(Movimiento.producto))
        if producto_id:
            q = q.filter(Movimiento.producto_id == producto_id)
        if tipo:
            q = q.filter(Movimiento.tipo == tipo)
        if desde:
            q = q.filter(Movimiento.created_at >= desde)
        if hasta:
            q = q.filter(Movimiento.created_at <= hasta)
        q = q.order_by(Movimiento.created_at.desc(), Movimiento.id.desc())
        if limit:
            q = q.limit(limit)
        return q.all()

    def delete_por_producto(self, producto_id: int) -> int:
        stmt = delete(Movimiento).where(Movimiento.producto_id == producto_id).execution_options(synchronize_session=False)
        return self.db.execute(stmt).rowcount

class HistorialRepository:
    def __init__(self, db: Session): self.db = db
    def by_fecha(self, fecha: date) -> Optional[Historial]:
        return self.db.query(Historial).filter(Historial.fecha == fecha).first()

    def ultimos(self, n: int = 30) -> List[Historial]:
        """Últimos n días, en orden cronológico ascendente."""
        rows = self.db.query(Historial).order_by(Historial.fecha.desc()).limit(n).all()
        return list(reversed(rows))

    def upsert(self, fecha: date, valores: Dict[str, Any]) -> None:
        """INSERT ... ON CONFLICT (fecha) DO UPDATE; lectura-escritura en otros motores."""
        dialect = self.db.get_bind().dialect.name
        if dialect in ("postgresql", "sqlite"):
            insert_fn = pg_insert if dialect == "postgresql" else sqlite_insert
            stmt = insert_fn(Historial).values(fecha=fecha, created_at=datetime.now(), **valores)
            stmt = stmt.on_conflict_do_update(index_elements=["fecha"], set_=valores)
            self.db.execute(stmt)
            return
        row = self.by_fecha(fecha)
        if row is None:
            self.db.add(Historial(fecha=fecha, **valores))
        else:
            for k, v in valores.items():
                setattr(row, k, v)
