from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import sessionmaker

from ...application.dtos import DashboardOut
from ...application.services_dashboard import DashboardService
from ...dependencies import get_session_factory
from ...security.auth import get_token_usuario

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardOut, dependencies=[Depends(get_token_usuario)])
def get_dashboard(
    background_tasks: BackgroundTasks,
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    Resumen, alertas de stock bajo, últimos movimientos, productos por
    categoría e historial de 30 días. La foto diaria de hoy, si falta, se
    guarda después de responder.
    """
    service = DashboardService(session_factory)
    dashboard, snapshot = service.obtener_estadisticas()
    if snapshot is not None:
        background_tasks.add_task(service.guardar_snapshot, snapshot)
    return dashboard
