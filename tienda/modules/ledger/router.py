from datetime import datetime
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Query, status

from tienda.common.csv_export import create_csv_response
from tienda.core.config import settings
from tienda.dependencies.dataDependencies import data_store_dependency, schedule_flush
from tienda.dependencies.storeDependencies import OptionalStoreId, StoreId
from tienda.modules.ledger.models import CashMovement, MovementType
from tienda.modules.ledger.schemas import CashMovementCreate, CashMovementList
from tienda.modules.ledger.service import CashMovementService

cash_movements_router = APIRouter(prefix="/cash-movements", tags=["Cash Movements"])

MOVEMENT_CSV_HEADERS = {
    "date": "Fecha",
    "type": "Tipo",
    "amount": "Monto",
    "description": "Descripción",
    "employee_id": "Empleado",
    "store_id": "Tienda",
    "reference_id": "Referencia",
    "id": "ID"
}


@cash_movements_router.post("/", response_model=CashMovement, status_code=status.HTTP_201_CREATED)
async def create_cash_movement(
    movement_data: CashMovementCreate,
    store_id: StoreId,
    data: data_store_dependency,
    background_tasks: BackgroundTasks
):
    """
    Registrar movimiento manual de caja.

    - **amount**: siempre positivo; los movimientos tipo expense se guardan con signo negativo

    Nota: Las ventas, gastos, abonos y aperturas/cierres generan su movimiento automáticamente
    """
    service = CashMovementService(data)
    movement = service.add_cash_movement(service.build_movement(movement_data, store_id))
    schedule_flush(data, background_tasks)
    return movement


@cash_movements_router.get("/", response_model=CashMovementList)
async def get_cash_movements(
    store_id: OptionalStoreId,
    data: data_store_dependency,
    type: Optional[MovementType] = Query(None, description="Filtrar por tipo"),
    cash_register_id: Optional[str] = Query(None, description="Movimientos del turno de una caja"),
    start: Optional[datetime] = Query(None, description="Desde (inclusive)"),
    end: Optional[datetime] = Query(None, description="Hasta (inclusive)"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Límite de resultados"),
    offset: int = Query(0, ge=0, description="Offset para paginación")
):
    """
    Listar movimientos de caja con filtros opcionales.

    Incluye resumen por tipo de movimiento
    Ordenamiento: Por fecha descendente
    """
    result = CashMovementService(data).get_movements(
        store_id=store_id,
        type=type,
        register_id=cash_register_id,
        start=start,
        end=end,
        limit=limit,
        offset=offset
    )
    return CashMovementList(**result)


@cash_movements_router.get("/export")
async def export_cash_movements(
    store_id: OptionalStoreId,
    data: data_store_dependency,
    type: Optional[MovementType] = Query(None, description="Filtrar por tipo"),
    cash_register_id: Optional[str] = Query(None, description="Movimientos del turno de una caja"),
    start: Optional[datetime] = Query(None, description="Desde (inclusive)"),
    end: Optional[datetime] = Query(None, description="Hasta (inclusive)")
):
    """Exportar movimientos de caja a CSV"""
    service = CashMovementService(data)
    result = service.get_movements(
        store_id=store_id,
        type=type,
        register_id=cash_register_id,
        start=start,
        end=end,
        limit=len(data.ledger) or 1,
        offset=0
    )
    return create_csv_response(
        service.export_rows(result["movements"]),
        "movimientos_caja.csv",
        MOVEMENT_CSV_HEADERS
    )
