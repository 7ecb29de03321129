from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Path, Query, status

from tienda.core.config import settings
from tienda.dependencies.dataDependencies import data_store_dependency, schedule_flush
from tienda.dependencies.storeDependencies import OptionalStoreId, StoreId
from tienda.modules.layaways.models import Layaway, LayawayStatus
from tienda.modules.layaways.schemas import LayawayCreate, LayawayList, LayawayPaymentCreate
from tienda.modules.layaways.service import LayawayService

layaways_router = APIRouter(prefix="/layaways", tags=["Layaways"])


@layaways_router.post("/", response_model=Layaway, status_code=status.HTTP_201_CREATED)
async def create_layaway(
    layaway_data: LayawayCreate,
    store_id: StoreId,
    data: data_store_dependency,
    background_tasks: BackgroundTasks
):
    """
    Crear separado.

    - La mercancía se descuenta del stock al crear el separado
    - El abono inicial (si existe) entra a caja como ingreso
    """
    layaway = LayawayService(data).create_layaway(layaway_data, store_id)
    schedule_flush(data, background_tasks)
    return layaway


@layaways_router.get("/", response_model=LayawayList)
async def get_layaways(
    store_id: OptionalStoreId,
    data: data_store_dependency,
    status: Optional[LayawayStatus] = Query(None, description="Filtrar por estado"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Límite de resultados"),
    offset: int = Query(0, ge=0, description="Offset para paginación")
):
    result = LayawayService(data).get_layaways(store_id=store_id, status=status, limit=limit, offset=offset)
    return LayawayList(**result)


@layaways_router.get("/{layaway_id}", response_model=Layaway)
async def get_layaway(
    data: data_store_dependency,
    layaway_id: str = Path(..., description="ID del separado")
):
    return LayawayService(data).get_layaway(layaway_id)


@layaways_router.post("/{layaway_id}/payments", response_model=Layaway, status_code=status.HTTP_201_CREATED)
async def add_layaway_payment(
    payment_data: LayawayPaymentCreate,
    data: data_store_dependency,
    background_tasks: BackgroundTasks,
    layaway_id: str = Path(..., description="ID del separado")
):
    """
    Registrar abono a un separado.

    - 404 si el separado no existe
    - 409 si el separado ya está pagado
    - Con saldo <= 0 el separado pasa a COMPLETED
    """
    service = LayawayService(data)
    layaway = service.add_layaway_payment(layaway_id, service.build_payment(payment_data))
    schedule_flush(data, background_tasks)
    return layaway
