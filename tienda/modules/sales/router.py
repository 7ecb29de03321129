from fastapi import APIRouter, BackgroundTasks, Query, status

from tienda.core.config import settings
from tienda.dependencies.dataDependencies import data_store_dependency, schedule_flush
from tienda.dependencies.storeDependencies import OptionalStoreId, StoreId
from tienda.modules.sales.models import Sale
from tienda.modules.sales.schemas import SaleCreate, SaleList
from tienda.modules.sales.service import SaleService

sales_router = APIRouter(prefix="/sales", tags=["Sales"])


@sales_router.post("/", response_model=Sale, status_code=status.HTTP_201_CREATED)
async def create_sale(
    sale_data: SaleCreate,
    store_id: StoreId,
    data: data_store_dependency,
    background_tasks: BackgroundTasks
):
    """
    Registrar venta.

    - Calcula subtotal, total (subtotal - descuento + envío) y neto del medio de pago
    - Descuenta stock de cada producto vendido
    - Registra el ingreso en el libro de caja por el total bruto
    """
    service = SaleService(data)
    sale = service.add_sale(service.build_sale(sale_data, store_id))
    schedule_flush(data, background_tasks)
    return sale


@sales_router.get("/", response_model=SaleList)
async def get_sales(
    store_id: OptionalStoreId,
    data: data_store_dependency,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Límite de resultados"),
    offset: int = Query(0, ge=0, description="Offset para paginación")
):
    """Listar ventas, más reciente primero"""
    result = SaleService(data).get_sales(store_id=store_id, limit=limit, offset=offset)
    return SaleList(**result)
