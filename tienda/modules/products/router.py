from fastapi import APIRouter, BackgroundTasks, Path, Query, status

from tienda.dependencies.dataDependencies import data_store_dependency, schedule_flush
from tienda.dependencies.storeDependencies import OptionalStoreId, StoreId
from tienda.modules.products.models import Product
from tienda.modules.products.schemas import ProductCreate, ProductList, ProductUpdate
from tienda.modules.products.service import ProductService

product_router = APIRouter(prefix="/products", tags=["Products"])


@product_router.post("/", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    store_id: StoreId,
    data: data_store_dependency,
    background_tasks: BackgroundTasks
):
    """Crear producto en la tienda"""
    product = ProductService(data).add_product(Product(store_id=store_id, **product_data.model_dump()))
    schedule_flush(data, background_tasks)
    return product


@product_router.get("/", response_model=ProductList)
async def list_products(
    store_id: OptionalStoreId,
    data: data_store_dependency,
    low_stock: bool = Query(False, description="Sólo productos con stock <= mínimo")
):
    products = ProductService(data).get_products(store_id=store_id, low_stock=low_stock)
    return ProductList(products=products, total_count=len(products))


@product_router.get("/{product_id}", response_model=Product)
async def get_product(
    data: data_store_dependency,
    product_id: str = Path(..., description="ID del producto")
):
    return ProductService(data).get_product(product_id)


@product_router.put("/{product_id}", response_model=Product)
async def update_product(
    product_data: ProductUpdate,
    data: data_store_dependency,
    background_tasks: BackgroundTasks,
    product_id: str = Path(..., description="ID del producto")
):
    """Actualizar producto (sólo los campos enviados)"""
    service = ProductService(data)
    current = service.get_product(product_id)
    product = service.update_product(current.model_copy(update=product_data.model_dump(exclude_unset=True)))
    schedule_flush(data, background_tasks)
    return product
