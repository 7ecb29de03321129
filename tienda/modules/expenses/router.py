from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Query, status

from tienda.core.config import settings
from tienda.dependencies.dataDependencies import data_store_dependency, schedule_flush
from tienda.dependencies.storeDependencies import OptionalStoreId, StoreId
from tienda.modules.expenses.models import Expense
from tienda.modules.expenses.schemas import ExpenseCategoryCreate, ExpenseCreate, ExpenseList
from tienda.modules.expenses.service import ExpenseService

expenses_router = APIRouter(prefix="/expenses", tags=["Expenses"])


@expenses_router.post("/", response_model=Expense, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: ExpenseCreate,
    store_id: StoreId,
    data: data_store_dependency,
    background_tasks: BackgroundTasks
):
    """Registrar gasto pagado desde la caja (egreso en el libro de caja)"""
    service = ExpenseService(data)
    expense = service.add_expense(service.build_expense(expense_data, store_id))
    schedule_flush(data, background_tasks)
    return expense


@expenses_router.get("/", response_model=ExpenseList)
async def get_expenses(
    store_id: OptionalStoreId,
    data: data_store_dependency,
    category: Optional[str] = Query(None, description="Filtrar por categoría"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Límite de resultados"),
    offset: int = Query(0, ge=0, description="Offset para paginación")
):
    result = ExpenseService(data).get_expenses(store_id=store_id, category=category, limit=limit, offset=offset)
    return ExpenseList(**result)


# ===== CATEGORÍAS =====

@expenses_router.get("/categories", response_model=List[str])
async def get_expense_categories(data: data_store_dependency):
    return ExpenseService(data).get_expense_categories()


@expenses_router.post("/categories", response_model=List[str], status_code=status.HTTP_201_CREATED)
async def add_expense_category(
    category_data: ExpenseCategoryCreate,
    data: data_store_dependency,
    background_tasks: BackgroundTasks
):
    categories = ExpenseService(data).add_expense_category(category_data.name)
    schedule_flush(data, background_tasks)
    return categories


@expenses_router.delete("/categories", response_model=List[str])
async def delete_expense_category(
    data: data_store_dependency,
    background_tasks: BackgroundTasks,
    name: str = Query(..., min_length=1, description="Categoría a eliminar")
):
    categories = ExpenseService(data).delete_expense_category(name)
    schedule_flush(data, background_tasks)
    return categories
