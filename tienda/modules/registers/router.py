"""
Router de cajas registradoras

Apertura, cierre con arqueo y consulta de sesiones de caja.
"""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException, Path, Query, status

from tienda.core.config import settings
from tienda.dependencies.dataDependencies import data_store_dependency, schedule_flush
from tienda.dependencies.storeDependencies import OptionalStoreId, StoreId
from tienda.modules.expenses.service import ExpenseService
from tienda.modules.registers.models import CashRegister, CashRegisterStatus
from tienda.modules.registers.schemas import (
    CashRegisterClose, CashRegisterList, CashRegisterOpen, ShiftSummary
)
from tienda.modules.registers.service import CashRegisterService

cash_registers_router = APIRouter(prefix="/cash-registers", tags=["Cash Registers"])


@cash_registers_router.post("/open", response_model=CashRegister, status_code=status.HTTP_201_CREATED)
async def open_cash_register(
    register_data: CashRegisterOpen,
    store_id: StoreId,
    data: data_store_dependency,
    background_tasks: BackgroundTasks
):
    """
    Abrir caja registradora en la tienda.

    - **opening_amount**: Monto base de apertura (>= 0)
    - **opening_notes**: Notas opcionales de apertura

    Validaciones:
    - Solo una caja abierta por tienda (configurable con ENFORCE_SINGLE_OPEN_REGISTER)
    """
    register = CashRegisterService(data).open_cash_register(
        store_id=store_id,
        employee_id=register_data.employee_id,
        opening_amount=register_data.opening_amount,
        opening_notes=register_data.opening_notes
    )
    schedule_flush(data, background_tasks)
    return register


@cash_registers_router.get("/current", response_model=CashRegister)
async def get_current_cash_register(store_id: StoreId, data: data_store_dependency):
    """
    Devuelve la caja abierta actual de la tienda.

    - 404 si no hay caja abierta
    """
    register = CashRegisterService(data).get_current_cash_register(store_id)
    if not register:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No hay caja abierta para esta tienda")
    return register


@cash_registers_router.post("/{register_id}/close", response_model=CashRegister)
async def close_cash_register(
    close_data: CashRegisterClose,
    data: data_store_dependency,
    background_tasks: BackgroundTasks,
    register_id: str = Path(..., description="ID de la caja registradora")
):
    """
    Cerrar caja registradora con arqueo.

    - **closing_amount**: Efectivo contado
    - **expenses_turno**: Gastos del turno que aún no se habían registrado

    Calcula esperado = apertura + ventas - gastos del turno y la diferencia
    contra el conteo. Una caja cerrada no se puede volver a cerrar (409).
    """
    service = CashRegisterService(data)
    register = service.get_cash_register(register_id)

    expense_service = ExpenseService(data)
    adjustment_expenses = [
        expense_service.build_expense(expense_data, register.store_id)
        for expense_data in close_data.expenses_turno
    ]

    closed = service.close_cash_register(
        register_id=register_id,
        closing_amount=close_data.closing_amount,
        adjustment_expenses=adjustment_expenses,
        closing_notes=close_data.closing_notes
    )
    schedule_flush(data, background_tasks)
    return closed


@cash_registers_router.get("/", response_model=CashRegisterList)
async def get_cash_registers(
    store_id: OptionalStoreId,
    data: data_store_dependency,
    status: Optional[CashRegisterStatus] = Query(None, description="Filtrar por estado"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Límite de resultados"),
    offset: int = Query(0, ge=0, description="Offset para paginación")
):
    """
    Listar cajas registradoras con filtros opcionales.

    Ordenamiento: Por fecha de apertura descendente
    """
    result = CashRegisterService(data).get_cash_registers(
        store_id=store_id,
        status=status,
        limit=limit,
        offset=offset
    )
    return CashRegisterList(**result)


@cash_registers_router.get("/{register_id}", response_model=CashRegister)
async def get_cash_register(
    data: data_store_dependency,
    register_id: str = Path(..., description="ID de la caja registradora")
):
    return CashRegisterService(data).get_cash_register(register_id)


@cash_registers_router.get("/{register_id}/summary", response_model=ShiftSummary)
async def get_shift_summary(
    data: data_store_dependency,
    register_id: str = Path(..., description="ID de la caja registradora")
):
    """Arqueo del turno: vista previa si la caja sigue abierta, arqueo final si está cerrada"""
    return CashRegisterService(data).get_shift_summary(register_id)
