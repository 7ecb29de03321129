"""
Servicio de cajas registradoras (gestor de sesiones)

Máquina de estados por tienda: closed -> open -> closed -> open ...
Cada sesión es una instancia independiente.

Arqueo al cerrar:
    esperado   = apertura + ventas del turno - gastos del turno
    diferencia = contado - esperado   (+ sobrante, - faltante)

El turno es la ventana [opened_at, ahora] e incluye ambos extremos.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from tienda.common.exceptions import (
    InvalidAmountError, InvalidStateError,
    RegisterAlreadyOpenError, RegisterNotFoundError
)
from tienda.core.data import PosDataStore
from tienda.modules.expenses.models import Expense
from tienda.modules.expenses.service import ExpenseService
from tienda.modules.ledger.recorder import record_register_close, record_register_open
from tienda.modules.registers.models import CashRegister, CashRegisterStatus
from tienda.modules.registers.schemas import ShiftSummary
from tienda.modules.sales.models import Sale

logger = logging.getLogger(__name__)


@dataclass
class ShiftTotals:
    sales: List[Sale]
    expenses: List[Expense]

    @property
    def sales_total(self) -> Decimal:
        return sum((s.total for s in self.sales), Decimal("0"))

    @property
    def expenses_total(self) -> Decimal:
        return sum((e.amount for e in self.expenses), Decimal("0"))


class CashRegisterService:
    """Servicio para apertura, cierre y arqueo de cajas"""

    def __init__(self, data: PosDataStore):
        self.data = data

    def open_cash_register(self, store_id: str, employee_id: str, opening_amount: Decimal,
                           opening_notes: Optional[str] = None) -> CashRegister:
        """Abrir caja registradora"""
        if opening_amount < 0:
            raise InvalidAmountError("El monto de apertura no puede ser negativo")

        # Verificar que no hay otra caja abierta en la misma tienda
        existing_open = self.get_current_cash_register(store_id)
        if existing_open:
            if self.data.enforce_single_open_register:
                raise RegisterAlreadyOpenError(f"Ya existe una caja abierta en la tienda '{store_id}'")
            logger.warning(
                f"Opening a second register in store {store_id} while {existing_open.id} is open; "
                f"shift windows will overlap"
            )

        register = CashRegister(
            store_id=store_id,
            employee_id=employee_id,
            opening_amount=opening_amount,
            opened_at=self.data.clock.now(),
            opening_notes=opening_notes
        )

        self.data.cash_registers[register.id] = register
        self.data.persist("cash_registers")
        self.data.append_movement(record_register_open(register))

        logger.info(f"Caja abierta: {register.id} en tienda {store_id} con {opening_amount}")
        return register

    def close_cash_register(self, register_id: str, closing_amount: Decimal,
                            adjustment_expenses: Optional[List[Expense]] = None,
                            closing_notes: Optional[str] = None) -> CashRegister:
        """
        Cerrar caja registradora con arqueo.

        Los gastos de ajuste (gastos del turno informados al cerrar) se
        registran primero, omitiendo los que ya existen por id. La caja sólo
        se puede cerrar una vez: un segundo cierre falla y no recalcula.
        """
        register = self.get_cash_register(register_id)

        if register.status == CashRegisterStatus.CLOSED:
            raise InvalidStateError("La caja ya está cerrada")
        if closing_amount < 0:
            raise InvalidAmountError("El monto de cierre no puede ser negativo")

        # Se validan todos los ajustes antes de registrar cualquiera
        known_ids = {e.id for e in self.data.expenses}
        pending_expenses = []
        for expense in adjustment_expenses or []:
            if expense.id in known_ids:
                continue
            if expense.amount <= 0:
                raise InvalidAmountError("El monto del gasto debe ser mayor a cero")
            if expense.store_id != register.store_id:
                raise InvalidStateError("El gasto de ajuste no pertenece a la tienda de la caja")
            known_ids.add(expense.id)
            pending_expenses.append(expense)

        expense_service = ExpenseService(self.data)
        for expense in pending_expenses:
            expense_service.add_expense(expense)

        closed_at = self.data.clock.now()
        totals = self._shift_totals(register, closed_at)
        expected_amount = register.opening_amount + totals.sales_total - totals.expenses_total
        difference = closing_amount - expected_amount

        closed = register.model_copy(update={
            "status": CashRegisterStatus.CLOSED,
            "closing_amount": closing_amount,
            "closed_at": closed_at,
            "expected_amount": expected_amount,
            "difference": difference,
            "expenses_turno": list(totals.expenses),
            "closing_notes": closing_notes
        })
        self.data.cash_registers[register_id] = closed
        self.data.persist("cash_registers")
        self.data.append_movement(record_register_close(closed, closing_amount, closed_at))

        logger.info(
            f"Caja cerrada: {register_id} esperado={expected_amount} contado={closing_amount} "
            f"diferencia={difference}"
        )
        if difference != 0:
            logger.warning(
                f"Diferencia en arqueo de caja {register_id}: "
                f"{'Sobrante' if difference > 0 else 'Faltante'} de {abs(difference)}"
            )
        return closed

    def get_shift_summary(self, register_id: str) -> ShiftSummary:
        """Arqueo del turno sin cerrar la caja (vista previa) o el arqueo final"""
        register = self.get_cash_register(register_id)
        window_end = register.closed_at if register.closed_at else self.data.clock.now()
        totals = self._shift_totals(register, window_end)

        if register.status == CashRegisterStatus.CLOSED:
            expected_amount = register.expected_amount
        else:
            expected_amount = register.opening_amount + totals.sales_total - totals.expenses_total

        return ShiftSummary(
            register_id=register.id,
            store_id=register.store_id,
            status=register.status,
            window_start=register.opened_at,
            window_end=window_end,
            opening_amount=register.opening_amount,
            sales_count=len(totals.sales),
            sales_total=totals.sales_total,
            expenses_count=len(totals.expenses),
            expenses_total=totals.expenses_total,
            expected_amount=expected_amount,
            closing_amount=register.closing_amount,
            difference=register.difference
        )

    def get_current_cash_register(self, store_id: str) -> Optional[CashRegister]:
        """
        Obtener la caja abierta actual de una tienda.

        Retorna None si no existe caja abierta.
        """
        for register in self.data.cash_registers.values():
            if register.store_id == store_id and register.status == CashRegisterStatus.OPEN:
                return register
        return None

    def get_cash_register(self, register_id: str) -> CashRegister:
        register = self.data.cash_registers.get(register_id)
        if not register:
            raise RegisterNotFoundError("Caja registradora no encontrada")
        return register

    def get_cash_registers(self, store_id: Optional[str] = None,
                           status: Optional[CashRegisterStatus] = None,
                           limit: int = 100, offset: int = 0) -> Dict[str, Any]:
        """Obtener lista de cajas ordenada por fecha de apertura descendente"""
        registers = [
            r for r in self.data.cash_registers.values()
            if (store_id is None or r.store_id == store_id)
            and (status is None or r.status == status)
        ]
        registers.sort(key=lambda r: r.opened_at, reverse=True)
        return {
            "cash_registers": registers[offset:offset + limit],
            "total": len(registers),
            "limit": limit,
            "offset": offset
        }

    def _shift_totals(self, register: CashRegister, window_end: datetime) -> ShiftTotals:
        start = register.opened_at
        sales = [
            s for s in self.data.sales
            if s.store_id == register.store_id and start <= s.date <= window_end
        ]
        expenses = [
            e for e in self.data.expenses
            if e.store_id == register.store_id and start <= e.date <= window_end
        ]
        return ShiftTotals(sales=sales, expenses=expenses)
