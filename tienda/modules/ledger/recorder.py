"""
Traducción de eventos de negocio a movimientos del libro de caja

Funciones puras: reciben el evento ya validado y devuelven un CashMovement
nuevo. No tocan el libro; quien las llama decide cuándo agregarlo.

Convención de signos:
- opening: + monto de apertura
- sale:    + total bruto de la venta (no el neto del medio de pago)
- expense: - monto del gasto
- closing: 0 (el conteo real queda en la sesión de caja)
"""
from datetime import datetime
from decimal import Decimal

from tienda.common.formatting import format_currency
from tienda.modules.ledger.models import CashMovement, MovementType
from tienda.modules.sales.models import Sale
from tienda.modules.expenses.models import Expense
from tienda.modules.layaways.models import Layaway, LayawayPayment
from tienda.modules.registers.models import CashRegister


def record_sale(sale: Sale) -> CashMovement:
    return CashMovement(
        store_id=sale.store_id,
        employee_id=sale.employee_id,
        type=MovementType.SALE,
        amount=sale.total,
        description=f"Venta {sale.invoice_number}",
        date=sale.date,
        reference_id=sale.id
    )


def record_expense(expense: Expense) -> CashMovement:
    return CashMovement(
        store_id=expense.store_id,
        employee_id=expense.employee_id,
        type=MovementType.EXPENSE,
        amount=-expense.amount,
        description=expense.description,
        date=expense.date,
        reference_id=expense.id
    )


def record_layaway_payment(layaway: Layaway, payment: LayawayPayment) -> CashMovement:
    # Los abonos cuentan como ingreso al momento del pago, no al entregar
    return CashMovement(
        store_id=layaway.store_id,
        employee_id=payment.employee_id,
        type=MovementType.SALE,
        amount=payment.amount,
        description=f"Abono separado #{layaway.id}",
        date=payment.date,
        reference_id=layaway.id
    )


def record_register_open(register: CashRegister) -> CashMovement:
    return CashMovement(
        store_id=register.store_id,
        employee_id=register.employee_id,
        type=MovementType.OPENING,
        amount=register.opening_amount,
        description="Apertura de caja",
        date=register.opened_at,
        reference_id=register.id
    )


def record_register_close(register: CashRegister, closing_amount: Decimal, closed_at: datetime) -> CashMovement:
    return CashMovement(
        store_id=register.store_id,
        employee_id=register.employee_id,
        type=MovementType.CLOSING,
        amount=Decimal("0"),
        description=f"Cierre de caja - Conteo: {format_currency(closing_amount)}",
        date=closed_at,
        reference_id=register.id
    )
