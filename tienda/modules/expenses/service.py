from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from tienda.common.exceptions import InvalidAmountError
from tienda.core.data import PosDataStore
from tienda.modules.expenses.models import Expense
from tienda.modules.expenses.schemas import ExpenseCreate
from tienda.modules.ledger.recorder import record_expense

logger = logging.getLogger(__name__)


class ExpenseService:
    """Servicio de gastos y categorías de gasto"""

    def __init__(self, data: PosDataStore):
        self.data = data

    def build_expense(self, expense_data: ExpenseCreate, store_id: str) -> Expense:
        return Expense(
            store_id=store_id,
            employee_id=expense_data.employee_id,
            amount=expense_data.amount,
            description=expense_data.description,
            category=expense_data.category,
            date=expense_data.date or self.data.clock.now()
        )

    def add_expense(self, expense: Expense) -> Expense:
        if expense.amount <= 0:
            raise InvalidAmountError("El monto del gasto debe ser mayor a cero")

        self.data.expenses.append(expense)
        self.data.persist("expenses")
        self.data.append_movement(record_expense(expense))

        logger.info(f"Gasto registrado: {expense.description} por {expense.amount} en tienda {expense.store_id}")
        return expense

    def get_expenses(self, store_id: Optional[str] = None, category: Optional[str] = None,
                     limit: int = 100, offset: int = 0) -> Dict[str, Any]:
        expenses = [
            e for e in self.data.expenses
            if (store_id is None or e.store_id == store_id)
            and (category is None or e.category == category)
        ]
        expenses.sort(key=lambda e: e.date, reverse=True)
        return {
            "expenses": expenses[offset:offset + limit],
            "total_amount": sum((e.amount for e in expenses), Decimal("0")),
            "total": len(expenses),
            "limit": limit,
            "offset": offset
        }

    # ===== CATEGORÍAS =====

    def get_expense_categories(self) -> List[str]:
        return list(self.data.expense_categories)

    def add_expense_category(self, name: str) -> List[str]:
        if name not in self.data.expense_categories:
            self.data.expense_categories = sorted(self.data.expense_categories + [name])
            self.data.persist("expense_categories")
        return self.get_expense_categories()

    def delete_expense_category(self, name: str) -> List[str]:
        if name in self.data.expense_categories:
            self.data.expense_categories = [c for c in self.data.expense_categories if c != name]
            self.data.persist("expense_categories")
        return self.get_expense_categories()
