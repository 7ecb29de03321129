"""
Seed script: populate an empty store with the demo catalogue.

What it creates:
- Products (6) across two stores: '1' Tienda Principal and '2' Sucursal Norte.
- Default expense categories.
- Optionally (--with-shift) an open register in store '1' with a few sales
  and one expense, so the dashboard and shift summary have data.

Writes go through the configured backend (STORAGE_BACKEND / DATABASE_URL):
    STORAGE_BACKEND=database DATABASE_URL=sqlite:///./tienda.db \
        python scripts/seed_demo_data.py --with-shift

Note: This is intended for development environments only.
"""

# Add project root to sys.path so `tienda.*` imports work even if CWD changes
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import logging
from decimal import Decimal

from tienda.core.data import create_data_store
from tienda.core.seed import seed_demo_data
from tienda.modules.expenses.schemas import ExpenseCreate
from tienda.modules.expenses.service import ExpenseService
from tienda.modules.registers.service import CashRegisterService
from tienda.modules.sales.schemas import SaleCreate, SaleItemCreate
from tienda.modules.sales.service import SaleService

logger = logging.getLogger("seed_demo_data")


def seed_shift(data, store_id: str, employee_id: str) -> None:
    registers = CashRegisterService(data)
    if registers.get_current_cash_register(store_id):
        logger.info(f"Store {store_id} already has an open register, skipping shift")
        return

    registers.open_cash_register(store_id, employee_id, Decimal("100000"), opening_notes="Turno demo")

    sales = SaleService(data)
    for product_id, quantity, method in (("2", 2, "efectivo"), ("3", 1, "tarjeta"), ("6", 1, "efectivo")):
        product = data.products[product_id]
        sale_data = SaleCreate(
            employee_id=employee_id,
            items=[SaleItemCreate(product_id=product.id, product_name=product.name,
                                  quantity=quantity, price=product.price)],
            payment_method=method
        )
        sales.add_sale(sales.build_sale(sale_data, store_id))

    expenses = ExpenseService(data)
    expenses.add_expense(expenses.build_expense(
        ExpenseCreate(employee_id=employee_id, amount=Decimal("15000"),
                      description="Aseo del local", category="Limpieza"),
        store_id
    ))


def main():
    parser = argparse.ArgumentParser(description="Seed demo POS data")
    parser.add_argument("--with-shift", action="store_true", help="Open a register with demo sales")
    parser.add_argument("--store-id", default="1")
    parser.add_argument("--employee-id", default="1")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    data = create_data_store()
    created = seed_demo_data(data)
    if args.with_shift:
        seed_shift(data, args.store_id, args.employee_id)

    results = data.flush()
    failed = [r for r in results if not r.ok]
    for result in failed:
        logger.error(f"Failed to persist {result.key}: {result.error}")

    print(f"Products created: {created}")
    print(f"Keys written: {len(results) - len(failed)} (failed: {len(failed)})")
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
