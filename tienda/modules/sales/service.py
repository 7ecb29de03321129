"""
Servicio de ventas

Registrar una venta implica:
- agregarla a la colección de ventas
- descontar el stock de los productos vendidos
- registrar el movimiento de caja (total bruto)
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional
import logging

from tienda.core.data import PosDataStore
from tienda.modules.ledger.recorder import record_sale
from tienda.modules.products.service import ProductService
from tienda.modules.sales.models import Sale, SaleItem
from tienda.modules.sales.schemas import SaleCreate

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class SaleService:
    """Servicio para registro y consulta de ventas"""

    def __init__(self, data: PosDataStore):
        self.data = data

    def build_sale(self, sale_data: SaleCreate, store_id: str) -> Sale:
        """Calcular totales y número de factura a partir de la entrada"""
        items = [
            SaleItem(
                product_id=item.product_id,
                product_name=item.product_name or self._product_name(item.product_id),
                quantity=item.quantity,
                price=item.price,
                total=item.price * item.quantity
            )
            for item in sale_data.items
        ]
        subtotal = sum((item.total for item in items), Decimal("0"))
        total = subtotal - sale_data.discount + sale_data.shipping_cost
        fee = (total * sale_data.payment_method_discount / Decimal("100")).quantize(CENT, rounding=ROUND_HALF_UP)

        return Sale(
            store_id=store_id,
            employee_id=sale_data.employee_id,
            customer_id=sale_data.customer_id,
            items=items,
            subtotal=subtotal,
            discount=sale_data.discount,
            shipping_cost=sale_data.shipping_cost,
            payment_method=sale_data.payment_method,
            payment_method_discount=sale_data.payment_method_discount,
            total=total,
            net_total=total - fee,
            invoice_number=sale_data.invoice_number or self.next_invoice_number(store_id),
            date=sale_data.date or self.data.clock.now()
        )

    def add_sale(self, sale: Sale) -> Sale:
        self.data.sales.append(sale)

        products = ProductService(self.data)
        for item in sale.items:
            products.adjust_stock(item.product_id, -item.quantity)

        self.data.persist("sales", "products")
        self.data.append_movement(record_sale(sale))

        logger.info(f"Venta registrada: {sale.invoice_number} por {sale.total} en tienda {sale.store_id}")
        return sale

    def next_invoice_number(self, store_id: str) -> str:
        count = sum(1 for s in self.data.sales if s.store_id == store_id)
        return f"FAC-{count + 1:06d}"

    def get_sales(self, store_id: Optional[str] = None, limit: int = 100, offset: int = 0) -> Dict[str, Any]:
        """Ventas ordenadas por fecha descendente"""
        sales = [s for s in self.data.sales if store_id is None or s.store_id == store_id]
        sales.sort(key=lambda s: s.date, reverse=True)
        return {
            "sales": sales[offset:offset + limit],
            "total": len(sales),
            "limit": limit,
            "offset": offset
        }

    def _product_name(self, product_id: str) -> str:
        product = self.data.products.get(product_id)
        return product.name if product else ""
