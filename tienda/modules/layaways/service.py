"""
Servicio de separados (layaways)

Crear un separado descuenta el stock de inmediato (la mercancía queda
reservada). Cada abono es ingreso de caja en el momento del pago.
"""
from decimal import Decimal
from typing import Any, Dict, Optional
import logging

from tienda.common.exceptions import InvalidAmountError, InvalidStateError, LayawayNotFoundError
from tienda.core.data import PosDataStore
from tienda.modules.layaways.models import Layaway, LayawayPayment, LayawayStatus
from tienda.modules.layaways.schemas import LayawayCreate, LayawayPaymentCreate
from tienda.modules.ledger.recorder import record_layaway_payment
from tienda.modules.products.service import ProductService
from tienda.modules.sales.models import SaleItem

logger = logging.getLogger(__name__)


class LayawayService:
    """Servicio para separados y sus abonos"""

    def __init__(self, data: PosDataStore):
        self.data = data

    def create_layaway(self, layaway_data: LayawayCreate, store_id: str) -> Layaway:
        """Crear separado desde la entrada HTTP, con abono inicial opcional"""
        items = [
            SaleItem(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                price=item.price,
                total=item.price * item.quantity
            )
            for item in layaway_data.items
        ]
        total = sum((item.total for item in items), Decimal("0"))
        now = self.data.clock.now()

        layaway = self.add_layaway(Layaway(
            store_id=store_id,
            employee_id=layaway_data.employee_id,
            customer_id=layaway_data.customer_id,
            items=items,
            total=total,
            remaining_balance=total,
            notes=layaway_data.notes,
            created_at=now
        ))

        if layaway_data.initial_payment > 0:
            layaway = self.add_layaway_payment(layaway.id, LayawayPayment(
                amount=layaway_data.initial_payment,
                employee_id=layaway_data.employee_id,
                payment_method=layaway_data.payment_method,
                date=now
            ))
        return layaway

    def add_layaway(self, layaway: Layaway) -> Layaway:
        self.data.layaways[layaway.id] = layaway

        products = ProductService(self.data)
        for item in layaway.items:
            products.adjust_stock(item.product_id, -item.quantity)

        self.data.persist("layaways", "products")
        logger.info(f"Separado creado: {layaway.id} por {layaway.total} en tienda {layaway.store_id}")
        return layaway

    def build_payment(self, payment_data: LayawayPaymentCreate) -> LayawayPayment:
        return LayawayPayment(
            amount=payment_data.amount,
            employee_id=payment_data.employee_id,
            payment_method=payment_data.payment_method,
            date=payment_data.date or self.data.clock.now()
        )

    def add_layaway_payment(self, layaway_id: str, payment: LayawayPayment) -> Layaway:
        """
        Registrar abono.

        El saldo se recalcula como total - total_pagado; con saldo <= 0 el
        separado queda COMPLETED. No se aceptan abonos en separados completados.
        """
        layaway = self.get_layaway(layaway_id)

        if layaway.status == LayawayStatus.COMPLETED:
            raise InvalidStateError("El separado ya está pagado en su totalidad")
        if payment.amount <= 0:
            raise InvalidAmountError("El abono debe ser mayor a cero")

        total_paid = layaway.total_paid + payment.amount
        remaining_balance = layaway.total - total_paid
        status = LayawayStatus.COMPLETED if remaining_balance <= 0 else LayawayStatus.ACTIVE

        updated = layaway.model_copy(update={
            "payments": layaway.payments + [payment],
            "total_paid": total_paid,
            "remaining_balance": remaining_balance,
            "status": status
        })
        self.data.layaways[layaway_id] = updated
        self.data.persist("layaways")
        self.data.append_movement(record_layaway_payment(updated, payment))

        logger.info(
            f"Abono registrado en separado {layaway_id}: {payment.amount} "
            f"(saldo {remaining_balance}, estado {status.value})"
        )
        return updated

    def get_layaway(self, layaway_id: str) -> Layaway:
        layaway = self.data.layaways.get(layaway_id)
        if not layaway:
            raise LayawayNotFoundError("Separado no encontrado")
        return layaway

    def get_layaways(self, store_id: Optional[str] = None, status: Optional[LayawayStatus] = None,
                     limit: int = 100, offset: int = 0) -> Dict[str, Any]:
        layaways = [
            l for l in self.data.layaways.values()
            if (store_id is None or l.store_id == store_id)
            and (status is None or l.status == status)
        ]
        layaways.sort(key=lambda l: l.created_at, reverse=True)
        return {
            "layaways": layaways[offset:offset + limit],
            "total": len(layaways),
            "limit": limit,
            "offset": offset
        }
