from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
import logging

from tienda.core.data import PosDataStore
from tienda.modules.ledger.models import CashMovement, MovementType
from tienda.modules.ledger.schemas import CashMovementCreate
from tienda.modules.registers.service import CashRegisterService

logger = logging.getLogger(__name__)


class CashMovementService:
    """Servicio para movimientos del libro de caja"""

    def __init__(self, data: PosDataStore):
        self.data = data

    def build_movement(self, movement_data: CashMovementCreate, store_id: str) -> CashMovement:
        amount = movement_data.amount
        if movement_data.type == MovementType.EXPENSE:
            amount = -amount

        return CashMovement(
            store_id=store_id,
            employee_id=movement_data.employee_id,
            type=movement_data.type,
            amount=amount,
            description=movement_data.description,
            date=movement_data.date or self.data.clock.now(),
            reference_id=movement_data.reference_id
        )

    def add_cash_movement(self, movement: CashMovement) -> CashMovement:
        """Agregar un movimiento ya construido al final del libro"""
        self.data.append_movement(movement)
        logger.info(
            f"Movimiento de caja registrado: {movement.type.value} {movement.amount} "
            f"en tienda {movement.store_id}"
        )
        return movement

    def get_movements(
        self,
        store_id: Optional[str] = None,
        type: Optional[MovementType] = None,
        register_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Dict[str, Any]:
        """
        Listar movimientos con filtros.

        Con register_id se devuelven los movimientos de la ventana del turno
        (apertura a cierre, o hasta ahora si sigue abierta) en la tienda de
        esa caja. Orden: fecha descendente.
        """
        if register_id:
            register = CashRegisterService(self.data).get_cash_register(register_id)
            store_id = register.store_id
            start = register.opened_at
            end = register.closed_at or self.data.clock.now()

        movements = self.data.ledger.filter(store_id=store_id, type=type, start=start, end=end)
        movements.sort(key=lambda m: m.date, reverse=True)

        return {
            "movements": movements[offset:offset + limit],
            "summary": self._calculate_movements_summary(movements),
            "total": len(movements),
            "limit": limit,
            "offset": offset
        }

    def _calculate_movements_summary(self, movements: Iterable[CashMovement]) -> Dict[str, Decimal]:
        """Calcular resumen de movimientos"""
        summary = {
            "total_openings": Decimal("0"),
            "total_sales": Decimal("0"),
            "total_expenses": Decimal("0"),
            "net": Decimal("0")
        }

        for movement in movements:
            if movement.type == MovementType.OPENING:
                summary["total_openings"] += movement.amount
            elif movement.type == MovementType.SALE:
                summary["total_sales"] += movement.amount
            elif movement.type == MovementType.EXPENSE:
                summary["total_expenses"] += abs(movement.amount)
            summary["net"] += movement.amount

        return summary

    def export_rows(self, movements: List[CashMovement]) -> List[Dict[str, Any]]:
        return [
            {
                "date": m.date,
                "type": m.type,
                "amount": m.amount,
                "description": m.description,
                "employee_id": m.employee_id,
                "store_id": m.store_id,
                "reference_id": m.reference_id,
                "id": m.id
            }
            for m in movements
        ]
