"""
Libro de caja append-only

Sólo admite agregar movimientos al final; no existe operación para
modificar ni borrar entradas.
"""
from datetime import datetime
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from tienda.common.exceptions import DuplicateMovementError
from tienda.core.clock import ensure_aware
from tienda.modules.ledger.models import CashMovement, MovementType


class LedgerStore:
    """Registro ordenado de CashMovement"""

    def __init__(self, movements: Iterable[CashMovement] = ()):
        self._entries: List[CashMovement] = []
        self._ids: Set[str] = set()
        for movement in movements:
            self.append(movement)

    def append(self, movement: CashMovement) -> CashMovement:
        if movement.id in self._ids:
            raise DuplicateMovementError(f"El movimiento {movement.id} ya existe en el libro de caja")
        self._entries.append(movement)
        self._ids.add(movement.id)
        return movement

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CashMovement]:
        return iter(tuple(self._entries))

    def __contains__(self, movement_id: str) -> bool:
        return movement_id in self._ids

    @property
    def entries(self) -> Tuple[CashMovement, ...]:
        return tuple(self._entries)

    def filter(
        self,
        store_id: Optional[str] = None,
        type: Optional[MovementType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        reference_id: Optional[str] = None
    ) -> List[CashMovement]:
        """Filtrar por tienda, tipo, rango de fechas (inclusivo) y referencia"""
        start = ensure_aware(start) if start else None
        end = ensure_aware(end) if end else None
        result = []
        for movement in self._entries:
            if store_id is not None and movement.store_id != store_id:
                continue
            if type is not None and movement.type != type:
                continue
            if start is not None and movement.date < start:
                continue
            if end is not None and movement.date > end:
                continue
            if reference_id is not None and movement.reference_id != reference_id:
                continue
            result.append(movement)
        return result

    def by_reference(self, reference_id: str) -> List[CashMovement]:
        return self.filter(reference_id=reference_id)
