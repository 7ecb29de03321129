"""
Reloj del sistema y utilidades de fecha

Todas las fechas del POS se manejan con zona horaria. Las fechas sin zona
que lleguen desde el cliente se interpretan en la zona configurada
(settings.TIMEZONE).
"""
from datetime import datetime, tzinfo
from typing import Optional, Protocol
from zoneinfo import ZoneInfo

from tienda.core.config import settings


class Clock(Protocol):
    def now(self) -> datetime:
        ...


def default_timezone() -> tzinfo:
    return ZoneInfo(settings.TIMEZONE)


class SystemClock:
    """Reloj real en la zona horaria de la tienda"""

    def __init__(self, timezone: Optional[str] = None):
        self.tz = ZoneInfo(timezone) if timezone else default_timezone()

    def now(self) -> datetime:
        return datetime.now(self.tz)


def ensure_aware(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Asignar zona horaria a fechas naive"""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz or default_timezone())
    return value


def same_calendar_day(value: datetime, reference: datetime) -> bool:
    """
    Comparar año/mes/día de `value` contra `reference` en la zona de `reference`.

    No es una ventana móvil de 24 horas: una venta de ayer a las 23:59 no
    cuenta para hoy aunque haya ocurrido hace un minuto.
    """
    reference = ensure_aware(reference)
    local = ensure_aware(value, reference.tzinfo).astimezone(reference.tzinfo)
    return (local.year, local.month, local.day) == (reference.year, reference.month, reference.day)
