"""
Tests for shared helpers: currency formatting, dates, CSV and the app shell
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from tienda.common.csv_export import create_csv_response, format_csv_value
from tienda.common.formatting import format_currency, to_decimal
from tienda.core.clock import SystemClock, ensure_aware, same_calendar_day
from tienda.modules.ledger.models import MovementType

BOGOTA = ZoneInfo("America/Bogota")


class TestFormatting:

    def test_format_currency(self):
        assert format_currency(Decimal("1234567")) == "$ 1.234.567"
        assert format_currency(0) == "$ 0"
        assert format_currency(Decimal("999.5")) == "$ 1.000"
        assert format_currency(Decimal("-10000")) == "-$ 10.000"

    def test_to_decimal(self):
        assert to_decimal("1500.50") == Decimal("1500.50")
        assert to_decimal(12) == Decimal("12")
        assert to_decimal("abc") == Decimal("0")
        assert to_decimal(None) == Decimal("0")


class TestClock:

    def test_system_clock_is_timezone_aware(self):
        now = SystemClock("America/Bogota").now()
        assert now.utcoffset() == timedelta(hours=-5)

    def test_ensure_aware_keeps_aware_values(self):
        value = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert ensure_aware(value) is value

    def test_same_calendar_day_is_not_a_rolling_window(self):
        reference = datetime(2024, 3, 15, 0, 1, tzinfo=BOGOTA)

        assert same_calendar_day(datetime(2024, 3, 15, 0, 0, tzinfo=BOGOTA), reference)
        assert not same_calendar_day(datetime(2024, 3, 14, 23, 59, tzinfo=BOGOTA), reference)
        assert not same_calendar_day(datetime(2024, 3, 15, 4, 0, tzinfo=timezone.utc), reference)


class TestCsvExport:

    def test_format_csv_value(self):
        assert format_csv_value(None) == ""
        assert format_csv_value(Decimal("10.50")) == "10.50"
        assert format_csv_value(MovementType.SALE) == "sale"
        assert format_csv_value(True) == "Sí"
        assert format_csv_value(datetime(2024, 3, 15, 10, 0)) == "2024-03-15T10:00:00"

    def test_empty_csv_has_headers_only(self):
        response = create_csv_response([], "vacio.csv", {"a": "A", "b": "B"})
        assert response.body == b"A,B\n"
        assert response.headers["content-disposition"] == "attachment; filename=vacio.csv"


class TestAppShell:

    def test_root_and_health(self, client):
        assert client.get("/").status_code == 200
        response = client.get("/health")
        assert response.json()["status"] == "healthy"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
