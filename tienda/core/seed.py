"""
Datos de demostración para una tienda vacía

Productos de ejemplo repartidos en dos tiendas ('1' Tienda Principal,
'2' Sucursal Norte). Sólo se siembran si no hay productos cargados.
"""
import logging
from decimal import Decimal

from tienda.core.data import PosDataStore
from tienda.modules.products.models import Product

logger = logging.getLogger(__name__)


DEMO_PRODUCTS = [
    {"name": "Laptop HP Pavilion", "sku": "LP001", "category": "Computadores",
     "price": Decimal("2500000"), "cost": Decimal("2000000"), "stock": 5, "min_stock": 2, "store_id": "1"},
    {"name": "Mouse Logitech", "sku": "MS001", "category": "Accesorios",
     "price": Decimal("80000"), "cost": Decimal("60000"), "stock": 25, "min_stock": 10, "store_id": "1"},
    {"name": "Teclado Mecánico", "sku": "KB001", "category": "Accesorios",
     "price": Decimal("150000"), "cost": Decimal("120000"), "stock": 15, "min_stock": 5, "store_id": "1"},
    {"name": "Monitor 24\"", "sku": "MN001", "category": "Monitores",
     "price": Decimal("800000"), "cost": Decimal("650000"), "stock": 8, "min_stock": 3, "store_id": "2"},
    {"name": "iPhone 15 Pro", "sku": "IP15P", "category": "Smartphones",
     "price": Decimal("5200000"), "cost": Decimal("4500000"), "stock": 3, "min_stock": 1, "store_id": "1"},
    {"name": "Auriculares Sony", "sku": "AU001", "category": "Audio",
     "price": Decimal("320000"), "cost": Decimal("250000"), "stock": 12, "min_stock": 5, "store_id": "1"},
]


def seed_demo_data(data: PosDataStore) -> int:
    """Sembrar productos demo; devuelve cuántos se crearon"""
    if data.products:
        logger.info("Products already present, skipping demo seed")
        return 0

    for index, fields in enumerate(DEMO_PRODUCTS, start=1):
        product = Product(id=str(index), **fields)
        data.products[product.id] = product

    data.persist("products", "expense_categories")
    logger.info(f"Seeded {len(DEMO_PRODUCTS)} demo products")
    return len(DEMO_PRODUCTS)
