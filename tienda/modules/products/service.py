from typing import List, Optional
import logging

from tienda.common.exceptions import ProductNotFoundError
from tienda.core.data import PosDataStore
from tienda.modules.products.models import Product

logger = logging.getLogger(__name__)


class ProductService:
    """Servicio de productos e inventario por tienda"""

    def __init__(self, data: PosDataStore):
        self.data = data

    def add_product(self, product: Product) -> Product:
        self.data.products[product.id] = product
        self.data.persist("products")
        logger.info(f"Producto guardado: {product.name} ({product.sku})")
        return product

    def update_product(self, product: Product) -> Product:
        if product.id not in self.data.products:
            raise ProductNotFoundError("Producto no encontrado")
        self.data.products[product.id] = product
        self.data.persist("products")
        logger.info(f"Producto actualizado: {product.name}")
        return product

    def get_product(self, product_id: str) -> Product:
        product = self.data.products.get(product_id)
        if not product:
            raise ProductNotFoundError("Producto no encontrado")
        return product

    def get_products(self, store_id: Optional[str] = None, low_stock: bool = False) -> List[Product]:
        products = list(self.data.products.values())
        if store_id:
            products = [p for p in products if p.store_id == store_id]
        if low_stock:
            products = [p for p in products if p.is_low_stock]
        return products

    def adjust_stock(self, product_id: str, delta: int) -> Optional[Product]:
        """
        Ajustar stock en memoria (sin encolar persistencia).

        Productos desconocidos se ignoran: una línea de venta puede no estar
        asociada a un producto del catálogo.
        """
        product = self.data.products.get(product_id)
        if not product:
            logger.warning(f"Stock adjustment skipped, unknown product {product_id}")
            return None

        updated = product.model_copy(update={"stock": product.stock + delta})
        self.data.products[product_id] = updated
        if updated.stock < 0:
            logger.warning(f"Stock negativo para {updated.sku}: {updated.stock}")
        return updated
