from decimal import Decimal

import pytest

from tienda.common.exceptions import ProductNotFoundError
from tienda.modules.products.models import Product
from tienda.modules.products.service import ProductService

STORE_ID = "1"


class TestProductService:

    def test_adjust_stock(self, data_store, sample_product):
        updated = ProductService(data_store).adjust_stock("p1", -5)
        assert updated.stock == 20
        assert data_store.products["p1"].stock == 20

    def test_adjust_unknown_product_is_ignored(self, data_store):
        assert ProductService(data_store).adjust_stock("missing", -1) is None

    def test_low_stock_filter(self, data_store, sample_product):
        service = ProductService(data_store)
        service.add_product(Product(id="p2", name="Cable", sku="CB1", stock=2, min_stock=2, store_id=STORE_ID))
        service.add_product(Product(id="p3", name="Funda", sku="FN1", stock=0, min_stock=1, store_id="2"))

        low_stock = service.get_products(store_id=STORE_ID, low_stock=True)

        assert [p.id for p in low_stock] == ["p2"]

    def test_update_unknown_product_fails(self, data_store):
        with pytest.raises(ProductNotFoundError):
            ProductService(data_store).update_product(
                Product(id="nope", name="X", sku="X", store_id=STORE_ID)
            )


class TestProductsAPI:

    def test_create_update_and_list(self, client):
        response = client.post(
            "/api/v1/products/",
            params={"store_id": STORE_ID},
            json={"name": "Teclado", "sku": "KB001", "price": "150000", "stock": 15, "min_stock": 5}
        )
        assert response.status_code == 201
        product_id = response.json()["id"]

        response = client.put(f"/api/v1/products/{product_id}", json={"stock": 4})
        assert response.status_code == 200
        assert response.json()["stock"] == 4
        assert Decimal(response.json()["price"]) == Decimal("150000")

        listing = client.get("/api/v1/products/", params={"store_id": STORE_ID, "low_stock": True}).json()
        assert listing["total_count"] == 1

    def test_unknown_product_is_404(self, client):
        assert client.get("/api/v1/products/missing").status_code == 404
        assert client.put("/api/v1/products/missing", json={"stock": 1}).status_code == 404
