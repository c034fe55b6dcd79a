# Carnicería API Tests - Product catalog
#
# Tests for:
# - Product CRUD operations
# - Decimal round-trips (quantity and prices keep their exact value)
# - Validation errors naming the failing field

from decimal import Decimal


class TestProductCRUD:
    """Product create, read, update, delete tests."""

    def test_create_and_fetch_round_trips_decimals(self, client):
        """
        SCENARIO: Create a product with decimal strings, then fetch it by id
        EXPECTED: 201, and the fetched values equal the submitted decimals
        """
        response = client.post("/api/products", json={
            "name": "Bife de Chorizo",
            "description": "Corte premium",
            "unit": "kg",
            "quantity": "25.50",
            "costPrice": "8500",
            "salePrice": "12500",
            "minStock": "10",
        })
        assert response.status_code == 201
        created = response.get_json()
        assert created["id"] is not None

        fetched = client.get(f"/api/products/{created['id']}").get_json()
        assert Decimal(fetched["quantity"]) == Decimal("25.50")
        assert Decimal(fetched["costPrice"]) == Decimal("8500")
        assert Decimal(fetched["salePrice"]) == Decimal("12500")
        assert fetched["quantity"] == "25.50"
        assert fetched["name"] == "Bife de Chorizo"
        assert fetched["unit"] == "kg"
        assert fetched["isActive"] is True

    def test_create_applies_defaults(self, client):
        response = client.post("/api/products", json={"name": "Morcilla", "unit": "unit"})
        assert response.status_code == 201
        body = response.get_json()
        assert body["quantity"] == "0.00"
        assert body["costPrice"] == "0.00"
        assert body["salePrice"] == "0.00"
        assert body["minStock"] == "5.00"
        assert body["isActive"] is True
        assert body["description"] is None

    def test_list_is_ordered_by_name(self, client, make_product):
        make_product(name="Costillar")
        make_product(name="Bondiola")
        make_product(name="Matambre")

        response = client.get("/api/products")
        assert response.status_code == 200
        names = [p["name"] for p in response.get_json()]
        assert names == ["Bondiola", "Costillar", "Matambre"]

    def test_get_missing_product_returns_404(self, client):
        response = client.get("/api/products/9999")
        assert response.status_code == 404
        assert "error" in response.get_json()

    def test_update_is_partial(self, client, make_product):
        product_id = make_product(quantity="25.5", sale_price="12500")

        response = client.put(f"/api/products/{product_id}", json={"quantity": "40.25"})
        assert response.status_code == 200
        body = response.get_json()
        assert body["quantity"] == "40.25"
        assert body["salePrice"] == "12500.00"
        assert body["name"] == "Bife de Chorizo"

    def test_update_missing_product_returns_404(self, client):
        response = client.put("/api/products/9999", json={"quantity": "1"})
        assert response.status_code == 404

    def test_delete_returns_204_without_body(self, client, make_product):
        product_id = make_product()

        response = client.delete(f"/api/products/{product_id}")
        assert response.status_code == 204
        assert response.data == b""
        assert client.get(f"/api/products/{product_id}").status_code == 404

    def test_delete_missing_product_returns_404(self, client):
        assert client.delete("/api/products/9999").status_code == 404

    def test_ids_beyond_integer_range_are_not_found(self, client):
        huge = 2 ** 70
        assert client.get(f"/api/products/{huge}").status_code == 404
        assert client.put(f"/api/products/{huge}", json={"quantity": "1"}).status_code == 404
        assert client.delete(f"/api/products/{huge}").status_code == 404


class TestProductValidation:
    """Schema violations are rejected with 400 and the field name."""

    def test_missing_name(self, client):
        response = client.post("/api/products", json={"unit": "kg"})
        assert response.status_code == 400
        assert response.get_json()["field"] == "name"

    def test_blank_name(self, client):
        response = client.post("/api/products", json={"name": "   ", "unit": "kg"})
        assert response.status_code == 400
        assert response.get_json()["field"] == "name"

    def test_unit_outside_closed_set(self, client):
        response = client.post("/api/products", json={"name": "Vacío", "unit": "g"})
        assert response.status_code == 400
        assert response.get_json()["field"] == "unit"

    def test_negative_quantity(self, client):
        response = client.post("/api/products", json={"name": "Vacío", "unit": "kg", "quantity": "-1"})
        assert response.status_code == 400
        assert response.get_json()["field"] == "quantity"

    def test_too_many_decimal_places(self, client):
        response = client.post("/api/products", json={"name": "Vacío", "unit": "kg", "salePrice": "10.999"})
        assert response.status_code == 400
        assert response.get_json()["field"] == "salePrice"

    def test_non_numeric_price(self, client):
        response = client.post("/api/products", json={"name": "Vacío", "unit": "kg", "costPrice": "abc"})
        assert response.status_code == 400
        assert response.get_json()["field"] == "costPrice"

    def test_unknown_field(self, client):
        response = client.post("/api/products", json={"name": "Vacío", "unit": "kg", "sku": "X1"})
        assert response.status_code == 400
        assert response.get_json()["field"] == "sku"

    def test_non_object_body(self, client):
        response = client.post("/api/products", json=["name"])
        assert response.status_code == 400

    def test_update_rejects_null_name(self, client, make_product):
        product_id = make_product()
        response = client.put(f"/api/products/{product_id}", json={"name": None})
        assert response.status_code == 400
        assert response.get_json()["field"] == "name"

    def test_numbers_are_accepted_as_json_numbers(self, client):
        response = client.post("/api/products", json={
            "name": "Vacío", "unit": "kg", "quantity": 12.5, "salePrice": 9800,
        })
        assert response.status_code == 201
        body = response.get_json()
        assert body["quantity"] == "12.50"
        assert body["salePrice"] == "9800.00"
