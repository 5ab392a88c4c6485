"""
Tests for the HTTP API.
"""

from fastapi.testclient import TestClient

from orderpad.errors import StorageError
from orderpad.main import create_app
from orderpad.storage import MemoryStorage


class FailingStorage(MemoryStorage):
    """Memory store whose order listing always fails."""

    async def list_active_orders(self):
        raise StorageError("Failed to fetch active orders")


class TestOrderAPI:
    """Test order endpoints"""

    def test_create_order(self, client: TestClient, order_payload: dict):
        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 201
        data = response.json()
        assert data["orderNumber"] == "ORD-001"
        assert data["tableNumber"] == 7
        assert data["customerName"] == "Asha"
        assert data["status"] == "active"
        assert float(data["total"]) == 250.0
        assert [item["itemName"] for item in data["items"]] == ["Paneer Tikka", "Butter Naan"]
        assert data["items"][0]["total"] == "200.00"
        assert "createdAt" in data

    def test_blank_customer_fields_become_null(self, client: TestClient, order_payload: dict):
        order_payload.update(customerName="", customerPhone="  ")

        data = client.post("/api/orders", json=order_payload).json()

        assert data["customerName"] is None
        assert data["customerPhone"] is None

    def test_invalid_table_number(self, client: TestClient, order_payload: dict):
        order_payload["tableNumber"] = 31

        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 400
        data = response.json()
        assert data["message"] == "Invalid order data"
        assert any(error["field"] == "tableNumber" for error in data["errors"])

    def test_order_without_items(self, client: TestClient, order_payload: dict):
        order_payload["items"] = []

        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 400
        assert any(error["field"] == "items" for error in response.json()["errors"])

    def test_invalid_item_fields(self, client: TestClient, order_payload: dict):
        order_payload["items"] = [{"itemName": "Chai", "quantity": 0, "price": "abc"}]

        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 400
        fields = {error["field"] for error in response.json()["errors"]}
        assert {"items.0.quantity", "items.0.price"} <= fields

    def test_price_with_fractional_cents(self, client: TestClient, order_payload: dict):
        order_payload["items"][0]["price"] = "0.125"

        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 400
        fields = [error["field"] for error in response.json()["errors"]]
        assert fields == ["items.0.price"]

    def test_oversized_quantity_and_price(self, client: TestClient, order_payload: dict):
        order_payload["items"] = [{"itemName": "Chai", "quantity": 10**10, "price": "1e300"}]

        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 400
        fields = {error["field"] for error in response.json()["errors"]}
        assert fields == {"items.0.quantity", "items.0.price"}
        assert client.get("/api/orders").json() == []

    def test_order_total_must_fit(self, client: TestClient, order_payload: dict):
        order_payload["items"] = [{"itemName": "Banquet", "quantity": 2, "price": "99999999.99"}]

        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 400
        assert [error["field"] for error in response.json()["errors"]] == ["items"]

    def test_list_active_orders(self, client: TestClient, order_payload: dict):
        first = client.post("/api/orders", json=order_payload).json()
        second = client.post("/api/orders", json=order_payload).json()
        client.patch(f"/api/orders/{first['orderNumber']}/complete")

        response = client.get("/api/orders")

        assert response.status_code == 200
        numbers = [order["orderNumber"] for order in response.json()]
        assert numbers == [second["orderNumber"]]
        assert len(response.json()[0]["items"]) == 2

    def test_get_order(self, client: TestClient, order_payload: dict):
        created = client.post("/api/orders", json=order_payload).json()

        response = client.get(f"/api/orders/{created['orderNumber']}")

        assert response.status_code == 200
        assert response.json()["id"] == created["id"]
        assert len(response.json()["items"]) == 2

    def test_get_unknown_order(self, client: TestClient):
        response = client.get("/api/orders/ORD-999")

        assert response.status_code == 404
        assert response.json() == {"message": "Order ORD-999 not found"}

    def test_update_order_replaces_items(self, client: TestClient, order_payload: dict):
        created = client.post("/api/orders", json=order_payload).json()
        edit = {
            "tableNumber": 3,
            "items": [{"itemName": "Veg Biryani", "quantity": 1, "price": "210.00"}],
        }

        response = client.put(f"/api/orders/{created['orderNumber']}", json=edit)

        assert response.status_code == 200
        data = response.json()
        assert data["orderNumber"] == created["orderNumber"]
        assert data["tableNumber"] == 3
        assert data["customerName"] is None
        assert data["total"] == "210.00"
        assert [item["itemName"] for item in data["items"]] == ["Veg Biryani"]
        old_ids = {item["id"] for item in created["items"]}
        assert old_ids.isdisjoint(item["id"] for item in data["items"])

        fetched = client.get(f"/api/orders/{created['orderNumber']}").json()
        assert fetched["items"] == data["items"]

    def test_update_unknown_order(self, client: TestClient, order_payload: dict):
        response = client.put("/api/orders/ORD-999", json=order_payload)
        assert response.status_code == 404

    def test_update_completed_order_conflicts(self, client: TestClient, order_payload: dict):
        created = client.post("/api/orders", json=order_payload).json()
        client.patch(f"/api/orders/{created['orderNumber']}/complete")

        response = client.put(f"/api/orders/{created['orderNumber']}", json=order_payload)

        assert response.status_code == 409
        assert "completed" in response.json()["message"]

    def test_complete_order(self, client: TestClient, order_payload: dict):
        created = client.post("/api/orders", json=order_payload).json()

        response = client.patch(f"/api/orders/{created['orderNumber']}/complete")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["items"] == created["items"]

    def test_complete_order_twice(self, client: TestClient, order_payload: dict):
        created = client.post("/api/orders", json=order_payload).json()
        client.patch(f"/api/orders/{created['orderNumber']}/complete")

        response = client.patch(f"/api/orders/{created['orderNumber']}/complete")

        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    def test_complete_unknown_order(self, client: TestClient):
        response = client.patch("/api/orders/ORD-999/complete")
        assert response.status_code == 404


class TestMenuItemAPI:
    """Test menu item endpoints"""

    def test_create_menu_item(self, client: TestClient):
        response = client.post("/api/menu-items", json={"name": "Rasam", "price": "55.00"})

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Rasam"
        assert data["price"] == "55.00"
        assert "createdAt" in data

    def test_existing_menu_item_is_returned_unchanged(self, client: TestClient):
        created = client.post("/api/menu-items", json={"name": "Rasam", "price": "55.00"}).json()

        response = client.post("/api/menu-items", json={"name": "RASAM", "price": "99.00"})

        assert response.status_code == 200
        assert response.json() == created
        assert len(client.get("/api/menu-items").json()) == 1

    def test_invalid_menu_item(self, client: TestClient):
        response = client.post("/api/menu-items", json={"name": "", "price": "-1"})

        assert response.status_code == 400
        data = response.json()
        assert data["message"] == "Invalid menu item data"
        assert {error["field"] for error in data["errors"]} == {"name", "price"}

    def test_orders_feed_menu_suggestions(self, client: TestClient, order_payload: dict):
        client.post("/api/menu-items", json={"name": "paneer tikka", "price": "120.00"})
        client.post("/api/orders", json=order_payload)

        response = client.get("/api/menu-items")

        assert response.status_code == 200
        items = {item["name"].lower(): item["price"] for item in response.json()}
        assert items == {"paneer tikka": "120.00", "butter naan": "50.00"}
        assert response.json()[0]["name"] == "Butter Naan"


class TestTicketAPI:
    """Test KOT and bill endpoints"""

    def test_kot(self, client: TestClient, order_payload: dict):
        created = client.post("/api/orders", json=order_payload).json()

        response = client.get(f"/api/orders/{created['orderNumber']}/kot")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "KITCHEN ORDER TICKET" in response.text
        assert "2 x Paneer Tikka" in response.text

    def test_bill(self, client: TestClient, order_payload: dict):
        created = client.post("/api/orders", json=order_payload).json()

        response = client.get(f"/api/orders/{created['orderNumber']}/bill")

        assert response.status_code == 200
        assert "Test Kitchen" in response.text
        assert "₹200.00" in response.text
        assert "₹250.00" in response.text
        assert "Phone:    9876543210" in response.text

    def test_ticket_for_unknown_order(self, client: TestClient):
        assert client.get("/api/orders/ORD-999/kot").status_code == 404
        assert client.get("/api/orders/ORD-999/bill").status_code == 404


class TestSystemAPI:

    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "operational"
        assert data["storage"] == "memory"

    def test_root(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["orders"] == "/api/orders"

    def test_storage_error_is_500(self, settings):
        app = create_app(settings, storage=FailingStorage())
        with TestClient(app) as client:
            response = client.get("/api/orders")

        assert response.status_code == 500
        assert response.json() == {"message": "A storage error occurred"}
