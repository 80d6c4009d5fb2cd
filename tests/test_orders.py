import pytest

ITEMS = [
    {"id": "p1", "name": "GG Marmont Leather Belt", "price": 450, "image": "/mens-bag-gu.avif", "quantity": 2},
    {"id": "p2", "name": "Gucci Brixton Loafer", "price": 790, "image": "/mens-bag-gu.avif", "quantity": 1},
]

SHIPPING = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "phone": "2025550143",
    "street": "12 Analytical Way",
    "city": "London",
    "state": "Greater London",
    "zipCode": "N1 9GU",
    "country": "United Kingdom",
    "countryCode": "GB",
}


def order_body(**overrides):
    body = {
        "userId": "user-1",
        "orderId": "ORD-1700000000000",
        "items": ITEMS,
        "shippingAddress": SHIPPING,
        "deliveryOption": "express",
        "paymentMethod": "card",
        "total": 1864.2,
    }
    body.update(overrides)
    return body


class TestCreateOrder:

    def test_create_then_list(self, client):
        res = client.post("/api/orders", json=order_body())
        assert res.status_code == 201
        order = res.json()["order"]
        assert order["status"] == "Processing"
        assert order["orderId"] == "ORD-1700000000000"
        assert order["shippingAddress"] == SHIPPING
        assert [it["id"] for it in order["items"]] == ["p1", "p2"]

        orders = client.get("/api/orders", params={"userId": "user-1"}).json()["orders"]
        assert len(orders) == 1
        assert orders[0]["_id"] == order["_id"]
        assert orders[0]["total"] == 1864.2

    def test_zero_total_is_allowed(self, client):
        res = client.post("/api/orders", json=order_body(total=0))
        assert res.status_code == 201

    @pytest.mark.parametrize(
        "field", ["userId", "orderId", "items", "shippingAddress", "deliveryOption", "paymentMethod", "total"]
    )
    def test_missing_field(self, client, field):
        body = order_body()
        del body[field]
        res = client.post("/api/orders", json=body)
        assert res.status_code == 400
        assert res.json() == {"success": False, "message": "Missing required fields"}

    def test_list_requires_user(self, client):
        res = client.get("/api/orders")
        assert res.status_code == 400
        assert res.json()["message"] == "User ID is required"

    def test_list_other_user_is_empty(self, client):
        client.post("/api/orders", json=order_body())
        orders = client.get("/api/orders", params={"userId": "user-2"}).json()["orders"]
        assert orders == []


class TestQuote:

    def test_quote_express(self, client):
        res = client.post("/api/checkout/quote", json={"items": ITEMS, "deliveryOption": "express"})
        assert res.status_code == 200
        assert res.json()["quote"] == {
            "subtotal": 1690,
            "shipping": 25,
            "tax": 135.2,
            "total": 1850.2,
            "itemCount": 3,
        }

    def test_quote_unknown_option(self, client):
        res = client.post("/api/checkout/quote", json={"items": ITEMS, "deliveryOption": "drone"})
        assert res.status_code == 400
        assert res.json()["message"] == "Unknown delivery option: drone"
