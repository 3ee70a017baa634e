import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api.errors import register_error_handlers
from ordering.api.routes import (
    admin_router,
    checkout_router,
    delivery_router,
    order_router,
    payment_router,
)

CUSTOMER = {"X-Actor-Id": "cust-001", "X-Actor-Role": "customer"}
RIDER = {"X-Actor-Id": "rider-001", "X-Actor-Role": "delivery"}
ADMIN = {"X-Actor-Id": "admin-001", "X-Actor-Role": "admin"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(checkout_router)
    app.include_router(payment_router)
    app.include_router(delivery_router)
    app.include_router(admin_router)
    app.include_router(order_router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def checkout(client):
    """POST /checkout as the default customer and return the response body."""

    def _checkout(payment_method="GATEWAY", total_amount=2500.0, headers=CUSTOMER):
        response = client.post(
            "/checkout",
            headers=headers,
            json={
                "items": [
                    {"product_ref": "prod-001", "title": "Ceylon Tea Caddy", "unit_price": 1250.0, "quantity": 2},
                ],
                "address": {
                    "full_name": "Nimal Perera",
                    "address": "12 Galle Road",
                    "city": "Colombo",
                    "phone": "0771234567",
                    "email": "nimal@example.com",
                },
                "total_amount": total_amount,
                "payment_method": payment_method,
            },
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _checkout
