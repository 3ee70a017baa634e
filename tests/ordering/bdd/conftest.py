"""Shared BDD fixtures and step definitions for the Ordering domain."""

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
from ordering.ledger.payment_record import PaymentRecord
from ordering.order.order import Order
from protean import current_domain
from pytest_bdd import given, parsers, then

CUSTOMER = {"X-Actor-Id": "cust-001", "X-Actor-Role": "customer"}
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

# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a customer placed a "{payment_method}" order totalling {amount} {currency}'),
    target_fixture="order_id",
)
def _(client, payment_method, amount, currency):
    response = client.post(
        "/checkout",
        headers=CUSTOMER,
        json={
            "items": [{"product_ref": "prod-001", "title": "Handloom Sarong", "unit_price": float(amount), "quantity": 1}],
            "address": {"full_name": "Nimal Perera", "city": "Colombo"},
            "total_amount": amount,
            "currency": currency,
            "payment_method": payment_method,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["order_id"]

@given(parsers.cfparse('the order is assigned to "{actor_id}"'))
def _(client, order_id, actor_id):
    response = client.post(
        f"/admin/orders/{order_id}/assign",
        headers=ADMIN,
        json={"delivery_actor_id": actor_id},
    )
    assert response.status_code == 200, response.text

# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order payment status is "{status}"'))
def _(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).payment_status == status

@then(parsers.cfparse('the order status is "{status}"'))
def _(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).order_status == status

@then(parsers.cfparse("the order history has {count:d} entries"))
def _(order_id, count):
    assert len(current_domain.repository_for(Order).get(order_id).history) == count

@then(parsers.cfparse("the ledger records an amount of {amount}"))
def _(order_id, amount):
    record = current_domain.repository_for(PaymentRecord).get(order_id)
    assert f"{record.amount:.2f}" == amount

@then(parsers.cfparse("the ledger holds {count:d} record"))
def _(count):
    assert len(current_domain.repository_for(PaymentRecord)._dao.query.all().items) == count
